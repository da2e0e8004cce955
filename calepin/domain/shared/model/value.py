from pydantic import BaseModel


class ValueObject(BaseModel): ...
