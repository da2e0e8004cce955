from calepin.domain.knowledge.port.gateway import NotionGateway
from calepin.domain.knowledge.port.store import KeyValueStore

__all__ = ["KeyValueStore", "NotionGateway"]
