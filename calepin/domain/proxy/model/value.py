"""Proxy value objects."""

from calepin.domain.shared.model.value import ValueObject


class InboundRequest(ValueObject):
    """The parts of a client request the proxy forwards or inspects."""

    method: str
    path: str  # Full request path, prefix included
    query: list[tuple[str, str]] = []
    headers: dict[str, str] = {}  # Lowercase names
    body: bytes = b""


class UpstreamResponse(ValueObject):
    """What the upstream API answered, relayed verbatim."""

    status_code: int
    content_type: str | None = None
    body: bytes = b""
