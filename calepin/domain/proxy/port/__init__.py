from calepin.domain.proxy.port.secret import SecretResolver
from calepin.domain.proxy.port.upstream import UpstreamClient

__all__ = ["SecretResolver", "UpstreamClient"]
