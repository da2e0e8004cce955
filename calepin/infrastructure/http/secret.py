"""SecretResolver adapters, one per proxy secret mode."""

from collections.abc import Mapping

from calepin.config import PLACEHOLDER_SECRET, Config, SecretMode
from calepin.domain.proxy.port.secret import SecretResolver


class ServerSecret(SecretResolver):
    """Always use the secret held by the proxy."""

    def __init__(self, secret: str | None) -> None:
        self._secret = secret

    def resolve(self, headers: Mapping[str, str]) -> str | None:
        return self._secret


class HeaderOverrideSecret(SecretResolver):
    """A custom request header overrides the server-held secret."""

    def __init__(self, secret: str | None, header: str = "X-Notion-Secret") -> None:
        self._secret = secret
        self._header = header.lower()

    def resolve(self, headers: Mapping[str, str]) -> str | None:
        override = (headers.get(self._header) or "").strip()
        if override and override != PLACEHOLDER_SECRET:
            return override
        return self._secret


class ClientBearerSecret(SecretResolver):
    """Forward the caller's own bearer token."""

    def resolve(self, headers: Mapping[str, str]) -> str | None:
        scheme, _, token = (headers.get("authorization") or "").partition(" ")
        if scheme.lower() != "bearer":
            return None
        return token.strip() or None


def build_secret_resolver(config: Config, mode: SecretMode | None = None) -> SecretResolver:
    """Pick the resolver for the configured (or given) secret mode."""
    mode = mode or config.proxy.secret_mode
    if mode == "client":
        return ClientBearerSecret()
    if mode == "header_override":
        return HeaderOverrideSecret(config.secret, config.proxy.secret_header)
    return ServerSecret(config.secret)
