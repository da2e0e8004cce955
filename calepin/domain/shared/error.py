"""Error hierarchy for Calepin.

Error layers:
- CalepinError: Base class for all Calepin errors
- ConfigurationError: Missing or invalid secret (500 responses)
- RoutingError: Request cannot be mapped to an upstream endpoint (400 responses)
- InfrastructureError: Transport failures and unreadable upstream bodies (500 responses)
- UpstreamError: The Notion API answered with a non-2xx status (client side only;
  the proxy passes those through untouched)

These errors are mapped to JSON responses by the exception handler in
calepin.application.api.rest.errors.
"""

from typing import Any


class CalepinError(Exception):
    """Base class for all Calepin errors.

    Extra keyword arguments are kept as ``context`` and rendered next to
    ``error`` and ``message`` in API responses.
    """

    def __init__(self, message: str, code: str | None = None, **context: Any) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.context = context
        super().__init__(message)


class ConfigurationError(CalepinError):
    """System misconfiguration detected (e.g. no Notion secret)."""


class RoutingError(CalepinError):
    """The inbound request does not resolve to an upstream endpoint."""


# =============================================================================
# Infrastructure Errors (talking to the upstream API)
# =============================================================================


class InfrastructureError(CalepinError):
    """Base class for infrastructure/system errors."""


class TransportError(InfrastructureError):
    """Network failure while contacting the upstream API."""


class InvalidResponseError(InfrastructureError):
    """Upstream body is not what was expected (HTML error page, broken JSON)."""


class UpstreamError(CalepinError):
    """The upstream API rejected the request."""

    def __init__(self, message: str, status: int, **context: Any) -> None:
        super().__init__(message, code="upstream_error", status=status, **context)
        self.status = status
