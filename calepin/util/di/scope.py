"""Custom Dishka scopes for Calepin."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """Calepin dependency injection scopes.

    Hierarchy: APP -> REQUEST

    - APP: Application lifetime (config, the upstream HTTP client, services)
    - REQUEST: One proxied HTTP request
    """

    APP = new_scope("APP")
    REQUEST = new_scope("REQUEST")
