"""Manages Calepin directory structure following XDG Base Directory spec.

Directory layout:
    ~/.config/calepin/
        config.yaml         # User configuration

    ~/.local/state/calepin/
        logs/
            proxy.log       # Proxy logs

    ~/.cache/calepin/
        notion_cards_cache.json
        notion_cache_metadata.json

When CALEPIN_DATA_DIR is set, everything lives under it instead
(config/, state/, cache/).
"""

import os
from pathlib import Path


class CalepinPaths:
    """Manages Calepin paths following XDG Base Directory specification.

    Supports overriding individual directories for testing.
    """

    def __init__(
        self,
        *,
        config_dir: Path | None = None,
        state_dir: Path | None = None,
        cache_dir: Path | None = None,
    ) -> None:
        """Initialize paths.

        Args:
            config_dir: Override config directory (default: ~/.config/calepin).
            state_dir: Override state directory (default: ~/.local/state/calepin).
            cache_dir: Override cache directory (default: ~/.cache/calepin).
        """
        data_dir = os.environ.get("CALEPIN_DATA_DIR")
        if data_dir:
            base = Path(data_dir)
            default_config = base / "config"
            default_state = base / "state"
            default_cache = base / "cache"
        else:
            home = Path.home()
            default_config = home / ".config" / "calepin"
            default_state = home / ".local" / "state" / "calepin"
            default_cache = home / ".cache" / "calepin"

        self._config_dir = config_dir or default_config
        self._state_dir = state_dir or default_state
        self._cache_dir = cache_dir or default_cache

    # -------------------------------------------------------------------------
    # Base directories
    # -------------------------------------------------------------------------

    @property
    def config_dir(self) -> Path:
        """Config directory (~/.config/calepin)."""
        return self._config_dir

    @property
    def state_dir(self) -> Path:
        """State directory (~/.local/state/calepin)."""
        return self._state_dir

    @property
    def cache_dir(self) -> Path:
        """Cache directory (~/.cache/calepin)."""
        return self._cache_dir

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    @property
    def config_file(self) -> Path:
        """Main config file."""
        return self._config_dir / "config.yaml"

    @property
    def logs_dir(self) -> Path:
        """Logs directory."""
        return self._state_dir / "logs"

    @property
    def proxy_log(self) -> Path:
        """Proxy log file."""
        return self.logs_dir / "proxy.log"

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self._config_dir.mkdir(parents=True, exist_ok=True)
        self._state_dir.mkdir(parents=True, exist_ok=True)
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
