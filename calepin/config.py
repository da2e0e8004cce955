import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from calepin.domain.knowledge.model.value import SourceStyle

# Value shipped in the sample config; never a usable secret
PLACEHOLDER_SECRET = "VOTRE_CLE_API_NOTION"


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by CALEPIN_CONFIG_FILE env var."""

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get the value for a field from the YAML config."""
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all settings from YAML file."""
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        """Load config from YAML file if specified."""
        config_file = os.environ.get("CALEPIN_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


# =============================================================================
# Upstream API
# =============================================================================


class NotionConfig(BaseModel):
    """Upstream Notion API settings (nested in Config, uses env_nested_delimiter)."""

    api_url: str = "https://api.notion.com/v1"
    version: str = "2022-06-28"  # Pinned Notion-Version header
    timeout: float = 30.0  # Seconds, outbound proxy requests


# =============================================================================
# Proxy
# =============================================================================

SecretMode = Literal["server", "header_override", "client"]


class ProxyConfig(BaseModel):
    """Proxy routing and secret acquisition.

    secret_mode selects where the bearer secret comes from:
    - server: NOTION_SECRET held by the proxy
    - header_override: X-Notion-Secret request header wins over the server secret
    - client: the caller's own Authorization bearer token is forwarded
    """

    prefix: str = "/api/notion"
    legacy_prefixes: list[str] = ["/api/notion-proxy"]
    routing_param: str = "path"  # Set by URL rewriting; never forwarded
    secret_mode: SecretMode = "server"
    secret_header: str = "X-Notion-Secret"
    diagnostic_endpoints: list[str] = ["search"]  # Upstream errors logged in full


# =============================================================================
# Client data service
# =============================================================================


class ClientConfig(BaseModel):
    """How the CLI and card feed reach the API.

    base_url=None talks to notion.api_url directly with the secret;
    otherwise requests go through a running proxy (e.g. http://localhost:3000/api/notion).
    """

    base_url: str | None = None
    page_size: int = 100
    count_cap: int = 1000  # Record counting stops here


class CatalogConfig(BaseModel):
    """Target sources aggregated into the card feed, with their display style."""

    sources: list[SourceStyle] = [
        SourceStyle(name="Calepin musique", display_name="Musique", color="rgb(255 222 98)"),
        SourceStyle(name="Calepin web", display_name="Web", color="rgb(39 150 231)"),
    ]
    default_color: str = "var(--highlight-color)"


class CacheConfig(BaseModel):
    ttl_hours: float = 24.0


# =============================================================================
# Application
# =============================================================================


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "Calepin"
    version: str = "0.1.0"
    description: str = "Notion proxy and card feeds for the Calepin front-end"


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"

    @property
    def file(self) -> str | None:
        """Get log file path from CALEPIN_LOG_FILE env var."""
        return os.environ.get("CALEPIN_LOG_FILE")


class Config(BaseSettings):
    # Unprefixed names shared with the front-end build (.env)
    notion_secret: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("notion_secret", "NOTION_SECRET", "VITE_NOTION_SECRET"),
    )

    server: Server = Server()
    notion: NotionConfig = NotionConfig()
    proxy: ProxyConfig = ProxyConfig()
    client: ClientConfig = ClientConfig()
    catalog: CatalogConfig = CatalogConfig()
    cache: CacheConfig = CacheConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = {
        "env_prefix": "CALEPIN_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows CALEPIN_PROXY__SECRET_MODE override
        "extra": "ignore",  # .env also carries front-end variables
    }

    @field_validator("notion_secret", mode="after")
    @classmethod
    def discard_placeholder(cls, value: SecretStr | None) -> SecretStr | None:
        """Treat an empty or placeholder secret as missing."""
        if value is None:
            return None
        raw = value.get_secret_value().strip()
        if not raw or raw == PLACEHOLDER_SECRET:
            return None
        return value

    @property
    def secret(self) -> str | None:
        """The server-held Notion secret, if configured."""
        return self.notion_secret.get_secret_value() if self.notion_secret else None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - CALEPIN_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup, before other modules
    are imported to ensure all loggers pick up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
