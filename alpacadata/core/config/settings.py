"""Configuration management for the alpacadata client."""

import os
import tomllib
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from alpacadata.core.exceptions.base import ConfigurationError

DEFAULT_DATA_URL = "https://data.alpaca.markets/v2/stocks"
DEFAULT_CONFIG_PATH = Path.home() / ".alpacadata" / "config.toml"


@dataclass
class CredentialsConfig:
    """API key pair sent with every data request."""

    api_key: str = ""
    secret_key: str = ""

    def __repr__(self) -> str:
        # never echo secrets into logs or tracebacks
        api_key = "***" if self.api_key else ""
        secret_key = "***" if self.secret_key else ""
        return f"CredentialsConfig(api_key={api_key!r}, secret_key={secret_key!r})"

    @property
    def is_complete(self) -> bool:
        return bool(self.api_key.strip()) and bool(self.secret_key.strip())


@dataclass
class EndpointConfig:
    """Provider base URLs."""

    data_url: str = DEFAULT_DATA_URL


@dataclass
class HttpSettings:
    """Transport behaviour."""

    timeout: float = 30.0
    user_agent: str = "alpacadata/0.1.0"


@dataclass
class PaginationConfig:
    """Page size requested from the provider and the local page bound."""

    page_limit: int = 10000
    max_pages: int = 10000


@dataclass
class StorageConfig:
    """DuckDB database location."""

    database: str = ":memory:"


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "INFO"
    file: str | None = None


@dataclass
class AlpacaConfig:
    """alpacadata main configuration."""

    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    endpoints: EndpointConfig = field(default_factory=EndpointConfig)
    http: HttpSettings = field(default_factory=HttpSettings)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        if not self.endpoints.data_url:
            raise ConfigurationError("data_url cannot be empty", setting="endpoints.data_url")
        if self.http.timeout <= 0:
            raise ConfigurationError("timeout must be positive", setting="http.timeout")
        if not 1 <= self.pagination.page_limit <= 10000:
            raise ConfigurationError("page_limit must be between 1 and 10000", setting="pagination.page_limit")
        if self.pagination.max_pages < 1:
            raise ConfigurationError("max_pages must be positive", setting="pagination.max_pages")

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "AlpacaConfig":
        """Build a configuration from a nested dictionary."""
        try:
            return cls(
                credentials=CredentialsConfig(**config_dict.get("credentials", {})),
                endpoints=EndpointConfig(**config_dict.get("endpoints", {})),
                http=HttpSettings(**config_dict.get("http", {})),
                pagination=PaginationConfig(**config_dict.get("pagination", {})),
                storage=StorageConfig(**config_dict.get("storage", {})),
                logging=LoggingConfig(**config_dict.get("logging", {})),
            )
        except TypeError as exc:
            raise ConfigurationError(f"Unknown configuration key: {exc}") from exc

    def to_dict(self) -> dict[str, Any]:
        """Convert to a nested dictionary."""
        return {
            "credentials": asdict(self.credentials),
            "endpoints": asdict(self.endpoints),
            "http": asdict(self.http),
            "pagination": asdict(self.pagination),
            "storage": asdict(self.storage),
            "logging": asdict(self.logging),
        }

    def require_credentials(self) -> CredentialsConfig:
        """Return the credentials, raising when either key is blank."""
        if not self.credentials.api_key.strip():
            raise ConfigurationError("Alpaca API key not configured", setting="credentials.api_key")
        if not self.credentials.secret_key.strip():
            raise ConfigurationError("Alpaca secret key not configured", setting="credentials.secret_key")
        return self.credentials


def _deep_update(d: dict[str, Any], u: dict[str, Any]) -> dict[str, Any]:
    for k, v in u.items():
        if isinstance(v, dict):
            d[k] = _deep_update(d.get(k, {}), v)
        else:
            d[k] = v
    return d


class ConfigManager:
    """Loads configuration from a TOML file overlaid with environment variables."""

    def __init__(self, config_path: Path | None = None, use_env: bool = True):
        """Initialise the manager.

        Args:
            config_path: TOML file path, defaults to ``~/.alpacadata/config.toml``
            use_env: overlay values from ``load_config_from_env``
        """
        self.config_path = config_path or DEFAULT_CONFIG_PATH
        self.use_env = use_env
        self.config = self._load_config()

    def _load_config(self) -> AlpacaConfig:
        config_dict: dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    config_dict = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(
                    f"Failed to parse config file {self.config_path}: {e}",
                    setting=str(self.config_path),
                ) from e

        if self.use_env:
            _deep_update(config_dict, load_config_from_env())

        return AlpacaConfig.from_dict(config_dict)

    def get_config(self) -> AlpacaConfig:
        """Return the current configuration."""
        return self.config

    def update_config(self, **updates: Any) -> None:
        """Apply nested updates, e.g. ``update_config(storage={"database": "x.db"})``."""
        config_dict = self.config.to_dict()
        _deep_update(config_dict, updates)
        self.config = AlpacaConfig.from_dict(config_dict)


def _env_number(convert: type, name: str, raw: str, setting: str) -> Any:
    try:
        return convert(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}", setting=setting) from exc


def load_config_from_env() -> dict[str, Any]:
    """Read configuration values from environment variables."""
    config: dict[str, Any] = {}

    credentials: dict[str, Any] = {}
    api_key = os.getenv("APCA_API_KEY_ID")
    if api_key is not None:
        credentials["api_key"] = api_key
    secret_key = os.getenv("APCA_API_SECRET_KEY")
    if secret_key is not None:
        credentials["secret_key"] = secret_key
    if credentials:
        config["credentials"] = credentials

    data_url = os.getenv("ALPACADATA_DATA_URL")
    if data_url:
        config["endpoints"] = {"data_url": data_url}

    http_timeout = os.getenv("ALPACADATA_HTTP_TIMEOUT")
    if http_timeout is not None:
        config["http"] = {"timeout": _env_number(float, "ALPACADATA_HTTP_TIMEOUT", http_timeout, "http.timeout")}

    max_pages = os.getenv("ALPACADATA_MAX_PAGES")
    if max_pages is not None:
        config["pagination"] = {
            "max_pages": _env_number(int, "ALPACADATA_MAX_PAGES", max_pages, "pagination.max_pages")
        }

    database = os.getenv("ALPACADATA_DATABASE")
    if database:
        config["storage"] = {"database": database}

    logging_config: dict[str, Any] = {}
    log_level = os.getenv("ALPACADATA_LOG_LEVEL")
    if log_level is not None:
        logging_config["level"] = log_level
    log_file = os.getenv("ALPACADATA_LOG_FILE")
    if log_file is not None:
        logging_config["file"] = log_file
    if logging_config:
        config["logging"] = logging_config

    return config
