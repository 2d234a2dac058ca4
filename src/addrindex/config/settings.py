"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``ADDRINDEX_``, nested via ``__``)
2. YAML config file (``ADDRINDEX_CONFIG_PATH`` env var)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class CacheEngine(enum.StrEnum):
    """Supported response cache backends."""

    MEMORY = "memory"
    REDIS = "redis"


# First block height indexed by the address routes.
DEFAULT_START_HEIGHT = 373601

# Route name -> cache TTL (duration string, see addrindex.cache.durations).
DEFAULT_TTLS: dict[str, str] = {
    "address_utxo": "30s",
    "address_summary": "1m",
    "address_balance": "30s",
    "address_unconfirmed": "10s",
    "transactions": "1m",
    "transaction": "1m",
    "raw_transaction": "1h",
    "block": "1h",
    "block_index": "1h",
    "status": "30s",
    "sync": "30s",
}


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_SERVER__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000


class NodeConfig(BaseSettings):
    """Full node JSON-RPC connection settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_NODE__",
        case_sensitive=False,
    )

    host: str = "localhost:8332"
    user: str = ""
    password: str = ""
    ssl: bool = False
    timeout: float = 30.0
    address_start_height: int = Field(
        default=DEFAULT_START_HEIGHT,
        description="Lowest block height searched by the address transaction listing",
    )

    @property
    def url(self) -> str:
        """RPC endpoint URL (credentials are sent as basic auth, not in the URL)."""
        scheme = "https" if self.ssl else "http"
        return f"{scheme}://{self.host}"


class CacheConfig(BaseSettings):
    """Response cache settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_CACHE__",
        case_sensitive=False,
    )

    engine: CacheEngine = Field(
        default=CacheEngine.MEMORY,
        description="Cache backend: memory or redis",
    )
    url: str = "redis://localhost:6379/0"
    max_connections: int = 10
    max_entries: int = 10000
    ttls: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TTLS))

    def ttl_for(self, route: str) -> str:
        """TTL configured for *route*, falling back to the built-in default."""
        return self.ttls.get(route, DEFAULT_TTLS.get(route, "30s"))


class PricesConfig(BaseSettings):
    """Spot price polling settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_PRICES__",
        case_sensitive=False,
    )

    enabled: bool = True
    refresh_period: float = 60.0
    timeout: float = 10.0


class TaskConfig(BaseSettings):
    """Background refresh loop settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_TASK__",
        case_sensitive=False,
    )

    enabled: bool = True
    blocks_refresh_period: float = 60.0
    blocks_limit: int = 10


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``ADDRINDEX_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="ADDRINDEX_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    debug: bool = False
    version: str = "0.1.0"
    commit: str = ""
    branch: str = ""
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    node: NodeConfig = Field(default_factory=NodeConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    prices: PricesConfig = Field(default_factory=PricesConfig)
    task: TaskConfig = Field(default_factory=TaskConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                values[key] = {**val, **values[key]}
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
