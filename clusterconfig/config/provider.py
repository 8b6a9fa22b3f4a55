"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import List, Optional, Protocol


@dataclass
class APIConfig:
    """API configuration."""
    host: str
    port: int
    debug: bool
    log_level: str


@dataclass
class AccessConfig:
    """API key access configuration."""
    require_auth: bool
    api_keys: List[str]


@dataclass
class StorageConfig:
    """Audit storage configuration."""
    redis_url: Optional[str]
    audit_max_events: int

    @property
    def audit_enabled(self) -> bool:
        return bool(self.redis_url)


@dataclass
class MetadataConfig:
    """Where the shared metadata view lives."""
    home_context: str

    @property
    def dedicated_thread(self) -> bool:
        return self.home_context == "thread"


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_api_config(self) -> APIConfig:
        ...

    def get_access_config(self) -> AccessConfig:
        ...

    def get_storage_config(self) -> StorageConfig:
        ...

    def get_metadata_config(self) -> MetadataConfig:
        ...


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            host=os.getenv("API_HOST", "0.0.0.0"),
            port=int(os.getenv("API_PORT", "8080")),
            debug=_env_flag("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def get_access_config(self) -> AccessConfig:
        """Get access configuration from environment variables."""
        require_auth = _env_flag("REQUIRE_AUTH", "true")
        api_keys_env = os.getenv("API_KEYS", "")

        # API keys are required whenever auth is - no default for security
        if require_auth and not api_keys_env.strip():
            raise ValueError(
                "API_KEYS environment variable is required when REQUIRE_AUTH is true "
                "(format: service:key,key). Example: admin:your-generated-key"
            )

        return AccessConfig(
            require_auth=require_auth,
            api_keys=[key.strip() for key in api_keys_env.split(",") if key.strip()],
        )

    def get_storage_config(self) -> StorageConfig:
        """Get audit storage configuration from environment variables."""
        return StorageConfig(
            redis_url=os.getenv("REDIS_URL") or None,
            audit_max_events=int(os.getenv("AUDIT_MAX_EVENTS", "10000")),
        )

    def get_metadata_config(self) -> MetadataConfig:
        """Get metadata home context configuration from environment variables."""
        home_context = os.getenv("HOME_CONTEXT", "thread").lower()
        if home_context not in ("thread", "loop"):
            raise ValueError(f"HOME_CONTEXT must be 'thread' or 'loop', got {home_context!r}")
        return MetadataConfig(home_context=home_context)
