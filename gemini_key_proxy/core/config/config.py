"""Configuration singleton for Gemini Key Proxy.

All values are loaded once at initialization time from environment
variables using schema-based validation (see ``schema.py``).
"""

from gemini_key_proxy.core.config.schema import ConfigSchema
from gemini_key_proxy.core.config.validation import load_env_var
from gemini_key_proxy.core.key_list import mask_key, parse_key_list

GOOGLE_API_HOST = "https://generativelanguage.googleapis.com"


class Config:
    """Configuration singleton with direct access to all settings."""

    def __init__(self) -> None:
        self._host: str = load_env_var(ConfigSchema.HOST)
        self._port: int = load_env_var(ConfigSchema.PORT)
        self._log_level: str = load_env_var(ConfigSchema.LOG_LEVEL)
        self._proxy_api_key: str | None = load_env_var(ConfigSchema.PROXY_API_KEY)
        self._google_api_keys: str | None = load_env_var(ConfigSchema.GOOGLE_API_KEYS)
        self._upstream_timeout: float | None = load_env_var(ConfigSchema.UPSTREAM_TIMEOUT_SECONDS)
        self._upstream_connect_timeout: float = load_env_var(
            ConfigSchema.UPSTREAM_CONNECT_TIMEOUT_SECONDS
        )
        self._rotation_state_max_entries: int | None = load_env_var(
            ConfigSchema.ROTATION_STATE_MAX_ENTRIES
        )
        self._replay_body_max_bytes: int = load_env_var(ConfigSchema.REPLAY_BODY_MAX_BYTES)

    # Server settings
    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def log_level(self) -> str:
        # Extract just the first word to tolerate trailing comments in .env files
        return self._log_level.split()[0].upper()

    # Credentials
    @property
    def proxy_api_key(self) -> str | None:
        return self._proxy_api_key

    @property
    def google_api_keys(self) -> str | None:
        return self._google_api_keys

    @property
    def open_mode(self) -> bool:
        return not self._proxy_api_key

    # Upstream settings
    @property
    def upstream_base_url(self) -> str:
        return GOOGLE_API_HOST

    @property
    def upstream_timeout(self) -> float | None:
        return self._upstream_timeout

    @property
    def upstream_connect_timeout(self) -> float:
        return self._upstream_connect_timeout

    @property
    def replay_body_max_bytes(self) -> int:
        return self._replay_body_max_bytes

    # Rotation state
    @property
    def rotation_state_max_entries(self) -> int | None:
        return self._rotation_state_max_entries

    # Utility methods
    @property
    def proxy_api_key_hash(self) -> str:
        return "<not-set>" if not self._proxy_api_key else mask_key(self._proxy_api_key)

    @property
    def default_key_count(self) -> int:
        if not self._google_api_keys:
            return 0
        return len(parse_key_list(self._google_api_keys))

    @classmethod
    def reset_singleton(cls) -> None:
        """Reset the global config singleton for test isolation.

        WARNING: Never call this in production code!
        """
        global config
        config = cls()


# Module-level singleton, created on first use by get_config()
config: Config | None = None
