"""Configuration package for Gemini Key Proxy."""

from gemini_key_proxy.core.config import config as _config_module
from gemini_key_proxy.core.config.config import GOOGLE_API_HOST, Config
from gemini_key_proxy.core.config.validation import ConfigError, validate_all


def get_config() -> Config:
    """Return the process-wide config, loading it from the environment on first use.

    Raises:
        ConfigError: If an environment variable fails validation.
    """
    if _config_module.config is None:
        _config_module.config = Config()
    return _config_module.config


__all__ = ["Config", "ConfigError", "GOOGLE_API_HOST", "get_config", "validate_all"]
