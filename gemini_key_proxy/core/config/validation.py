"""Environment variable loading for the proxy settings.

Values are read according to ``ConfigSchema``. Blank values count as unset,
so ``PROXY_API_KEY=`` in a .env file leaves the proxy in open mode.
"""

import os
from collections.abc import Callable
from typing import Any

from gemini_key_proxy.core.config.schema import ConfigSchema, EnvVarSpec
from gemini_key_proxy.core.key_list import mask_key


class ConfigError(Exception):
    """An environment variable could not be turned into a setting.

    Attributes:
        env_var: The environment variable name
        value: The offending value, masked for secret variables
        message: What is wrong with it
    """

    def __init__(self, env_var: str, value: str, message: str) -> None:
        self.env_var = env_var
        self.value = value
        self.message = message
        super().__init__(f"{env_var}={value}: {message}")

    @classmethod
    def for_spec(cls, spec: EnvVarSpec, raw_value: str, message: str) -> "ConfigError":
        shown = mask_key(raw_value) if spec.secret else raw_value
        return cls(spec.name, shown, message)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "on")


_COERCERS: dict[type, Callable[[str], Any]] = {
    bool: _parse_bool,
    int: lambda raw: int(raw.strip()),
    float: lambda raw: float(raw.strip()),
}


def load_env_var(spec: EnvVarSpec) -> Any:
    """Read one variable, falling back to its default when unset or blank.

    Raises:
        ConfigError: The value cannot be converted or breaks the spec's rule.
    """
    raw_value = os.environ.get(spec.name)
    if raw_value is None or not raw_value.strip():
        return spec.default

    coerce = spec.coerce or _COERCERS.get(spec.type_hint, str)
    try:
        value = coerce(raw_value)
    except (ValueError, TypeError) as e:
        message = f"expected {spec.type_hint.__name__}"
        if not spec.secret:
            message += f", got {raw_value!r}"
        raise ConfigError.for_spec(spec, raw_value, message) from e

    if spec.validator is not None and not spec.validator(value):
        raise ConfigError.for_spec(spec, raw_value, spec.constraint or "invalid value")

    return value


def load_all_specs() -> dict[str, Any]:
    """Load every schema variable without stopping at the first failure.

    Variables that fail are mapped to their ConfigError instead of a value.
    """
    result: dict[str, Any] = {}
    for spec in ConfigSchema.all_specs().values():
        try:
            result[spec.name] = load_env_var(spec)
        except ConfigError as e:
            result[spec.name] = e
    return result


def validate_all() -> list[ConfigError]:
    """Return every configuration problem in the environment (empty if none)."""
    return [value for value in load_all_specs().values() if isinstance(value, ConfigError)]
