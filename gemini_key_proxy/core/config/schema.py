"""Environment variables understood by the proxy.

Every setting is declared once here; loading, validation, ``gkp config``
output and the generated Markdown docs are all driven from these entries.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EnvVarSpec:
    """One environment variable.

    Attributes:
        name: Environment variable name
        default: Value used when the variable is unset or blank
        type_hint: Target type (str, int, float, bool)
        description: One-line description for docs and the CLI
        validator: Predicate the coerced value must satisfy
        constraint: Human-readable form of ``validator`` used in errors
        coerce: Replaces the built-in conversion for ``type_hint``
        secret: Mask the value whenever it is displayed
    """

    name: str
    default: Any
    type_hint: type
    description: str
    validator: Callable[[Any], bool] | None = None
    constraint: str | None = None
    coerce: Callable[[str], Any] | None = None
    secret: bool = False


def _positive(value: float) -> bool:
    return value > 0


class ConfigSchema:
    """Registry of the proxy's environment variables."""

    # Server

    HOST = EnvVarSpec(
        name="HOST",
        default="0.0.0.0",
        type_hint=str,
        description="Address the proxy binds to",
    )

    PORT = EnvVarSpec(
        name="PORT",
        default=8000,
        type_hint=int,
        description="Port the proxy listens on",
        validator=lambda port: 1 <= port <= 65535,
        constraint="must be between 1 and 65535",
    )

    LOG_LEVEL = EnvVarSpec(
        name="LOG_LEVEL",
        default="INFO",
        type_hint=str,
        description="Logging level (" + ", ".join(LOG_LEVELS) + ")",
        # Anything after the first word is treated as a trailing .env comment
        validator=lambda level: level.split()[0].upper() in LOG_LEVELS,
        constraint="must be one of " + ", ".join(LOG_LEVELS),
    )

    # Credentials

    PROXY_API_KEY = EnvVarSpec(
        name="PROXY_API_KEY",
        default=None,
        type_hint=str,
        description="Bearer token clients must present; unset means open mode",
        secret=True,
    )

    GOOGLE_API_KEYS = EnvVarSpec(
        name="GOOGLE_API_KEYS",
        default=None,
        type_hint=str,
        description="Comma-separated upstream keys used when a request sends no x-google-api-key",
        secret=True,
    )

    # Upstream

    UPSTREAM_TIMEOUT_SECONDS = EnvVarSpec(
        name="UPSTREAM_TIMEOUT_SECONDS",
        default=None,
        type_hint=float,
        description="Read, write and pool timeout for upstream calls; unset means no limit",
        validator=_positive,
        constraint="must be greater than 0",
    )

    UPSTREAM_CONNECT_TIMEOUT_SECONDS = EnvVarSpec(
        name="UPSTREAM_CONNECT_TIMEOUT_SECONDS",
        default=30.0,
        type_hint=float,
        description="Timeout for opening a connection to the upstream",
        validator=_positive,
        constraint="must be greater than 0",
    )

    REPLAY_BODY_MAX_BYTES = EnvVarSpec(
        name="REPLAY_BODY_MAX_BYTES",
        default=20 * 1024 * 1024,
        type_hint=int,
        description="Largest request body kept in memory for failover (larger bodies: one attempt)",
        validator=_positive,
        constraint="must be greater than 0",
    )

    # Rotation state

    ROTATION_STATE_MAX_ENTRIES = EnvVarSpec(
        name="ROTATION_STATE_MAX_ENTRIES",
        default=None,
        type_hint=int,
        description="Most key lists to remember a rotation position for; unset means no limit",
        validator=_positive,
        constraint="must be greater than 0",
    )

    @classmethod
    def all_specs(cls) -> dict[str, EnvVarSpec]:
        """Map attribute names to their EnvVarSpec."""
        return {
            name: value for name, value in vars(cls).items() if isinstance(value, EnvVarSpec)
        }

    @classmethod
    def get_spec(cls, name: str) -> EnvVarSpec | None:
        """Look up a spec by environment variable name."""
        return next((spec for spec in cls.all_specs().values() if spec.name == name), None)

    @classmethod
    def generate_markdown_docs(cls) -> str:
        lines = [
            "# Gemini Key Proxy configuration",
            "",
            "Generated from `ConfigSchema`. Blank values are treated as unset.",
            "",
            "| Variable | Type | Default | Description |",
            "|---|---|---|---|",
        ]
        for spec in sorted(cls.all_specs().values(), key=lambda s: s.name):
            default = "unset" if spec.default is None else f"`{spec.default}`"
            description = spec.description
            if spec.constraint:
                description += f" ({spec.constraint})"
            lines.append(
                f"| `{spec.name}` | `{spec.type_hint.__name__}` | {default} | {description} |"
            )
        return "\n".join(lines) + "\n"
