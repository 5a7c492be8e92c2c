"""Scoped configuration for tests and embedding."""

import os
from collections.abc import Iterator
from contextlib import contextmanager

from gemini_key_proxy.core.config.config import Config
from gemini_key_proxy.core.config.schema import ConfigSchema


@contextmanager
def temporary_config(
    env_overrides: dict[str, str] | None = None,
    clear_schema_vars: bool = True,
) -> Iterator[Config]:
    """Yield a Config built from a patched environment, then restore it.

    Args:
        env_overrides: Variables to set while the Config is built.
        clear_schema_vars: Unset every ConfigSchema variable first so the
            host environment cannot leak into the result.

    Example:
        with temporary_config({"PROXY_API_KEY": "secret"}) as config:
            assert config.open_mode is False

    The process-wide singleton returned by ``get_config()`` is not touched.
    """
    saved = dict(os.environ)
    try:
        if clear_schema_vars:
            for spec in ConfigSchema.all_specs().values():
                os.environ.pop(spec.name, None)
        os.environ.update(env_overrides or {})
        yield Config()
    finally:
        os.environ.clear()
        os.environ.update(saved)
