"""Test configuration module for Gemini Key Proxy tests."""

from .test_config import (
    GENERATE_PATH,
    PROXY_TOKEN,
    TEST_HEADERS,
    TEST_KEYS,
)

__all__ = [
    "GENERATE_PATH",
    "PROXY_TOKEN",
    "TEST_HEADERS",
    "TEST_KEYS",
]
