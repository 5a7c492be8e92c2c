"""Gemini Key Proxy

A reverse proxy for the Generative Language API that rotates requests across
a pool of upstream API keys and fails over when a key is rejected.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("gemini-key-proxy")
except PackageNotFoundError:
    # Fallback for source checkouts
    __version__ = "1.0.0"
__author__ = "Gemini Key Proxy"
