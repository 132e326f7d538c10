"""
Artifact fetcher configuration.

This package handles:
1. Default endpoint, request and target constants
2. Loading overrides from a dictionary or a fetcher.toml file
3. Validating timeouts and retry settings
"""

from .fetcher_config import FetcherConfig, DEFAULT_ENDPOINT_URL

__all__ = ["FetcherConfig", "DEFAULT_ENDPOINT_URL"]
