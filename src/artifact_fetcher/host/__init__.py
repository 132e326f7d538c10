"""
Host editor capabilities.

The fetcher consumes three capabilities from its host, all injected:
1. A credential provider for the resolution endpoint API key
2. A progress reporter for download and extraction progress
3. An asset index that rescans once new files are written
"""

from .capabilities import (
    CredentialProvider,
    ProgressReporter,
    AssetIndex,
    StaticCredentialProvider,
    FileCredentialProvider,
    LoggingProgressReporter,
    QueueProgressReporter,
    NullAssetIndex,
    CallbackAssetIndex,
)

__all__ = [
    # Interfaces
    "CredentialProvider",
    "ProgressReporter",
    "AssetIndex",
    # Stock implementations
    "StaticCredentialProvider",
    "FileCredentialProvider",
    "LoggingProgressReporter",
    "QueueProgressReporter",
    "NullAssetIndex",
    "CallbackAssetIndex",
]
