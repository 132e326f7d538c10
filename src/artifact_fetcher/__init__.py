"""
artifact_fetcher installs a platform-specific native binary into a host
editor's asset tree on demand.
"""

from .artifact_config import FetcherConfig
from .artifact_models import FetchResult, FetchState, ProgressEvent, TargetDescriptor
from .fetcher import ArtifactFetcher, SyncArtifactFetcher, try_to_download
from .fetcher_exceptions import (
    ArtifactIOError,
    ConfigurationError,
    ErrorKind,
    FetcherException,
    FetchInProgressError,
    ResolutionError,
    TransportError,
)
from .fetcher_logger import FetcherLogger, LogCategory
from .host import (
    CallbackAssetIndex,
    FileCredentialProvider,
    LoggingProgressReporter,
    NullAssetIndex,
    QueueProgressReporter,
    StaticCredentialProvider,
)

__all__ = [
    "ArtifactFetcher",
    "SyncArtifactFetcher",
    "try_to_download",
    "FetcherConfig",
    "FetchResult",
    "FetchState",
    "ProgressEvent",
    "TargetDescriptor",
    "FetcherException",
    "ConfigurationError",
    "ResolutionError",
    "TransportError",
    "ArtifactIOError",
    "FetchInProgressError",
    "ErrorKind",
    "FetcherLogger",
    "LogCategory",
    "StaticCredentialProvider",
    "FileCredentialProvider",
    "LoggingProgressReporter",
    "QueueProgressReporter",
    "NullAssetIndex",
    "CallbackAssetIndex",
]
