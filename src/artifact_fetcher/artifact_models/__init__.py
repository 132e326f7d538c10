"""
Artifact fetch data models.

This package provides Pydantic data models for the target descriptor, the
resolution endpoint request/response, progress events and fetch results.
"""

from .artifact_models import (
    TargetDescriptor,
    DownloadRequest,
    DownloadLinkResponse,
    ProgressEvent,
    FetchState,
    FetchResult,
)

__all__ = [
    # Target
    "TargetDescriptor",
    # Resolution endpoint
    "DownloadRequest",
    "DownloadLinkResponse",
    # Progress
    "ProgressEvent",
    # Result
    "FetchState",
    "FetchResult",
]
