"""
Exceptions raised by the artifact fetcher.

Each exception carries an ErrorKind so that a FetchResult can report which
phase of the run failed without the caller inspecting exception types.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Which part of the fetch workflow failed."""

    CONFIGURATION = "configuration"
    RESOLUTION = "resolution"
    TRANSPORT = "transport"
    IO = "io"
    IN_PROGRESS = "in_progress"


class FetcherException(Exception):
    """
    Base exception for the artifact fetcher.

    Only the subclasses are raised; each one sets its `kind`.
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        if type(self) is FetcherException:
            raise TypeError(
                "FetcherException cannot be raised directly, use a subclass"
            )
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigurationError(FetcherException):
    """The credential is unavailable or the fetcher configuration is invalid."""

    kind = ErrorKind.CONFIGURATION


class ResolutionError(FetcherException):
    """The download URL could not be obtained from the resolution endpoint."""

    kind = ErrorKind.RESOLUTION


class TransportError(FetcherException):
    """The archive download failed at the connection or protocol level."""

    kind = ErrorKind.TRANSPORT


class ArtifactIOError(FetcherException):
    """Writing the temp archive, creating directories or extracting failed."""

    kind = ErrorKind.IO


class FetchInProgressError(FetcherException):
    """Another run is already fetching into the same target directory."""

    kind = ErrorKind.IN_PROGRESS
