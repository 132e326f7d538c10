"""
Capabilities the fetcher consumes from the host editor.

The fetcher never talks to the editor directly: credential lookup, progress
display and asset re-indexing are injected so they can be replaced by test
doubles or by adapters for a specific editor.
"""

import asyncio
import logging
import pathlib
from typing import Callable, List, Optional, Protocol, Union, runtime_checkable

from artifact_fetcher.artifact_models import ProgressEvent
from artifact_fetcher.fetcher_logger import FetcherLogger, LogCategory


# ============================================================================
# Interfaces
# ============================================================================


@runtime_checkable
class CredentialProvider(Protocol):
    """Supplies the API key for the resolution endpoint."""

    def get_api_key(self) -> Optional[str]:
        """Return the API key, or None if none is configured."""
        ...


@runtime_checkable
class ProgressReporter(Protocol):
    """Displays progress for a long-running step."""

    def show_progress(self, title: str, message: str, fraction: float) -> None:
        ...

    def clear_progress(self) -> None:
        ...


@runtime_checkable
class AssetIndex(Protocol):
    """Host asset database that must rescan after files are written."""

    def refresh(self) -> None:
        ...


# ============================================================================
# Credential providers
# ============================================================================


class StaticCredentialProvider:
    """Returns a key fixed at construction time."""

    def __init__(self, api_key: Optional[str]) -> None:
        self._api_key = api_key

    def get_api_key(self) -> Optional[str]:
        if self._api_key is None or not self._api_key.strip():
            return None
        return self._api_key.strip()


class FileCredentialProvider:
    """
    Reads the API key from a key file stored alongside the project settings.

    The first non-empty, non-comment line of the file is the key. A missing or
    empty file means no key is configured.
    """

    def __init__(
        self, path: Union[str, pathlib.Path], logger: Optional[FetcherLogger] = None
    ) -> None:
        self.path = pathlib.Path(path)
        self.logger = logger or FetcherLogger()

    def get_api_key(self) -> Optional[str]:
        if not self.path.is_file():
            self.logger.log(
                f"API key file not found: {self.path}",
                logging.DEBUG,
                LogCategory.FILESYSTEM,
            )
            return None

        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            self.logger.log(
                f"Could not read API key file {self.path}: {e}",
                logging.ERROR,
                LogCategory.FILESYSTEM,
            )
            return None

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if line and not line.startswith("#"):
                return line
        return None


# ============================================================================
# Progress reporters
# ============================================================================


class LoggingProgressReporter:
    """Writes progress to the fetcher log."""

    def __init__(self, logger: Optional[FetcherLogger] = None) -> None:
        self.logger = logger or FetcherLogger()

    def show_progress(self, title: str, message: str, fraction: float) -> None:
        self.logger.log(f"{title} {message} ({int(fraction * 100)}%)", logging.DEBUG)

    def clear_progress(self) -> None:
        pass


class QueueProgressReporter:
    """
    Forwards progress into an asyncio.Queue.

    Each show_progress call puts a ProgressEvent; clear_progress puts None.
    The caller drains the queue with `drain()` or awaits `queue.get()` while
    the fetch runs.
    Must be used from the event loop thread that owns the queue.
    """

    def __init__(self, queue: Optional["asyncio.Queue[Optional[ProgressEvent]]"] = None):
        self.queue: "asyncio.Queue[Optional[ProgressEvent]]" = queue or asyncio.Queue()

    def show_progress(self, title: str, message: str, fraction: float) -> None:
        self.queue.put_nowait(
            ProgressEvent(title=title, message=message, fraction=fraction)
        )

    def clear_progress(self) -> None:
        self.queue.put_nowait(None)

    def drain(self) -> List[Optional[ProgressEvent]]:
        """Return the events queued so far, in order. None marks a clear."""
        drained: List[Optional[ProgressEvent]] = []
        while not self.queue.empty():
            drained.append(self.queue.get_nowait())
        return drained


# ============================================================================
# Asset indexes
# ============================================================================


class NullAssetIndex:
    """Asset index for hosts that need no rescan."""

    def refresh(self) -> None:
        pass


class CallbackAssetIndex:
    """Calls a host function to rescan assets."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def refresh(self) -> None:
        self._callback()
