"""
Artifact fetcher.

Ensures the platform binary is installed under the host asset tree: checks
for it, resolves a download link, downloads and extracts the archive, then
asks the host to re-index its assets.
"""

import asyncio
import concurrent.futures
import logging
import pathlib
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Set, TypeVar, Union

import httpx

from artifact_fetcher.artifact_config import FetcherConfig
from artifact_fetcher.artifact_downloader import (
    ArchiveDownloader,
    ArchiveExtractor,
    PhaseProgress,
)
from artifact_fetcher.artifact_models import FetchResult, FetchState
from artifact_fetcher.artifact_resolver import DownloadUrlResolver
from artifact_fetcher.fetcher_exceptions import (
    ArtifactIOError,
    ErrorKind,
    FetcherException,
    FetchInProgressError,
)
from artifact_fetcher.fetcher_logger import FetcherLogger, LogCategory
from artifact_fetcher.host import (
    AssetIndex,
    CredentialProvider,
    LoggingProgressReporter,
    NullAssetIndex,
    ProgressReporter,
)

EXTRACT_TITLE = "Extracting"

_ERROR_CATEGORIES = {
    ErrorKind.CONFIGURATION: LogCategory.EDITOR,
    ErrorKind.RESOLUTION: LogCategory.NETWORK,
    ErrorKind.TRANSPORT: LogCategory.NETWORK,
    ErrorKind.IO: LogCategory.FILESYSTEM,
    ErrorKind.IN_PROGRESS: LogCategory.EDITOR,
}

# Kinds not listed are logged at ERROR.
_ERROR_LEVELS = {
    ErrorKind.IN_PROGRESS: logging.WARNING,
}

T = TypeVar("T")

# Target directories with a run in flight, process wide.
_in_flight: Set[str] = set()
_in_flight_lock = threading.Lock()


@contextmanager
def _in_flight_guard(target_dir: pathlib.Path) -> Iterator[None]:
    key = str(target_dir.resolve())
    with _in_flight_lock:
        if key in _in_flight:
            raise FetchInProgressError(
                f"A download into {target_dir} is already in progress"
            )
        _in_flight.add(key)
    try:
        yield
    finally:
        with _in_flight_lock:
            _in_flight.discard(key)


class ArtifactFetcher:
    """
    Downloads and installs the platform artifact when it is missing.

    All host interaction goes through the injected credential provider,
    progress reporter and asset index.
    """

    def __init__(
        self,
        data_root: Union[str, pathlib.Path],
        credentials: CredentialProvider,
        progress: Optional[ProgressReporter] = None,
        asset_index: Optional[AssetIndex] = None,
        config: Optional[FetcherConfig] = None,
        logger: Optional[FetcherLogger] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the artifact fetcher.

        Args:
            data_root: Root of the host asset tree
            credentials: Provider of the resolution endpoint API key
            progress: Host progress reporter, defaults to logging progress
            asset_index: Host asset index, defaults to a no-op
            config: Fetcher configuration, defaults to FetcherConfig()
            logger: Logger for progress and error messages
            transport: HTTP transport override, used by tests
        """
        self.data_root = pathlib.Path(data_root)
        self.config = config or FetcherConfig()
        self.logger = logger or FetcherLogger()
        self.progress = progress or LoggingProgressReporter(self.logger)
        self.asset_index = asset_index or NullAssetIndex()
        self.transport = transport

        self.resolver = DownloadUrlResolver(self.config, credentials, self.logger)
        self.downloader = ArchiveDownloader(self.config, self.progress, self.logger)
        self.extractor = ArchiveExtractor(self.config, self.logger)

    def artifact_path(self) -> pathlib.Path:
        return self.config.target().expected_artifact_path(self.data_root)

    def target_directory(self) -> pathlib.Path:
        return self.config.target().target_directory(self.data_root)

    def artifact_exists(self) -> bool:
        """Check whether the artifact is already installed."""
        exists = self.artifact_path().is_file()
        if exists:
            self.logger.log(
                "iOS DLL already exists. No need to download.", logging.DEBUG
            )
        return exists

    async def ensure_artifact(self) -> FetchResult:
        """
        Make sure the artifact is installed, downloading it if needed.

        The existence check always runs first; when the artifact is present
        the run ends immediately without any network traffic.

        Returns:
            FetchResult ending in DONE, or in FAILED with the typed error

        Raises:
            asyncio.CancelledError: If the run was cancelled. Temporary files
                are removed and progress is cleared before it propagates.
        """
        result = FetchResult(
            artifact_path=self.artifact_path(), states=[FetchState.NOT_CHECKED]
        )

        if self.artifact_exists():
            result.already_present = True
            result.states.append(FetchState.DONE)
            return result

        target_dir = self.target_directory()
        self.logger.log("The iOS DLL download has started...", logging.INFO)

        try:
            with _in_flight_guard(target_dir):
                await self._fetch(target_dir, result)
        except FetcherException as e:
            self.logger.log(
                f"Failed to install {result.artifact_path.name} ({e.kind.value}): {e}",
                _ERROR_LEVELS.get(e.kind, logging.ERROR),
                _ERROR_CATEGORIES[e.kind],
            )
            result.error = e
            result.states.append(FetchState.FAILED)
            return result
        except asyncio.CancelledError:
            self.logger.log("The iOS DLL download was cancelled", logging.WARNING)
            raise
        except Exception as e:
            self.logger.log(
                f"Unexpected error while installing {result.artifact_path.name}: {e}",
                logging.ERROR,
            )
            raise

        result.states.append(FetchState.DONE)
        return result

    async def _fetch(self, target_dir: pathlib.Path, result: FetchResult) -> None:
        async with httpx.AsyncClient(
            transport=self.transport,
            follow_redirects=True,
            timeout=httpx.Timeout(self.config.download_timeout_seconds),
        ) as client:
            result.states.append(FetchState.RESOLVING_URL)
            url = await self.resolver.resolve(client)

            result.states.append(FetchState.DOWNLOADING)
            data = await self.downloader.download(client, url)

        result.states.append(FetchState.EXTRACTING)
        archive_path = self.extractor.create_temp_archive_path()
        try:
            await self._run_in_thread(
                None, self.extractor.write_archive, archive_path, data
            )
            del data
            await self._extract(archive_path, target_dir)
            result.states.append(FetchState.CLEANING_UP)
        finally:
            self.extractor.remove_temp_archive(archive_path)

        if not result.artifact_path.is_file():
            raise ArtifactIOError(
                f"Archive extracted but {result.artifact_path} is missing"
            )

        self.logger.log(
            f"Downloaded and extracted to {result.artifact_path}", logging.INFO
        )
        self.asset_index.refresh()

    async def _extract(self, archive_path: pathlib.Path, target_dir: pathlib.Path) -> None:
        loop = asyncio.get_running_loop()
        progress = PhaseProgress(self.progress, EXTRACT_TITLE, throttle=False)
        stop = threading.Event()

        def on_entry(processed: int, total: int, name: str) -> None:
            loop.call_soon_threadsafe(
                progress.update, processed / total, f"Extracting file {name}..."
            )

        try:
            await self._run_in_thread(
                stop.set,
                self.extractor.extract,
                archive_path,
                target_dir,
                on_entry,
                stop.is_set,
            )
        finally:
            progress.clear()

    async def _run_in_thread(
        self, on_cancel: Optional[Callable[[], None]], func: Callable[..., T], *args
    ) -> T:
        """
        Run `func` in a worker thread that always finishes before this returns.

        On cancellation `on_cancel` is called to ask the worker to stop, the
        worker is awaited, and CancelledError is re-raised. Cleanup in the
        caller and the in-flight guard release never run while the worker
        still touches the filesystem.
        """
        worker = asyncio.ensure_future(asyncio.to_thread(func, *args))
        try:
            return await asyncio.shield(worker)
        except asyncio.CancelledError:
            if on_cancel is not None:
                on_cancel()
            await asyncio.wait({worker})
            error = worker.exception()
            if error is not None:
                self.logger.log(
                    f"Worker failed after cancellation: {error}",
                    logging.WARNING,
                    LogCategory.FILESYSTEM,
                )
            raise


class SyncArtifactFetcher:
    """
    Runs an ArtifactFetcher on a background event loop.

    Callers on a UI thread use `submit()` and poll the returned future, or
    `ensure_artifact()` to block until the run ends.
    """

    def __init__(self, fetcher: ArtifactFetcher):
        self.fetcher = fetcher
        self.loop = asyncio.new_event_loop()
        self.loop_thread = threading.Thread(
            target=self.loop.run_forever, name="artifact-fetcher-loop", daemon=True
        )
        self.loop_thread.start()

    @classmethod
    def create(
        cls,
        data_root: Union[str, pathlib.Path],
        credentials: CredentialProvider,
        **kwargs,
    ) -> "SyncArtifactFetcher":
        """
        Creates a SyncArtifactFetcher wrapping a new ArtifactFetcher.

        Keyword arguments are passed to ArtifactFetcher.
        """
        return cls(ArtifactFetcher(data_root, credentials, **kwargs))

    def submit(self) -> "concurrent.futures.Future[FetchResult]":
        """Start a run on the background loop and return its future."""
        return asyncio.run_coroutine_threadsafe(
            self.fetcher.ensure_artifact(), self.loop
        )

    def ensure_artifact(self, timeout: Optional[float] = None) -> FetchResult:
        """
        Run ensure_artifact and wait for it.

        Raises:
            concurrent.futures.TimeoutError: If `timeout` elapsed; the run is
                cancelled before this propagates
        """
        future = self.submit()
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            future.cancel()
            raise

    def close(self) -> None:
        if self.loop.is_closed():
            return
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.loop_thread.join()
        self.loop.close()

    def __enter__(self) -> "SyncArtifactFetcher":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


def try_to_download(
    data_root: Union[str, pathlib.Path],
    credentials: CredentialProvider,
    **kwargs,
) -> FetchResult:
    """
    Install the artifact if it is missing, blocking until done.

    Failures are logged by the fetcher and then raised to the caller.

    Raises:
        FetcherException: The typed error of a failed run
    """
    with SyncArtifactFetcher.create(data_root, credentials, **kwargs) as fetcher:
        result = fetcher.ensure_artifact()
    result.raise_for_error()
    return result
