"""
Archive downloader.

Streams the archive from the resolved link into memory while reporting
progress to the host.
"""

import logging
from typing import Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from artifact_fetcher.artifact_config import FetcherConfig
from artifact_fetcher.artifact_downloader.progress import PhaseProgress
from artifact_fetcher.fetcher_exceptions import TransportError
from artifact_fetcher.fetcher_logger import FetcherLogger, LogCategory
from artifact_fetcher.host import ProgressReporter

DOWNLOAD_TITLE = "Downloading required iOS DLL..."
DOWNLOAD_MESSAGE = "Please wait for the download to finish and do not close the editor."


class ArchiveDownloader:
    """
    Downloads the archive bytes.

    Connection, timeout and HTTP status failures become TransportError.
    They are retried with exponential backoff when download_max_retries > 0.
    """

    def __init__(
        self,
        config: FetcherConfig,
        reporter: ProgressReporter,
        logger: FetcherLogger,
    ):
        """
        Initialize the archive downloader.

        Args:
            config: Fetcher configuration with timeouts and retry settings
            reporter: Host progress reporter
            logger: Logger for progress and error messages
        """
        self.config = config
        self.reporter = reporter
        self.logger = logger

    async def download(self, client: httpx.AsyncClient, url: str) -> bytes:
        """
        Download the archive at `url`.

        Progress is cleared when the download ends, whether it succeeded,
        failed or was cancelled.

        Args:
            client: HTTP client used for the request
            url: Resolved download link

        Returns:
            The complete response body

        Raises:
            TransportError: If the download failed after all attempts
        """
        progress = PhaseProgress(self.reporter, DOWNLOAD_TITLE, throttle=True)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.config.download_max_retries + 1),
            wait=wait_exponential(multiplier=self.config.retry_backoff_seconds),
            retry=retry_if_exception_type(TransportError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    data = await self._download_once(client, url, progress)
        finally:
            progress.clear()
        return data

    async def _download_once(
        self, client: httpx.AsyncClient, url: str, progress: PhaseProgress
    ) -> bytes:
        buffer = bytearray()
        try:
            async with client.stream(
                "GET", url, timeout=self.config.download_timeout_seconds
            ) as response:
                if response.is_error:
                    raise TransportError(
                        f"Error downloading file: HTTP {response.status_code}"
                    )

                total = _content_length(response)
                progress.update(0.0, f"{DOWNLOAD_MESSAGE} 0%")
                async for chunk in response.aiter_bytes():
                    buffer.extend(chunk)
                    if total:
                        fraction = response.num_bytes_downloaded / total
                        progress.update(
                            fraction, f"{DOWNLOAD_MESSAGE} {int(min(fraction, 1.0) * 100)}%"
                        )
        except httpx.HTTPError as e:
            raise TransportError(f"Error downloading file: {e}") from e

        progress.update(1.0, f"{DOWNLOAD_MESSAGE} 100%")
        self.logger.log(
            f"Downloaded {len(buffer)} bytes",
            logging.DEBUG,
            LogCategory.NETWORK,
        )
        return bytes(buffer)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self.logger.log(
            f"Download attempt {retry_state.attempt_number} failed ({error}), retrying",
            logging.WARNING,
            LogCategory.NETWORK,
        )


def _content_length(response: httpx.Response) -> Optional[int]:
    value = response.headers.get("Content-Length")
    if value is None:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length > 0 else None
