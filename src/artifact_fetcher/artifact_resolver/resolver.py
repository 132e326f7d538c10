"""
Download URL resolver.

Exchanges the API key and the download request for a signed, short-lived
download link.
"""

import json
import logging

import httpx
from pydantic import ValidationError

from artifact_fetcher.artifact_config import FetcherConfig
from artifact_fetcher.artifact_models import DownloadLinkResponse
from artifact_fetcher.fetcher_exceptions import ConfigurationError, ResolutionError
from artifact_fetcher.fetcher_logger import FetcherLogger, LogCategory
from artifact_fetcher.host import CredentialProvider


class DownloadUrlResolver:
    """
    Resolves the archive download URL from the resolution endpoint.
    """

    def __init__(
        self,
        config: FetcherConfig,
        credentials: CredentialProvider,
        logger: FetcherLogger,
    ):
        """
        Initialize the resolver.

        Args:
            config: Fetcher configuration with endpoint and request fields
            credentials: Provider of the API key
            logger: Logger for progress and error messages
        """
        self.config = config
        self.credentials = credentials
        self.logger = logger

    def get_api_key(self) -> str:
        """
        Fetch the API key from the credential provider.

        Raises:
            ConfigurationError: If no usable key is configured
        """
        api_key = self.credentials.get_api_key()
        if api_key is None or not api_key.strip():
            raise ConfigurationError(
                "Failed to get download URL. Please check the API key and try again."
            )
        return api_key.strip()

    async def resolve(self, client: httpx.AsyncClient) -> str:
        """
        Request the download link.

        The credential is checked before any network traffic, so a missing key
        never produces a request.

        Args:
            client: HTTP client used for the request

        Returns:
            The download link from the endpoint response

        Raises:
            ConfigurationError: If no API key is available
            ResolutionError: On transport failure, non-2xx status or bad payload
        """
        api_key = self.get_api_key()
        body = self.config.download_request().model_dump()

        self.logger.log(
            f"Requesting download link for {body['service_name']}/{body['version']}",
            logging.DEBUG,
            LogCategory.NETWORK,
        )

        try:
            response = await client.post(
                self.config.endpoint_url,
                json=body,
                headers={
                    self.config.api_key_header: api_key,
                    "Content-Type": "application/json",
                },
                timeout=self.config.resolve_timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise ResolutionError(
                f"Download link request to {self.config.endpoint_url} failed: {e}"
            ) from e

        if response.is_error:
            raise ResolutionError(
                f"Download link request failed with HTTP {response.status_code}"
            )

        try:
            payload = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ResolutionError(
                f"Download link response is not valid JSON: {e}"
            ) from e

        if not isinstance(payload, dict):
            raise ResolutionError("Download link response is not a JSON object")

        try:
            link = DownloadLinkResponse.model_validate(payload)
        except ValidationError as e:
            raise ResolutionError(
                f"Download link response has no usable 'download_link': {e}"
            ) from e

        return link.download_link
