"""
Configuration for the artifact fetcher.

The defaults reproduce the editor tool's fixed constants. A `fetcher.toml`
file may override them under a `[fetcher]` table:

    [fetcher]
    endpoint_url = "https://api.convai.com/user/downloadAsset"
    download_timeout_seconds = 600
    download_max_retries = 2
"""

import dataclasses
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, Union

try:
    import tomllib
except ModuleNotFoundError:
    # Python < 3.11
    import tomli as tomllib

from artifact_fetcher.artifact_models import DownloadRequest, TargetDescriptor
from artifact_fetcher.fetcher_exceptions import ConfigurationError

DEFAULT_ENDPOINT_URL = "https://api.convai.com/user/downloadAsset"


@dataclass
class FetcherConfig:
    """
    Configuration parameters for the artifact fetcher.
    """

    endpoint_url: str = DEFAULT_ENDPOINT_URL
    api_key_header: str = "X-API-KEY"
    service_name: str = "unity-builds"
    version: str = "ios"
    relative_path: str = "Convai/Plugins/gRPC/Grpc.Core/runtimes"
    platform_dir: str = "ios"
    file_name: str = "libgrpc.a"
    temp_archive_name: str = "downloaded.zip"
    resolve_timeout_seconds: float = 30.0
    download_timeout_seconds: float = 300.0
    download_max_retries: int = 0
    retry_backoff_seconds: float = 1.0

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If any field is out of range or empty
        """
        for name in (
            "endpoint_url",
            "api_key_header",
            "service_name",
            "version",
            "relative_path",
            "platform_dir",
            "file_name",
            "temp_archive_name",
        ):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"'{name}' must be a non-empty string")

        for name in ("resolve_timeout_seconds", "download_timeout_seconds"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"'{name}' must be positive")

        if self.download_max_retries < 0:
            raise ConfigurationError("'download_max_retries' must not be negative")
        if self.retry_backoff_seconds < 0:
            raise ConfigurationError("'retry_backoff_seconds' must not be negative")

    def target(self) -> TargetDescriptor:
        return TargetDescriptor(
            relative_path=self.relative_path,
            platform_dir=self.platform_dir,
            file_name=self.file_name,
        )

    def download_request(self) -> DownloadRequest:
        return DownloadRequest(service_name=self.service_name, version=self.version)

    @classmethod
    def from_dict(cls, env: Dict[str, Any]) -> "FetcherConfig":
        """
        Create a FetcherConfig instance from a dictionary.

        Args:
            env: Mapping of field names to values

        Returns:
            FetcherConfig instance

        Raises:
            ConfigurationError: If the mapping has unknown keys or invalid values
        """
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(env) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown fetcher configuration keys: {', '.join(unknown)}"
            )
        try:
            return cls(**env)
        except TypeError as e:
            raise ConfigurationError(f"Invalid fetcher configuration: {e}") from e

    @classmethod
    def from_toml(cls, path: Union[str, pathlib.Path]) -> "FetcherConfig":
        """
        Load the configuration from the `[fetcher]` table of a TOML file.

        A file without a `[fetcher]` table yields the defaults.

        Raises:
            ConfigurationError: If the file cannot be read or parsed
        """
        try:
            with open(path, "rb") as f:
                toml_dict = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigurationError(
                f"Failed to load fetcher configuration from {path}: {e}"
            ) from e

        section = toml_dict.get("fetcher", {})
        if not isinstance(section, dict):
            raise ConfigurationError("'fetcher' must be a table")
        return cls.from_dict(section)
