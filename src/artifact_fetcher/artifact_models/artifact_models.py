"""
Data models for the artifact fetch workflow.

This module provides the Pydantic models exchanged with the resolution
endpoint, the descriptor of the installed artifact, the progress events
delivered to the host UI, and the result of a single fetch run.
"""

import dataclasses
import pathlib
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from artifact_fetcher.fetcher_exceptions import ErrorKind, FetcherException


# ============================================================================
# Target
# ============================================================================


class TargetDescriptor(BaseModel):
    """
    Where the artifact lives inside the host asset tree.

    The descriptor is immutable; paths are computed from it on demand and
    passed explicitly through a fetch run.
    """

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(
        "Convai/Plugins/gRPC/Grpc.Core/runtimes",
        min_length=1,
        description="Path of the runtimes directory, relative to the data root",
    )
    platform_dir: str = Field(
        "ios", min_length=1, description="Platform subdirectory holding the binary"
    )
    file_name: str = Field(
        "libgrpc.a", min_length=1, description="File name of the expected binary"
    )

    def target_directory(self, data_root: Union[str, pathlib.Path]) -> pathlib.Path:
        """
        Directory the archive is extracted into.

        Args:
            data_root: Root of the host asset tree

        Returns:
            Absolute path of the target directory
        """
        return pathlib.Path(data_root).absolute() / self.relative_path

    def expected_artifact_path(
        self, data_root: Union[str, pathlib.Path]
    ) -> pathlib.Path:
        """
        Path whose presence means the artifact is already installed.

        Args:
            data_root: Root of the host asset tree

        Returns:
            Absolute path of the expected binary
        """
        return self.target_directory(data_root) / self.platform_dir / self.file_name


# ============================================================================
# Resolution endpoint
# ============================================================================


class DownloadRequest(BaseModel):
    """Body of the download-link request."""

    service_name: str = Field("unity-builds", min_length=1)
    version: str = Field("ios", min_length=1)


class DownloadLinkResponse(BaseModel):
    """Response of the resolution endpoint. Only download_link is used."""

    model_config = ConfigDict(extra="ignore")

    download_link: StrictStr = Field(..., min_length=1)


# ============================================================================
# Progress
# ============================================================================


class ProgressEvent(BaseModel):
    """A single progress update shown by the host UI."""

    model_config = ConfigDict(frozen=True)

    title: str
    message: str
    fraction: float = Field(..., ge=0.0, le=1.0)

    @property
    def percent(self) -> int:
        return int(self.fraction * 100)


# ============================================================================
# Fetch result
# ============================================================================


class FetchState(str, Enum):
    """States of a fetch run. DONE and FAILED are terminal."""

    NOT_CHECKED = "not_checked"
    RESOLVING_URL = "resolving_url"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAILED = "failed"


@dataclasses.dataclass
class FetchResult:
    """
    Outcome of one ensure_artifact run.

    A run either ends in DONE, with the artifact installed, or in FAILED with
    the typed error that stopped it.
    """

    artifact_path: pathlib.Path
    states: List[FetchState] = dataclasses.field(default_factory=list)
    already_present: bool = False
    error: Optional[FetcherException] = None

    @property
    def state(self) -> FetchState:
        return self.states[-1] if self.states else FetchState.NOT_CHECKED

    @property
    def ok(self) -> bool:
        return self.state == FetchState.DONE and self.error is None

    @property
    def error_kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def raise_for_error(self) -> None:
        """Re-raise the error that failed the run, if any."""
        if self.error is not None:
            raise self.error

    def __repr__(self) -> str:
        return (
            f"FetchResult(state={self.state.value}, "
            f"path={self.artifact_path}, error={self.error_kind})"
        )
