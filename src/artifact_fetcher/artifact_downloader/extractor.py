"""
Archive persistence and extraction.

The archive is written to a temporary directory that is unique per run,
then every entry is extracted into the target directory.
"""

import logging
import pathlib
import shutil
import tempfile
import zipfile
from typing import Callable, List, Optional

from artifact_fetcher.artifact_config import FetcherConfig
from artifact_fetcher.fetcher_exceptions import ArtifactIOError
from artifact_fetcher.fetcher_logger import FetcherLogger, LogCategory

TEMP_DIR_PREFIX = "artifact-fetch-"

EntryCallback = Callable[[int, int, str], None]


class ArchiveExtractor:
    """
    Writes the downloaded archive to disk and extracts it.

    Extraction always overwrites existing files. A failure part way through
    leaves the entries extracted so far in place.
    """

    def __init__(self, config: FetcherConfig, logger: FetcherLogger):
        self.config = config
        self.logger = logger

    def create_temp_archive_path(self) -> pathlib.Path:
        """
        Create a fresh temporary directory and return the archive path in it.

        Raises:
            ArtifactIOError: If the directory could not be created
        """
        try:
            temp_dir = pathlib.Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX))
        except OSError as e:
            raise ArtifactIOError(f"Could not create temporary directory: {e}") from e
        return temp_dir / self.config.temp_archive_name

    def write_archive(self, archive_path: pathlib.Path, data: bytes) -> None:
        """
        Write the archive bytes to `archive_path`.

        Raises:
            ArtifactIOError: If the file could not be written
        """
        try:
            archive_path.write_bytes(data)
        except OSError as e:
            raise ArtifactIOError(
                f"Could not write temporary archive {archive_path}: {e}"
            ) from e

        self.logger.log(
            f"Wrote archive to {archive_path}", logging.DEBUG, LogCategory.FILESYSTEM
        )

    def remove_temp_archive(self, archive_path: pathlib.Path) -> None:
        """Delete the temporary archive and the directory created for it."""
        try:
            shutil.rmtree(archive_path.parent)
        except FileNotFoundError:
            pass
        except OSError as e:
            self.logger.log(
                f"Could not delete temporary archive {archive_path}: {e}",
                logging.WARNING,
                LogCategory.FILESYSTEM,
            )

    def extract(
        self,
        archive_path: pathlib.Path,
        target_dir: pathlib.Path,
        on_entry: Optional[EntryCallback] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[pathlib.Path]:
        """
        Extract every entry of the archive into `target_dir`.

        Args:
            archive_path: ZIP archive to extract
            target_dir: Directory to extract into, created if missing
            on_entry: Called after each entry with (processed, total, entry name)
            should_stop: Polled before each entry; extraction stops when it
                returns True

        Returns:
            Paths of the files written, in archive order

        Raises:
            ArtifactIOError: On a corrupt archive, an entry that would land
                outside `target_dir`, or any filesystem error
        """
        written: List[pathlib.Path] = []
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            root = target_dir.resolve()

            with zipfile.ZipFile(archive_path) as archive:
                entries = archive.infolist()
                total = len(entries)

                for index, entry in enumerate(entries, start=1):
                    if should_stop is not None and should_stop():
                        self.logger.log(
                            f"Extraction stopped after {index - 1} of {total} entries",
                            logging.WARNING,
                            LogCategory.FILESYSTEM,
                        )
                        break

                    destination = self._destination(root, entry.filename)
                    if entry.is_dir():
                        destination.mkdir(parents=True, exist_ok=True)
                    else:
                        destination.parent.mkdir(parents=True, exist_ok=True)
                        with archive.open(entry) as source, open(
                            destination, "wb"
                        ) as sink:
                            shutil.copyfileobj(source, sink)
                        written.append(destination)

                    if on_entry is not None:
                        on_entry(index, total, entry.filename)
        except zipfile.BadZipFile as e:
            raise ArtifactIOError(f"Downloaded archive is not a valid ZIP: {e}") from e
        except OSError as e:
            raise ArtifactIOError(
                f"Failed to extract {archive_path} into {target_dir}: {e}"
            ) from e

        return written

    @staticmethod
    def _destination(root: pathlib.Path, name: str) -> pathlib.Path:
        destination = (root / name).resolve()
        if destination != root and root not in destination.parents:
            raise ArtifactIOError(f"Archive entry escapes the target directory: {name}")
        return destination
