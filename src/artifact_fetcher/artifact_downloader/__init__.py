"""
Artifact downloader.

This package handles:
1. Downloading the archive from the resolved link
2. Writing it to a temporary file
3. Extracting it into the target directory
4. Reporting progress for both phases
"""

from .downloader import ArchiveDownloader
from .extractor import ArchiveExtractor
from .progress import PhaseProgress

__all__ = ["ArchiveDownloader", "ArchiveExtractor", "PhaseProgress"]
