"""
Download URL resolution.

Authenticates to the resolution endpoint and returns the signed link the
archive is downloaded from.
"""

from .resolver import DownloadUrlResolver

__all__ = ["DownloadUrlResolver"]
