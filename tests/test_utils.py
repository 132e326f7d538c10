"""
Test doubles and helpers shared by the artifact fetcher tests.
"""

import io
import json
import zipfile
from typing import Dict, List, Optional, Tuple

import httpx

from artifact_fetcher.artifact_config import DEFAULT_ENDPOINT_URL

DOWNLOAD_LINK = "http://x/y.zip"
ARTIFACT_ENTRY = "ios/libgrpc.a"


def make_zip(entries: Dict[str, bytes]) -> bytes:
    """Build an in-memory ZIP archive. Names ending in '/' become directories."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            if name.endswith("/"):
                archive.writestr(zipfile.ZipInfo(name), b"")
            else:
                archive.writestr(name, data)
    return buffer.getvalue()


class RecordingProgressReporter:
    """Records every progress call made by the fetcher."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str, float]] = []
        self.clears = 0

    def show_progress(self, title: str, message: str, fraction: float) -> None:
        self.events.append((title, message, fraction))

    def clear_progress(self) -> None:
        self.clears += 1

    def fractions(self, title: str) -> List[float]:
        return [fraction for t, _, fraction in self.events if t == title]


class RecordingAssetIndex:
    """Counts asset index refreshes."""

    def __init__(self) -> None:
        self.refreshes = 0

    def refresh(self) -> None:
        self.refreshes += 1


async def _chunks(data: bytes, size: int):
    for start in range(0, len(data), size):
        yield data[start : start + size]


class FakeAssetService:
    """
    Serves the resolution endpoint and the archive download.

    Every request is recorded. `download_status` and `resolve_status` turn
    the corresponding call into an HTTP error; `link_payload` replaces the
    resolution response body.
    """

    def __init__(
        self,
        archive: bytes,
        chunk_size: Optional[int] = None,
        send_length: bool = True,
    ) -> None:
        self.archive = archive
        self.chunk_size = chunk_size
        self.send_length = send_length
        self.resolve_status = 200
        self.download_status = 200
        self.link_payload: object = {"download_link": DOWNLOAD_LINK}
        self.requests: List[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST" and str(request.url) == DEFAULT_ENDPOINT_URL:
            if self.resolve_status != 200:
                return httpx.Response(self.resolve_status, json={"error": "denied"})
            return httpx.Response(200, content=json.dumps(self.link_payload).encode())
        if request.method == "GET" and str(request.url) == DOWNLOAD_LINK:
            return self.download_response()
        return httpx.Response(404)

    def download_response(self) -> httpx.Response:
        if self.download_status != 200:
            return httpx.Response(self.download_status)
        if self.chunk_size is None:
            return httpx.Response(200, content=self.archive)
        headers = {}
        if self.send_length:
            headers["Content-Length"] = str(len(self.archive))
        return httpx.Response(
            200, headers=headers, content=_chunks(self.archive, self.chunk_size)
        )

    def methods(self) -> List[str]:
        return [request.method for request in self.requests]
