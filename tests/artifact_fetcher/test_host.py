"""
Tests for the stock host capability implementations.
"""

import logging

import pytest

from artifact_fetcher.host import (
    AssetIndex,
    CallbackAssetIndex,
    CredentialProvider,
    FileCredentialProvider,
    LoggingProgressReporter,
    NullAssetIndex,
    ProgressReporter,
    QueueProgressReporter,
    StaticCredentialProvider,
)


@pytest.mark.parametrize(
    "api_key, expected",
    [("abc", "abc"), ("  abc \n", "abc"), ("", None), ("   ", None), (None, None)],
)
def test_static_credential_provider(api_key, expected):
    assert StaticCredentialProvider(api_key).get_api_key() == expected


def test_file_credential_provider_reads_first_key_line(tmp_path):
    key_file = tmp_path / "api.key"
    key_file.write_text("# project key\n\n  key-123  \nkey-456\n", encoding="utf-8")

    assert FileCredentialProvider(key_file).get_api_key() == "key-123"


def test_file_credential_provider_empty_file(tmp_path):
    key_file = tmp_path / "api.key"
    key_file.write_text("# nothing here\n\n", encoding="utf-8")

    assert FileCredentialProvider(key_file).get_api_key() is None


def test_file_credential_provider_missing_file(tmp_path, caplog):
    caplog.set_level(logging.DEBUG, logger="artifact_fetcher")

    assert FileCredentialProvider(tmp_path / "missing.key").get_api_key() is None
    assert "API key file not found" in caplog.text


def test_stock_implementations_satisfy_protocols(tmp_path):
    assert isinstance(StaticCredentialProvider("k"), CredentialProvider)
    assert isinstance(FileCredentialProvider(tmp_path / "k"), CredentialProvider)
    assert isinstance(LoggingProgressReporter(), ProgressReporter)
    assert isinstance(QueueProgressReporter(), ProgressReporter)
    assert isinstance(NullAssetIndex(), AssetIndex)
    assert isinstance(CallbackAssetIndex(lambda: None), AssetIndex)


@pytest.mark.asyncio
async def test_queue_progress_reporter_drain():
    reporter = QueueProgressReporter()
    reporter.show_progress("Downloading", "half way", 0.5)
    reporter.show_progress("Downloading", "done", 1.0)
    reporter.clear_progress()

    events = reporter.drain()

    assert [e.percent for e in events[:2]] == [50, 100]
    assert events[0].title == "Downloading"
    assert events[2] is None
    assert reporter.drain() == []


def test_logging_progress_reporter(caplog):
    caplog.set_level(logging.DEBUG, logger="artifact_fetcher")

    reporter = LoggingProgressReporter()
    reporter.show_progress("Extracting", "Extracting file ios/libgrpc.a...", 0.25)
    reporter.clear_progress()

    assert "Extracting file ios/libgrpc.a... (25%)" in caplog.text


def test_callback_asset_index():
    calls = []
    index = CallbackAssetIndex(lambda: calls.append("refresh"))

    index.refresh()
    index.refresh()

    assert calls == ["refresh", "refresh"]
