"""
Tests for the fetcher error taxonomy.
"""

import pytest

from artifact_fetcher.fetcher_exceptions import (
    ArtifactIOError,
    ConfigurationError,
    ErrorKind,
    FetcherException,
    FetchInProgressError,
    ResolutionError,
    TransportError,
)


@pytest.mark.parametrize(
    "error_class, kind",
    [
        (ConfigurationError, ErrorKind.CONFIGURATION),
        (ResolutionError, ErrorKind.RESOLUTION),
        (TransportError, ErrorKind.TRANSPORT),
        (ArtifactIOError, ErrorKind.IO),
        (FetchInProgressError, ErrorKind.IN_PROGRESS),
    ],
)
def test_each_error_reports_its_kind(error_class, kind):
    error = error_class("something failed")
    assert isinstance(error, FetcherException)
    assert error.kind == kind
    assert error.message == "something failed"
    assert str(error) == "something failed"


def test_base_exception_cannot_be_raised_directly():
    with pytest.raises(TypeError):
        FetcherException("no kind")
