from __future__ import annotations

import artifactcheck
from artifactcheck.errors import (
    ArchiveError,
    ArtifactCheckError,
    ArtifactIOError,
    CLIError,
    ConfigError,
    DownloadError,
    format_error,
)


def test_error_hierarchy():
    for cls in (ConfigError, ArtifactIOError, ArchiveError, DownloadError, CLIError):
        assert issubclass(cls, ArtifactCheckError)


def test_format_error_prefix_and_message():
    assert format_error(ConfigError("unknown option(s): foo")) == "ConfigError: unknown option(s): foo"
    assert format_error(ArchiveError("")) == "ArchiveError"


def test_structured_errors_keep_their_fields():
    io_err = ArtifactIOError("out/a.dll", "Permission denied")
    assert io_err.path == "out/a.dll"
    assert str(io_err) == "cannot read artifact 'out/a.dll': Permission denied"

    dl = DownloadError("https://tc/x", "Unauthorized", status=401)
    assert (dl.url, dl.status) == ("https://tc/x", 401)
    assert str(dl) == "download failed for 'https://tc/x' (HTTP 401): Unauthorized"


def test_public_surface_is_lazy_and_stable():
    assert artifactcheck.__all__ == sorted(artifactcheck.__all__, key=str)
    assert callable(artifactcheck.compare)
    assert artifactcheck.PAIRINGS == ("positional", "keyed")
    assert artifactcheck.DiagnosticKind.MISSING.value == "missing"
    assert isinstance(artifactcheck.__version__, str)
