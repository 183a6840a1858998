from __future__ import annotations

"""Typed error taxonomy (public).

Only `artifactcheck` and `artifactcheck.errors` are public import roots. Everything else is internal.
This module exposes the operator-facing error classes and a small helper `format_error`.
"""

__all__ = [
    "ArtifactCheckError",
    "ConfigError",
    "ArtifactIOError",
    "ArchiveError",
    "DownloadError",
    "CLIError",
    "format_error",
]


class ArtifactCheckError(Exception):
    """Base class for all typed, operator-facing errors in artifactcheck."""
    pass


class ConfigError(ArtifactCheckError):
    """Options file invalid, unknown keys, bad values, unknown hash algorithm."""
    pass


class ArtifactIOError(ArtifactCheckError):
    """An artifact could not be opened or read while hashing. Aborts the comparison."""

    def __init__(self, path: str, detail: str = ""):
        self.path = path
        msg = f"cannot read artifact '{path}'"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class ArchiveError(ArtifactCheckError):
    """Downloaded artifact bundle is not a readable zip archive."""
    pass


class DownloadError(ArtifactCheckError):
    """Previous artifacts could not be fetched (HTTP status, connection, bad URL)."""

    def __init__(self, url: str, detail: str = "", status: int | None = None):
        self.url = url
        self.status = status
        msg = f"download failed for '{url}'"
        if status is not None:
            msg = f"{msg} (HTTP {status})"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class CLIError(ArtifactCheckError):
    """Generic CLI failure wrapper for unexpected errors in CLI code paths."""
    pass


def format_error(e: BaseException) -> str:
    """Return a short, uniform operator-facing message like 'ConfigError: detail'."""
    name = e.__class__.__name__
    msg = str(e).strip()
    return f"{name}: {msg}" if msg else name


# Keep star-export order deterministic for tests and tooling
__all__ = sorted(__all__)
