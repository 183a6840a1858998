"""artifactcheck: public API surface.

Only `artifactcheck` and `artifactcheck.errors` are public. Everything else is internal.
This module also resolves `__version__` deterministically across installs.
"""
from __future__ import annotations

from typing import Any as _Any
from . import errors as errors  # re-export for star-import; noqa: F401

from importlib.metadata import version as _pkg_version, PackageNotFoundError


def _version_from_metadata() -> str | None:
    try:
        return _pkg_version("artifactcheck")
    except PackageNotFoundError:
        return None


def _version_from_fallback_module() -> str | None:
    try:
        from ._version import __version__ as v
    except ImportError:
        return None
    return v


__version__ = _version_from_fallback_module() or _version_from_metadata() or "0+unknown"


def __getattr__(name: str) -> _Any:  # PEP 562 lazy exports to avoid import-time cycles
    if name in ("compare", "PAIRINGS"):
        from .engine import compare as _compare_mod

        _g = globals()
        _g.update({"compare": _compare_mod.compare, "PAIRINGS": _compare_mod.PAIRINGS})
        return _g[name]
    if name in ("ArtifactRef", "ArtifactSet", "ComparisonResult", "DiagnosticKind", "DiagnosticRecord"):
        from .engine import types as _types

        value = getattr(_types, name)
        globals()[name] = value
        return value
    if name == "file_digest":
        from .engine.hashing import file_digest as _file_digest

        globals()["file_digest"] = _file_digest
        return _file_digest
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return list(__all__)


# Star-export surface (deterministic ordering).
__all__ = [
    "ArtifactRef",
    "ArtifactSet",
    "ComparisonResult",
    "DiagnosticKind",
    "DiagnosticRecord",
    "PAIRINGS",
    "__version__",
    "compare",
    "errors",
    "file_digest",
]
