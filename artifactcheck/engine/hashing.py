"""Streaming content digests for artifacts.

Digests are rendered as uppercase hex. SHA-1 is the default; SHA-256 is accepted.
"""
from __future__ import annotations

import hashlib
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable

from artifactcheck.errors import ArtifactIOError, ConfigError

__all__ = [
    "DEFAULT_ALGORITHM",
    "SUPPORTED_ALGORITHMS",
    "digest_many",
    "file_digest",
    "validate_algorithm",
]

DEFAULT_ALGORITHM = "sha1"
SUPPORTED_ALGORITHMS = ("sha1", "sha256")

_CHUNK = 1 << 16


def validate_algorithm(algorithm: str) -> str:
    """Return the normalized algorithm name or raise ConfigError."""
    algo = str(algorithm or "").strip().lower()
    if algo not in SUPPORTED_ALGORITHMS:
        raise ConfigError(
            f"unsupported hash algorithm {algorithm!r}; expected one of {', '.join(SUPPORTED_ALGORITHMS)}"
        )
    return algo


def _new(algorithm: str):
    return hashlib.new(validate_algorithm(algorithm))


def file_digest(path: str, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """Hash the full content of *path*; any OSError is fatal (ArtifactIOError)."""
    h = _new(algorithm)
    try:
        with open(path, "rb") as f:
            while True:
                chunk = f.read(_CHUNK)
                if not chunk:
                    break
                h.update(chunk)
    except OSError as e:
        raise ArtifactIOError(str(path), e.strerror or str(e)) from e
    return h.hexdigest().upper()


def digest_many(paths: Iterable[str], algorithm: str = DEFAULT_ALGORITHM, *, workers: int = 1) -> Dict[str, str]:
    """Digest each distinct path once on up to *workers* threads.

    Results are keyed by path. When files cannot be read, the ArtifactIOError
    of the earliest such path in *paths* order is raised, the same error a
    sequential pass over *paths* would hit first.
    """
    algorithm = validate_algorithm(algorithm)
    unique = list(dict.fromkeys(paths))
    if not unique:
        return {}

    pool_size = max(1, min(int(workers), len(unique)))
    with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix="artifactcheck-hash") as ex:
        futures = [(p, ex.submit(file_digest, p, algorithm)) for p in unique]

    out: Dict[str, str] = {}
    for p, fut in futures:
        out[p] = fut.result()
    return out
