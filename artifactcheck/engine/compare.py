"""Artifact set comparison.

Two pairing strategies share one loop shape and one stop-early policy:

* ``positional``: sort both sides by full path (ordinal) and pair entries by
  index. Count mismatch short-circuits before any hashing.
* ``keyed``: join both sides on the normalized relative path; entries present
  on one side only are reported as ``missing`` / ``added``.

``verbose=False`` stops at the first discrepancy; ``verbose=True`` accumulates
every discrepancy. Inputs are never mutated; sorting happens on copies.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from artifactcheck.errors import ConfigError
from artifactcheck.engine.hashing import (
    DEFAULT_ALGORITHM,
    digest_many,
    file_digest,
    validate_algorithm,
)
from artifactcheck.engine.types import (
    SEPARATORS,
    ArtifactRef,
    ArtifactSet,
    ComparisonResult,
    DiagnosticKind,
    DiagnosticRecord,
    PathLike,
)

logger = logging.getLogger(__name__)

__all__ = ["PAIRINGS", "compare", "relative_keys", "root_offset"]

PAIRINGS = ("positional", "keyed")

SetLike = Union[ArtifactSet, Iterable[Union[ArtifactRef, PathLike]]]


def root_offset(path: str) -> int:
    """Index just past the first path separator in *path* (0 when there is none)."""
    hits = [i for i in (path.find(s) for s in SEPARATORS) if i >= 0]
    return (min(hits) + 1) if hits else 0


def relative_keys(refs: Sequence[ArtifactRef]) -> List[str]:
    """Comparison keys for already-sorted *refs*.

    Refs carrying an explicit root are made relative to it. The others share one
    prefix inferred from the first root-less entry; an entry that does not start
    with that prefix has its own top-level component stripped instead.
    """
    inferred: Optional[str] = None
    keys: List[str] = []
    for ref in refs:
        rel = ref.relative_to_root()
        if rel is not None:
            keys.append(rel)
            continue
        if inferred is None:
            inferred = ref.path[: root_offset(ref.path)]
        if ref.path.startswith(inferred):
            rel = ref.path[len(inferred):]
        else:
            logger.warning(
                "Root prefix mismatch: '%s' is not under '%s'; stripping its own top-level directory",
                ref.path,
                inferred,
            )
            rel = ref.path[root_offset(ref.path):]
        keys.append(rel.replace("\\", "/"))
    return keys


class _Digests:
    """Digest lookup: lazy and uncached when sequential, precomputed on a pool otherwise.

    Stop-early runs always hash lazily, so only the pairs the loop reaches are read.
    """

    def __init__(self, algorithm: str, workers: int, stop_early: bool, pairs: Iterable[Tuple[str, str]]):
        self.algorithm = algorithm
        self._pre: Optional[Dict[str, str]] = None
        if workers > 1 and not stop_early:
            # Pair order, so the first unreadable file matches the sequential pass.
            paths = [p for pair in pairs for p in pair]
            self._pre = digest_many(paths, algorithm, workers=workers)

    def get(self, path: str) -> str:
        if self._pre is not None:
            return self._pre[path]
        return file_digest(path, self.algorithm)


def _record(diags: List[DiagnosticRecord], rec: DiagnosticRecord) -> None:
    logger.info(rec.message())
    diags.append(rec)


def _count_check(prev: ArtifactSet, curr: ArtifactSet) -> Optional[DiagnosticRecord]:
    if len(prev) == len(curr):
        return None
    return DiagnosticRecord(
        DiagnosticKind.COUNT_MISMATCH,
        previous_count=len(prev),
        current_count=len(curr),
    )


def _compare_positional(
    prev: ArtifactSet, curr: ArtifactSet, stop_early: bool, algorithm: str, workers: int
) -> ComparisonResult:
    count = _count_check(prev, curr)
    if count is not None:
        # Count mismatch ends positional pairing before any hashing.
        diags: List[DiagnosticRecord] = []
        _record(diags, count)
        return ComparisonResult(False, diags, 0)

    a = prev.sorted()
    b = curr.sorted()
    ka = relative_keys(a)
    kb = relative_keys(b)
    digests = _Digests(algorithm, workers, stop_early, [(ra.path, rb.path) for ra, rb in zip(a, b)])

    diags = []
    compared = 0
    for ra, rb, rel_a, rel_b in zip(a, b, ka, kb):
        compared += 1
        logger.info("Comparing: '%s' '%s'", ra.path, rb.path)

        if rel_a != rel_b:
            _record(
                diags,
                DiagnosticRecord(
                    DiagnosticKind.NAME_MISMATCH,
                    previous_path=ra.path,
                    current_path=rb.path,
                    previous_rel=rel_a,
                    current_rel=rel_b,
                ),
            )
            if stop_early:
                return ComparisonResult(False, diags, compared)

        h1 = digests.get(ra.path)
        h2 = digests.get(rb.path)
        if h1 != h2:
            _record(
                diags,
                DiagnosticRecord(
                    DiagnosticKind.CONTENT_MISMATCH,
                    previous_path=ra.path,
                    current_path=rb.path,
                    previous_rel=rel_a,
                    current_rel=rel_b,
                    previous_digest=h1,
                    current_digest=h2,
                ),
            )
            if stop_early:
                return ComparisonResult(False, diags, compared)

    return ComparisonResult(not diags, diags, compared)


def _key_map(refs: Sequence[ArtifactRef], label: str) -> Dict[str, ArtifactRef]:
    out: Dict[str, ArtifactRef] = {}
    for ref, key in zip(refs, relative_keys(refs)):
        if key in out:
            logger.warning("Duplicate %s artifact '%s': '%s' replaces '%s'", label, key, ref.path, out[key].path)
        out[key] = ref
    return out


def _compare_keyed(
    prev: ArtifactSet, curr: ArtifactSet, stop_early: bool, algorithm: str, workers: int
) -> ComparisonResult:
    diags: List[DiagnosticRecord] = []
    count = _count_check(prev, curr)
    if count is not None:
        _record(diags, count)
        if stop_early:
            return ComparisonResult(False, diags, 0)

    ma = _key_map(prev.sorted(), prev.label)
    mb = _key_map(curr.sorted(), curr.label)
    shared = sorted(k for k in ma if k in mb)
    digests = _Digests(algorithm, workers, stop_early, [(ma[k].path, mb[k].path) for k in shared])

    compared = 0
    for key in sorted(set(ma) | set(mb)):
        ra = ma.get(key)
        rb = mb.get(key)
        if rb is None:
            rec = DiagnosticRecord(DiagnosticKind.MISSING, previous_path=ra.path, previous_rel=key)
        elif ra is None:
            rec = DiagnosticRecord(DiagnosticKind.ADDED, current_path=rb.path, current_rel=key)
        else:
            compared += 1
            logger.info("Comparing: '%s' '%s'", ra.path, rb.path)
            h1 = digests.get(ra.path)
            h2 = digests.get(rb.path)
            if h1 == h2:
                continue
            rec = DiagnosticRecord(
                DiagnosticKind.CONTENT_MISMATCH,
                previous_path=ra.path,
                current_path=rb.path,
                previous_rel=key,
                current_rel=key,
                previous_digest=h1,
                current_digest=h2,
            )
        _record(diags, rec)
        if stop_early:
            return ComparisonResult(False, diags, compared)

    return ComparisonResult(not diags, diags, compared)


def compare(
    previous: SetLike,
    current: SetLike,
    verbose: bool = False,
    *,
    pairing: str = "positional",
    algorithm: str = DEFAULT_ALGORITHM,
    workers: int = 1,
) -> ComparisonResult:
    """Compare the previous artifact set against the current one.

    Returns a ComparisonResult; ``matches`` is True when no discrepancy was
    recorded. Unreadable artifacts raise ArtifactIOError instead of producing a mismatch,
    whether or not hashing runs on a pool.
    """
    if pairing not in PAIRINGS:
        raise ConfigError(f"unknown pairing {pairing!r}; expected one of {', '.join(PAIRINGS)}")
    algorithm = validate_algorithm(algorithm)
    prev = ArtifactSet.of(previous, label="previous")
    curr = ArtifactSet.of(current, label="current")

    if len(prev) == 0 and len(curr) == 0:
        logger.info("No artifacts on either side: previous=0, new=0")
        return ComparisonResult(True, [], 0)

    stop_early = not verbose
    if pairing == "keyed":
        result = _compare_keyed(prev, curr, stop_early, algorithm, int(workers))
    else:
        result = _compare_positional(prev, curr, stop_early, algorithm, int(workers))
    logger.debug(
        "Comparison finished: matches=%s compared=%d diagnostics=%d",
        result.matches,
        result.compared,
        len(result.diagnostics),
    )
    return result
