from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Union
import os

PathLike = Union[str, "os.PathLike[str]"]

# Both separators count when locating the top-level directory of a path.
SEPARATORS: Tuple[str, ...] = ("/", "\\")

# ---- Core datatypes ----


def _to_key(rel: str) -> str:
    """Normalize a relative path into a comparison key (``/`` separators)."""
    if os.sep != "/":
        rel = rel.replace(os.sep, "/")
    return rel


@dataclass(frozen=True)
class ArtifactRef:
    path: str
    root: Optional[str] = None

    def relative_to_root(self) -> Optional[str]:
        """Key relative to the explicit root, or None when no root was attached."""
        if self.root is None:
            return None
        rel = os.path.relpath(self.path, self.root)
        return _to_key(rel)


@dataclass(frozen=True)
class ArtifactSet:
    """An immutable, ordered collection of artifact references (one side of a comparison)."""

    refs: Tuple[ArtifactRef, ...] = ()
    label: str = "artifacts"

    @classmethod
    def of(
        cls,
        items: Iterable[Union[ArtifactRef, PathLike]],
        *,
        label: str = "artifacts",
        root: Optional[PathLike] = None,
    ) -> "ArtifactSet":
        """Build a set from refs or plain paths; `root` is attached to plain paths only."""
        if isinstance(items, ArtifactSet):
            return items
        r = os.fspath(root) if root is not None else None
        refs = []
        for it in items:
            if isinstance(it, ArtifactRef):
                refs.append(it)
            else:
                refs.append(ArtifactRef(os.fspath(it), r))
        return cls(tuple(refs), label)

    def __len__(self) -> int:
        return len(self.refs)

    def __iter__(self) -> Iterator[ArtifactRef]:
        return iter(self.refs)

    def sorted(self) -> List[ArtifactRef]:
        # Ordinal (code point) order on the full path.
        return sorted(self.refs, key=lambda r: r.path)


class DiagnosticKind(str, Enum):
    COUNT_MISMATCH = "count_mismatch"
    NAME_MISMATCH = "name_mismatch"
    CONTENT_MISMATCH = "content_mismatch"
    MISSING = "missing"
    ADDED = "added"


@dataclass(frozen=True)
class DiagnosticRecord:
    kind: DiagnosticKind
    previous_path: Optional[str] = None
    current_path: Optional[str] = None
    previous_rel: Optional[str] = None
    current_rel: Optional[str] = None
    previous_digest: Optional[str] = None
    current_digest: Optional[str] = None
    previous_count: Optional[int] = None
    current_count: Optional[int] = None

    def message(self) -> str:
        k = self.kind
        if k is DiagnosticKind.COUNT_MISMATCH:
            return f"File count diff: previous={self.previous_count}, new={self.current_count}"
        if k is DiagnosticKind.NAME_MISMATCH:
            return f"Filename diff: '{self.previous_rel}' '{self.current_rel}'"
        if k is DiagnosticKind.CONTENT_MISMATCH:
            return (
                f"Hash diff: '{self.previous_path}' '{self.current_path}' "
                f"{self.previous_digest} {self.current_digest}"
            )
        if k is DiagnosticKind.MISSING:
            return f"Missing file: '{self.previous_rel}' (previous '{self.previous_path}')"
        return f"Added file: '{self.current_rel}' (new '{self.current_path}')"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"kind": self.kind.value}
        for name in (
            "previous_path",
            "current_path",
            "previous_rel",
            "current_rel",
            "previous_digest",
            "current_digest",
            "previous_count",
            "current_count",
        ):
            v = getattr(self, name)
            if v is not None:
                out[name] = v
        out["message"] = self.message()
        return out


@dataclass
class ComparisonResult:
    matches: bool
    diagnostics: List[DiagnosticRecord] = field(default_factory=list)
    compared: int = 0

    def __bool__(self) -> bool:
        return self.matches

    def kinds(self) -> List[DiagnosticKind]:
        return [d.kind for d in self.diagnostics]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": self.matches,
            "compared": self.compared,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }
