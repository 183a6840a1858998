"""Local artifact enumeration from TeamCity-style artifact path patterns."""
from __future__ import annotations

import fnmatch
import logging
import os
from typing import Iterable, List, Optional, Tuple

from ..engine.types import ArtifactRef, ArtifactSet

logger = logging.getLogger(__name__)

__all__ = ["collect_local_artifacts", "split_pattern", "find_files"]


def _has_separator(s: str) -> bool:
    return "/" in s or os.sep in s


def split_pattern(artifact_path: str) -> Tuple[str, str]:
    """Split a pattern into (search root, filename pattern).

    A bare filename pattern searches '.'; otherwise the directory part is the
    root and the last component is the filename pattern. A TeamCity target
    suffix ("src => dest") is ignored.
    """
    source = artifact_path.split("=>", 1)[0].strip()
    if _has_separator(source):
        path, pattern = os.path.split(source)
        return (path or os.sep), pattern
    return ".", source


def find_files(root: str, pattern: str) -> List[str]:
    """All files under *root* (recursively) whose name matches *pattern*, in walk order."""
    found: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            if fnmatch.fnmatch(name, pattern):
                found.append(os.path.join(dirpath, name))
    return found


def collect_local_artifacts(patterns: Iterable[str], cwd: Optional[str] = None) -> ArtifactSet:
    """Enumerate local artifacts for every pattern; results are concatenated.

    Missing directories are logged and skipped. Relative roots resolve against
    *cwd* (default: the process working directory) and paths keep that form.
    """
    refs: List[ArtifactRef] = []
    for artifact_path in patterns:
        if not artifact_path or not artifact_path.strip():
            continue
        path, pattern = split_pattern(artifact_path)
        search = path if (cwd is None or os.path.isabs(path)) else os.path.join(cwd, path)

        if not os.path.isdir(search):
            logger.info("Folder not found: '%s'", path)
            continue

        logger.info("Getting files for: '%s' '%s'", path, pattern)
        files = find_files(search, pattern)
        logger.info("%d files found in: '%s'", len(files), artifact_path)
        refs.extend(ArtifactRef(f, search) for f in files)

    return ArtifactSet(tuple(refs), "current")
