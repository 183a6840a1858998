from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

CONFIG_ENV = "ARTIFACTCHECK_CONFIG"
FILENAME = "artifactcheck.yaml"
# Relative default searched under the current working directory
DEFAULT_REL = Path("configs") / FILENAME
# XDG subpath under $XDG_CONFIG_HOME (or ~/.config if unset)
XDG_SUBPATH = Path("artifactcheck") / FILENAME


def _coerce_candidate(p: Path) -> Optional[Path]:
    """Return a concrete options file path if the candidate exists.

    Accepts a file path *or* a directory; directories are resolved to
    "artifactcheck.yaml" inside that directory.
    """
    if p.is_dir():
        p = p / FILENAME
    if p.is_file():
        return p.resolve()
    return None


def discover_config_path(
    explicit: Optional[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[Path], str]:
    """Deterministic options-file discovery.

    Order (only when `explicit`/`--config` is not provided):
      1) $ARTIFACTCHECK_CONFIG (file or dir -> artifactcheck.yaml)
      2) CWD: ./configs/artifactcheck.yaml
      3) XDG: ${XDG_CONFIG_HOME:-$HOME/.config}/artifactcheck/artifactcheck.yaml

    Returns (selected_path or None, source_tag). Source tags: 'explicit',
    'explicit-missing', 'env:ARTIFACTCHECK_CONFIG', 'cwd:configs/artifactcheck.yaml',
    'xdg', 'none'.
    """
    cwd = cwd or Path.cwd()
    env = dict(env or {})

    if explicit:
        expanded = Path(os.path.expandvars(explicit)).expanduser()
        sel = _coerce_candidate(expanded)
        if sel is not None:
            return sel, "explicit"
        return expanded, "explicit-missing"

    cenv = env.get(CONFIG_ENV)
    if cenv:
        sel = _coerce_candidate(Path(os.path.expandvars(cenv)).expanduser())
        if sel is not None:
            return sel, f"env:{CONFIG_ENV}"

    sel = _coerce_candidate((cwd / DEFAULT_REL).expanduser())
    if sel is not None:
        return sel, f"cwd:{DEFAULT_REL.as_posix()}"

    xdg_base = env.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    sel = _coerce_candidate(Path(xdg_base).expanduser() / XDG_SUBPATH)
    if sel is not None:
        return sel, "xdg"

    return None, "none"


def log_selected(path: Optional[Path], source: str) -> None:
    """One debug line naming the options file in use."""
    logger.debug("Options file: selected=%s (source=%s)", path if path else "none", source)


__all__ = [
    "CONFIG_ENV",
    "DEFAULT_REL",
    "XDG_SUBPATH",
    "discover_config_path",
    "log_selected",
]
