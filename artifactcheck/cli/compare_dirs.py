"""CLI subcommand: compare: compare two local artifact directories.

Offline counterpart of `run`: no TeamCity properties and no download. Every
file under each directory is an artifact; each directory is its set's root.
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from ..adapters.local import find_files
from ..engine.compare import compare
from ..engine.types import ArtifactSet
from ..errors import CLIError, ConfigError
from ..io.config import Settings, load_options
from ._config import discover_config_path, log_selected
from ._exit import FAILED, OK
from ._io import emit_result
from ._util import add_common_flags, apply_overrides

logger = logging.getLogger(__name__)

_HELP = "Compare two local artifact directories"
_KNOBS = ("verbose", "pairing", "algorithm", "workers")


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = subparsers.add_parser("compare", help=_HELP, description=_HELP)
    sp.add_argument("previous", help="directory holding the previous artifacts")
    sp.add_argument("current", help="directory holding the new artifacts")
    add_common_flags(sp)
    sp.set_defaults(command="compare", func=_run)


def _collect(folder: str, label: str) -> ArtifactSet:
    if not os.path.isdir(folder):
        raise CLIError(f"not a directory: '{folder}'")
    files = find_files(folder, "*")
    logger.info("%d %s files found in: '%s'", len(files), label, folder)
    return ArtifactSet.of(files, label=label, root=folder)


def _run(ns: argparse.Namespace) -> int:
    selected, source = discover_config_path(getattr(ns, "config", None), Path.cwd(), os.environ)
    log_selected(selected, source)
    if source == "explicit-missing":
        raise ConfigError(f"options file not found: '{selected}'")
    opts = load_options(selected)
    settings = apply_overrides(Settings(**{k: v for k, v in opts.items() if k in _KNOBS}), ns)

    previous = _collect(ns.previous, "previous")
    current = _collect(ns.current, "new")
    result = compare(
        previous,
        current,
        settings.verbose,
        pairing=settings.pairing,
        algorithm=settings.algorithm,
        workers=settings.workers,
    )
    emit_result(result, wants_json=ns.json, wants_table=ns.table)
    if result.matches:
        logger.info("Artifacts are identical.")
        return OK
    logger.info("Artifacts differ: %d discrepancies.", len(result.diagnostics))
    return FAILED
