#!/usr/bin/env python3
"""CLI subcommand: run: compare this build's artifacts with the previous build's.

Reads the TeamCity properties of the running build, collects the local
artifacts named by the artifact path patterns, downloads the previous build's
bundle and compares the two sets. Exit 0 when identical (or both empty).
"""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from ..adapters.local import collect_local_artifacts
from ..adapters.remote import download_previous_artifacts
from ..engine.compare import compare
from ..errors import ConfigError
from ..io.config import load_settings
from ._config import discover_config_path, log_selected
from ._exit import FAILED, OK
from ._io import emit_result
from ._util import add_common_flags, apply_overrides

logger = logging.getLogger(__name__)

_HELP = "Compare local artifacts with the previous build's artifacts"


def register(subparsers: argparse._SubParsersAction) -> None:
    sp = subparsers.add_parser("run", help=_HELP, description=_HELP)
    add_common_flags(sp)
    sp.set_defaults(command="run", func=_run)


def _run(ns: argparse.Namespace) -> int:
    selected, source = discover_config_path(getattr(ns, "config", None), Path.cwd(), os.environ)
    log_selected(selected, source)
    if source == "explicit-missing":
        raise ConfigError(f"options file not found: '{selected}'")

    settings = apply_overrides(load_settings(selected, os.environ), ns)

    current = collect_local_artifacts(settings.artifact_paths)
    logger.info("Comparing %d new files.", len(current))

    previous = download_previous_artifacts(settings)
    logger.info("Comparing %d previous files.", len(previous))

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
