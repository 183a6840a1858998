from __future__ import annotations

import argparse
import dataclasses
from typing import TYPE_CHECKING

from ..engine.compare import PAIRINGS
from ..engine.hashing import SUPPORTED_ALGORITHMS

if TYPE_CHECKING:
    from ..io.config import Settings

__all__ = ["add_common_flags", "apply_overrides"]


def add_common_flags(sp: argparse.ArgumentParser) -> argparse.ArgumentParser:
    """
    Wire the flags shared by every comparing subcommand:
    - -c/--config: explicit options file (otherwise discovered)
    - --json / --table (mutually exclusive): machine-readable JSON or plain ASCII table on stdout
    - --quiet / --debug: log verbosity
    - --stop-early: stop at the first discrepancy instead of reporting all
    - --pairing / --algorithm / --workers: comparison knobs (override the options file)
    """
    sp.add_argument("-c", "--config", dest="config", default=None, help="YAML options file")
    fmt = sp.add_mutually_exclusive_group()
    fmt.add_argument("--json", action="store_true", help="JSON result on stdout (logs move to stderr)")
    fmt.add_argument("--table", action="store_true", help="Plain table of discrepancies (no color)")
    sp.add_argument("--quiet", action="store_true", help="only log warnings and errors")
    sp.add_argument("--debug", action="store_true", help="log debug lines too")
    sp.add_argument(
        "--stop-early",
        dest="stop_early",
        action="store_true",
        default=None,
        help="stop at the first discrepancy",
    )
    sp.add_argument("--pairing", choices=PAIRINGS, default=None, help="how artifacts are paired")
    sp.add_argument("--algorithm", choices=SUPPORTED_ALGORITHMS, default=None, help="content digest")
    sp.add_argument("--workers", type=int, default=None, help="hash files on N threads")
    return sp


def apply_overrides(settings: "Settings", ns: argparse.Namespace) -> "Settings":
    """Return *settings* with any explicitly given CLI flags applied."""
    changes = {}
    if getattr(ns, "stop_early", None):
        changes["verbose"] = False
    for name in ("pairing", "algorithm", "workers"):
        v = getattr(ns, name, None)
        if v is not None:
            changes[name] = v
    if "workers" in changes and changes["workers"] < 1:
        changes["workers"] = 1
    return dataclasses.replace(settings, **changes) if changes else settings
