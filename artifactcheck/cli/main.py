# artifactcheck/cli/main.py
import argparse
import logging
import sys
from typing import List

from ..errors import ArtifactCheckError, CLIError, format_error
from ..io.log import configure_logging
from . import compare_dirs, run
from ._exit import FAILED, USER_ERR

logger = logging.getLogger("artifactcheck.cli")

# Subcommand used when the first token names none (CI invokes the tool bare).
DEFAULT_COMMAND = "run"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="artifactcheck",
        description="Verify build artifacts are identical to the previous build's",
        allow_abbrev=False,
    )
    try:
        from artifactcheck import __version__ as _VER  # lazy import to avoid side effects
    except ImportError:
        _VER = "unknown"
    parser.add_argument(
        "--version",
        action="version",
        version=f"artifactcheck {_VER}",
    )
    subparsers = parser.add_subparsers(dest="command")

    run.register(subparsers)
    compare_dirs.register(subparsers)

    return parser


def _subcommands(parser: argparse.ArgumentParser) -> List[str]:
    sub_actions = [a for a in parser._actions if isinstance(a, argparse._SubParsersAction)]
    return list(sub_actions[0].choices) if sub_actions else []


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    parser = build_parser()

    top_level = {"-h", "--help", "--version"}
    if not argv or (argv[0] not in _subcommands(parser) and argv[0] not in top_level):
        argv = [DEFAULT_COMMAND, *argv]

    ns = parser.parse_args(argv)
    if not hasattr(ns, "func"):
        parser.print_help(sys.stderr)
        return USER_ERR

    # JSON owns stdout; log lines move to stderr.
    configure_logging(
        quiet=ns.quiet,
        debug=ns.debug,
        stream=sys.stderr if ns.json else sys.stdout,
    )
    try:
        return int(ns.func(ns))
    except ArtifactCheckError as e:
        logger.error(format_error(e))
        return FAILED
    except OSError as e:
        logger.error(format_error(CLIError(str(e))))
        return FAILED


if __name__ == "__main__":
    raise SystemExit(main())
