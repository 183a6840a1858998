import logging
import os
import sys
from typing import Optional, TextIO

LOGGER_NAME = "artifactcheck"
DEBUG_ENV = "ARTIFACTCHECK_DEBUG"

# Marks handlers installed here so repeated configuration replaces them.
_HANDLER_FLAG = "_artifactcheck_console"


def debug_requested(flag: bool = False) -> bool:
    return bool(flag) or os.environ.get(DEBUG_ENV) == "1"


def configure_logging(*, quiet: bool = False, debug: bool = False, stream: Optional[TextIO] = None) -> logging.Logger:
    """Send the package's log lines to *stream* (stdout by default) as bare messages.

    quiet keeps warnings and errors only; debug (or ARTIFACTCHECK_DEBUG=1) adds debug lines.
    Safe to call more than once: the previous console handler is replaced.
    """
    log = logging.getLogger(LOGGER_NAME)
    for h in list(log.handlers):
        if getattr(h, _HANDLER_FLAG, False):
            log.removeHandler(h)

    handler = logging.StreamHandler(stream if stream is not None else sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    setattr(handler, _HANDLER_FLAG, True)
    log.addHandler(handler)

    if debug_requested(debug):
        log.setLevel(logging.DEBUG)
    elif quiet:
        log.setLevel(logging.WARNING)
    else:
        log.setLevel(logging.INFO)
    return log
