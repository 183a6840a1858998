"""Process exit codes.

A mismatch and a fatal error both exit with FAILED. argparse keeps USER_ERR for usage errors.
"""

OK = 0
FAILED = 1
USER_ERR = 2

__all__ = ["OK", "FAILED", "USER_ERR"]
