from __future__ import annotations

import errno
import os
import random
import tempfile
import time
from pathlib import Path
from typing import Optional

__all__ = ["atomic_replace", "atomic_write_bytes"]

# Transient sharing violations; anything else fails the replace immediately.
_RETRYABLE = {errno.EACCES, errno.EPERM, errno.EBUSY}


def atomic_replace(tmp_path: Path, final_path: Path, *, retries: int = 40, backoff_ms: int = 10) -> None:
    """os.replace with bounded retry on sharing violations.

    The temp file is removed when every attempt fails; the last error is re-raised.
    """
    final_path.parent.mkdir(parents=True, exist_ok=True)
    last_err: Optional[OSError] = None
    delay = backoff_ms / 1000.0

    for _ in range(retries):
        try:
            os.replace(str(tmp_path), str(final_path))
            return
        except PermissionError as e:
            last_err = e
        except OSError as e:
            last_err = e
            if e.errno not in _RETRYABLE:
                break
        time.sleep(delay + random.uniform(0, delay * 0.25))
        delay = min(delay * 1.5, 0.25)

    try:
        if tmp_path.exists():
            tmp_path.unlink()
    finally:
        if last_err is not None:
            raise last_err


def atomic_write_bytes(final_path: Path | str, data: bytes) -> Path:
    """Write *data* to a sibling temp file, fsync it, then swap it into place.

    A reader never observes a half-written archive. Returns the final path.
    """
    final = Path(final_path)
    final.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(prefix=final.name + ".", dir=str(final.parent), delete=False) as tf:
        tmp = Path(tf.name)
    try:
        with open(tmp, "wb", buffering=0) as f:
            f.write(data)
            os.fsync(f.fileno())
        atomic_replace(tmp, final)
    except BaseException:
        if tmp.exists():
            tmp.unlink()
        raise
    return final
