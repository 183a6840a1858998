# artifactcheck/adapters/remote.py
from __future__ import annotations

import base64
import logging
import os
import shutil
import urllib.error
import urllib.request
import zipfile
import zlib
from pathlib import Path
from typing import List, Optional

from ..engine.types import ArtifactRef, ArtifactSet
from ..errors import ArchiveError, DownloadError
from ..io.atomic import atomic_write_bytes
from ..io.config import LAST_SUCCESSFUL, Settings

logger = logging.getLogger(__name__)

__all__ = [
    "ARCHIVE_NAME",
    "EXTRACT_DIR",
    "build_download_url",
    "download_archive",
    "download_previous_artifacts",
    "extract_archive",
]

ARCHIVE_NAME = "previous_artifacts.zip"
EXTRACT_DIR = "previous_artifacts"

# Raised by zipfile for a broken directory, a corrupt or truncated member stream,
# or an unsupported compression method.
_CORRUPT_ARCHIVE = (zipfile.BadZipFile, zlib.error, EOFError, NotImplementedError)


def build_download_url(server_url: str, build_config_id: str, version: Optional[str] = None) -> str:
    version = version or LAST_SUCCESSFUL
    return f"{server_url}/repository/downloadAll/{build_config_id}/{version}"


def _basic_auth(username: Optional[str], password: Optional[str]) -> str:
    token = f"{username or ''}:{password or ''}".encode("utf-8")
    return "Basic " + base64.b64encode(token).decode("ascii")


def download_archive(
    url: str,
    username: Optional[str],
    password: Optional[str],
    *,
    timeout_s: Optional[float] = None,
) -> bytes:
    """GET *url* with basic auth and return the response body. No retries."""
    logger.info("Getting artifacts: '%s'", url)
    try:
        req = urllib.request.Request(
            url,
            headers={
                "Authorization": _basic_auth(username, password),
                "Accept": "application/octet-stream",
            },
            method="GET",
        )
        if timeout_s is None:
            resp = urllib.request.urlopen(req)
        else:
            resp = urllib.request.urlopen(req, timeout=timeout_s)
        with resp:
            return resp.read()
    except urllib.error.HTTPError as e:
        raise DownloadError(url, str(e.reason or ""), status=e.code) from e
    except urllib.error.URLError as e:
        raise DownloadError(url, str(e.reason)) from e
    except (ValueError, OSError) as e:
        # Malformed URL (e.g. server not configured) or a socket-level failure.
        raise DownloadError(url, str(e)) from e


def _list_files(folder: Path) -> List[str]:
    files: List[str] = []
    for dirpath, dirnames, filenames in os.walk(folder):
        dirnames.sort()
        for name in sorted(filenames):
            files.append(os.path.join(dirpath, name))
    return files


def extract_archive(archive: Path, folder: Path) -> List[str]:
    """Unpack *archive* into a fresh *folder* and list every extracted file."""
    if folder.exists():
        logger.info("Removing stale folder: '%s'", folder)
        shutil.rmtree(folder)
    logger.info("Extracting: '%s' -> '%s'", archive, folder)
    try:
        with zipfile.ZipFile(archive) as zf:
            zf.extractall(folder)
    except _CORRUPT_ARCHIVE as e:
        raise ArchiveError(f"cannot extract '{archive}': {e}") from e
    return _list_files(folder)


def download_previous_artifacts(settings: Settings, workdir: Optional[str | Path] = None) -> ArtifactSet:
    """Fetch the previous build's artifact bundle and enumerate it.

    An empty response means the previous build published nothing; that yields
    an empty set, not an error.
    """
    base = Path(workdir) if workdir is not None else Path.cwd()
    url = build_download_url(settings.server_url, settings.build_config_id, settings.previous_version)
    content = download_archive(url, settings.username, settings.password, timeout_s=settings.timeout_s)

    if len(content) == 0:
        logger.info("Found no previous artifact.")
        return ArtifactSet((), "previous")

    logger.info("Got artifacts. Length: %d", len(content))
    archive = atomic_write_bytes(base / ARCHIVE_NAME, content)
    folder = base / EXTRACT_DIR
    files = extract_archive(archive, folder)
    root = str(folder)
    return ArtifactSet(tuple(ArtifactRef(f, root) for f in files), "previous")
