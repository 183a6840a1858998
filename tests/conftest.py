# tests/conftest.py
from __future__ import annotations

import ipaddress
import logging
import os
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Preserve the original connect so we can delegate when allowed
_ORIG_CONNECT = socket.socket.connect

# Explicit allowlist for loopback
_LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}


def _is_loopback_host(host: str) -> bool:
    """
    Return True if `host` is a loopback literal (IPv4/IPv6) or 'localhost' (case-insensitive).
    Avoid DNS to keep things strictly offline.
    """
    h = host.strip().lower()
    if h in _LOOPBACK_HOSTS:
        return True
    try:
        return ipaddress.ip_address(h).is_loopback
    except ValueError:
        return False


@pytest.fixture(autouse=True)
def _ban_external_network(monkeypatch: pytest.MonkeyPatch):
    """
    Ban all outbound network connections in tests when ARTIFACTCHECK_NETWORK_BAN=1,
    but allow loopback so the local artifact server fixture keeps working.
    """
    if os.environ.get("ARTIFACTCHECK_NETWORK_BAN", "0") != "1":
        yield
        return

    def _connect_guard(self: socket.socket, address):
        if isinstance(address, str):
            return _ORIG_CONNECT(self, address)
        try:
            host = address[0]
        except Exception:
            raise AssertionError(f"Network calls are banned in CI (unexpected address: {address!r})")
        if _is_loopback_host(str(host)):
            return _ORIG_CONNECT(self, address)
        raise AssertionError(f"Network calls are banned in CI (attempted connect to {address!r})")

    monkeypatch.setattr(socket.socket, "connect", _connect_guard, raising=True)
    yield


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch):
    """Keep the developer's TeamCity/options environment out of every test."""
    for name in ("TEAMCITY_BUILD_PROPERTIES_FILE", "PreviousVersion", "ARTIFACTCHECK_CONFIG", "ARTIFACTCHECK_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    # urllib honours proxy variables; the loopback server must be reached directly
    for name in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    yield
    # configure_logging may have attached a handler bound to a captured stream
    log = logging.getLogger("artifactcheck")
    for h in list(log.handlers):
        log.removeHandler(h)
    log.setLevel(logging.NOTSET)


def write_tree(base: Path, files: Dict[str, bytes | str]) -> List[str]:
    """Create files under *base*; returns their paths (as strings) in the given order."""
    out: List[str] = []
    for rel, content in files.items():
        p = base / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            content = content.encode("utf-8")
        p.write_bytes(content)
        out.append(str(p))
    return out


@pytest.fixture
def make_tree():
    return write_tree


class ArtifactServer:
    """Loopback HTTP server standing in for the build server's downloadAll endpoint."""

    def __init__(self) -> None:
        self.body: bytes = b""
        self.status: int = 200
        self.requests: List[Dict[str, Optional[str]]] = []
        server = self

        class _Handler(BaseHTTPRequestHandler):
            def do_GET(self):  # noqa: N802 - http.server naming
                server.requests.append(
                    {
                        "path": self.path,
                        "authorization": self.headers.get("Authorization"),
                        "accept": self.headers.get("Accept"),
                    }
                )
                self.send_response(server.status)
                self.send_header("Content-Type", "application/octet-stream")
                self.send_header("Content-Length", str(len(server.body)))
                self.end_headers()
                if server.body:
                    self.wfile.write(server.body)

            def log_message(self, format, *args):  # noqa: A002 - silence stderr
                pass

        self._httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)

    @property
    def url(self) -> str:
        host, port = self._httpd.server_address[:2]
        return f"http://{host}:{port}"

    def start(self) -> "ArtifactServer":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._httpd.shutdown()
        self._httpd.server_close()


@pytest.fixture
def artifact_server():
    srv = ArtifactServer().start()
    try:
        yield srv
    finally:
        srv.stop()
