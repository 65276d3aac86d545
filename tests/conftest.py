"""
Pytest configuration and shared fixtures for lifter tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

import gzip
from http.server import BaseHTTPRequestHandler, HTTPServer
import io
from pathlib import Path
import tarfile
import threading
from typing import Any
import zipfile

import pytest
import yaml

from lifter.logging import SilentLogger, set_global_logger

RG_VERSION = "13.0.0"
RG_ASSET = f"ripgrep-{RG_VERSION}-x86_64-unknown-linux-musl.tar.gz"
RG_URL = (
    f"https://github.com/BurntSushi/ripgrep/releases/download/{RG_VERSION}/{RG_ASSET}"
)


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Keep the global logger quiet between tests."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def create_ini_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary ini stores.

    Usage:
        ini_path = create_ini_file("lifter.ini", {"rg": {"page_url": "..."}})
    """

    def _create(filename: str, sections: dict[str, dict[str, str]]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        lines: list[str] = []
        for name, fields in sections.items():
            lines.append(f"[{name}]")
            for key, value in fields.items():
                lines.append(f"{key} = {value}")
            lines.append("")
        path.write_text("\n".join(lines), encoding="utf-8")
        return path

    return _create


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML stores.

    Usage:
        yaml_path = create_yaml_file("lifter.yaml", {"rg": {"page_url": "..."}})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(data, f)
        return path

    return _create


def make_tar(members: dict[str, bytes], mode: str = "w:gz") -> bytes:
    """Build an in-memory tar archive from name -> content."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode=mode) as tar:
        for name, content in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(content)
            tar.addfile(info, io.BytesIO(content))
    return buf.getvalue()


def make_zip(members: dict[str, bytes]) -> bytes:
    """Build an in-memory zip archive from name -> content."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buf.getvalue()


def make_gzip(content: bytes) -> bytes:
    return gzip.compress(content)


@pytest.fixture
def ripgrep_release_json() -> str:
    """Trimmed GitHub `releases/latest` payload for ripgrep."""
    return f"""
    {{
        "tag_name": "{RG_VERSION}",
        "name": "{RG_VERSION}",
        "assets": [
            {{
                "name": "ripgrep-{RG_VERSION}-arm-unknown-linux-gnueabihf.tar.gz",
                "browser_download_url": "https://github.com/BurntSushi/ripgrep/releases/download/{RG_VERSION}/ripgrep-{RG_VERSION}-arm-unknown-linux-gnueabihf.tar.gz"
            }},
            {{
                "name": "ripgrep-{RG_VERSION}-x86_64-pc-windows-msvc.zip",
                "browser_download_url": "https://github.com/BurntSushi/ripgrep/releases/download/{RG_VERSION}/ripgrep-{RG_VERSION}-x86_64-pc-windows-msvc.zip"
            }},
            {{
                "name": "{RG_ASSET}",
                "browser_download_url": "{RG_URL}"
            }}
        ]
    }}
    """


class _ScriptedHandler(BaseHTTPRequestHandler):
    """Answers each GET with the next step of the server's script.

    A step is a ``(status, body)`` pair, or None to drop the connection
    without a response. The last step repeats once the script runs out.
    """

    def log_message(self, format, *args):
        pass

    def do_GET(self):
        server = self.server
        server.hits += 1
        step = server.script.pop(0) if len(server.script) > 1 else server.script[0]
        if step is None:
            self.close_connection = True
            return
        status, body = step
        payload = body.encode()
        self.send_response(status)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)


@pytest.fixture
def scripted_server(monkeypatch):
    """
    Factory fixture for a local HTTP server replaying scripted responses.

    Requests travel through the real transport adapter, so the session's
    urllib3 Retry is exercised.

    Usage:
        server, url = scripted_server((503, ""), (200, "ok"))
        ...
        assert server.hits == 2
    """
    for var in ("HTTP_PROXY", "http_proxy", "ALL_PROXY", "all_proxy"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    servers: list[HTTPServer] = []

    def _start(*steps):
        server = HTTPServer(("127.0.0.1", 0), _ScriptedHandler)
        server.script = list(steps)
        server.hits = 0
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        host, port = server.server_address[:2]
        return server, f"http://{host}:{port}/releases"

    yield _start

    for server in servers:
        server.shutdown()
        server.server_close()
