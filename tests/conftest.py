"""Shared test fixtures for oura_hr tests."""

import json
import socket
import sys
import threading
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from urllib.parse import urlparse, parse_qs

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from oura_hr.config import Config
from oura_hr.models import StoredTokens


NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, status_code=200, body=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(body) if body is not None else ""
        self.text = text
        self.content = text.encode()


class FakeHTTP:
    """Records requests.get/post calls and replies with queued responses."""

    def __init__(self):
        self.calls = []
        self.get_response = FakeResponse(200, {"data": []})
        self.post_response = FakeResponse(200, {"access_token": "a", "refresh_token": "b", "expires_in": 3600})
        self.get_error = None
        self.post_error = None

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        if self.get_error:
            raise self.get_error
        return self.get_response

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        if self.post_error:
            raise self.post_error
        return self.post_response

    def respond_get(self, status_code=200, body=None, text=None):
        self.get_response = FakeResponse(status_code, body, text)

    def respond_post(self, status_code=200, body=None, text=None):
        self.post_response = FakeResponse(status_code, body, text)

    def count(self, method):
        return sum(1 for call in self.calls if call[0] == method)


@pytest.fixture(autouse=True)
def no_proxy(monkeypatch):
    """Keep localhost test servers reachable when a proxy is configured."""
    for var in ("http_proxy", "https_proxy", "all_proxy", "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")


@pytest.fixture
def fake_http(monkeypatch):
    """Replace requests.get/post with a recorder."""
    fake = FakeHTTP()
    monkeypatch.setattr(requests, "get", fake.get)
    monkeypatch.setattr(requests, "post", fake.post)
    return fake


@pytest.fixture
def now():
    """Fixed reference time for token and window tests."""
    return NOW


@pytest.fixture
def config(tmp_path):
    """Config with credentials and a temporary cache directory."""
    return Config(client_id="test-id", client_secret="test-secret", cache_dir=tmp_path)


@pytest.fixture
def write_tokens(config):
    """Write a token file, expiring `expires_in` seconds after `base` (NOW by default)."""
    def _write(expires_in=3600, access_token="stored-access", refresh_token="stored-refresh", base=NOW):
        tokens = StoredTokens(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=base + timedelta(seconds=expires_in),
        )
        config.token_path.parent.mkdir(parents=True, exist_ok=True)
        config.token_path.write_text(tokens.model_dump_json())
        return tokens
    return _write


@pytest.fixture
def free_port():
    """A localhost TCP port that is free right now."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def stub_server():
    """Local HTTP server standing in for the Oura token and heart-rate endpoints.

    Set `server.routes[path] = (status, body_dict)` before use. Every request
    is recorded in `server.requests` as (method, path, query, form).
    """

    class Handler(BaseHTTPRequestHandler):
        def _reply(self, method, form):
            url = urlparse(self.path)
            self.server.requests.append((method, url.path, parse_qs(url.query), form))
            status, body = self.server.routes.get(url.path, (404, {"error": "not found"}))
            payload = json.dumps(body).encode()
            self.send_response(status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(payload)))
            self.end_headers()
            self.wfile.write(payload)

        def do_GET(self):
            self._reply("GET", {})

        def do_POST(self):
            length = int(self.headers.get("Content-Length", 0))
            form = parse_qs(self.rfile.read(length).decode())
            self._reply("POST", form)

        def log_message(self, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    server.routes = {}
    server.requests = []
    server.base_url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield server

    server.shutdown()
    server.server_close()
