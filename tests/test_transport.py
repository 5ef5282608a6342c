import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from imgharvest.transport import RequestsTransport, TransportError
from imgharvest.urls import is_accessible

IMAGE_BODY = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


class _Handler(BaseHTTPRequestHandler):
    def log_message(self, format, *args):
        pass

    def _reply(self, status, body=b"", headers=None):
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(body)

    def _route(self):
        self.server.hits.append((self.command, self.path))
        if self.path == "/ok.png":
            self._reply(200, IMAGE_BODY, {"Content-Type": "image/png"})
        elif self.path == "/moved.png":
            self._reply(301, headers={"Location": "/ok.png"})
        elif self.path == "/redirect.png":
            self._reply(302, headers={"Location": "/ok.png"})
        elif self.path == "/missing.png":
            self._reply(404, b"<html>not found</html>", {"Content-Type": "text/html"})
        elif self.path == "/truncated.png":
            self.send_response(200)
            self.send_header("Content-Length", "4096")
            self.end_headers()
            self.wfile.write(IMAGE_BODY)
            self.wfile.flush()
            self.close_connection = True
        elif self.path == "/slow.png":
            self.wfile.write(b"HTTP/1.0 200 OK\r\n")
            self.wfile.flush()
            for index in range(4):
                time.sleep(0.3)
                self.wfile.write(f"X-Slow-{index}: 1\r\n".encode("ascii"))
                self.wfile.flush()
            self.wfile.write(b"Content-Length: 0\r\n\r\n")
            self.wfile.flush()
        else:
            self._reply(404)

    do_GET = _route
    do_HEAD = _route


@pytest.fixture
def server():
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    httpd.hits = []
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield httpd
    finally:
        httpd.shutdown()
        httpd.server_close()


def _url(server, path):
    host, port = server.server_address[:2]
    return f"http://{host}:{port}{path}"


def test_head_status_accepts_200(server):
    transport = RequestsTransport()
    assert transport.head_status(_url(server, "/ok.png"), 5.0) == 200
    assert server.hits == [("HEAD", "/ok.png")]


def test_head_status_does_not_follow_redirects(server):
    transport = RequestsTransport()

    assert transport.head_status(_url(server, "/moved.png"), 5.0) == 301
    assert not is_accessible(_url(server, "/moved.png"), transport, 5.0)
    assert ("HEAD", "/ok.png") not in server.hits


def test_head_status_rejects_non_url_lines():
    with pytest.raises(TransportError):
        RequestsTransport().head_status("httpfoo", 5.0)


def test_slow_headers_count_as_not_accessible(server):
    transport = RequestsTransport()
    url = _url(server, "/slow.png")

    with pytest.raises(TransportError, match="over the"):
        transport.head_status(url, 0.8)
    assert not is_accessible(url, transport, 0.8)


def test_head_status_passes_timeout(monkeypatch):
    seen = {}

    class _Response:
        status_code = 200

        def close(self):
            pass

    def fake_head(url, timeout, allow_redirects):
        seen.update(url=url, timeout=timeout, allow_redirects=allow_redirects)
        return _Response()

    monkeypatch.setattr(requests, "head", fake_head)

    assert RequestsTransport().head_status("https://a.example/1.png", 2.5) == 200
    assert seen == {
        "url": "https://a.example/1.png",
        "timeout": 2.5,
        "allow_redirects": False,
    }


def test_download_follows_redirects(server, tmp_path):
    target = tmp_path / "1.jpg"

    RequestsTransport().download_to(_url(server, "/redirect.png"), target)

    assert target.read_bytes() == IMAGE_BODY
    assert server.hits == [("GET", "/redirect.png"), ("GET", "/ok.png")]


def test_download_keeps_error_body(server, tmp_path):
    target = tmp_path / "1.jpg"

    RequestsTransport().download_to(_url(server, "/missing.png"), target)

    assert target.read_bytes() == b"<html>not found</html>"


def test_interrupted_download_raises_and_leaves_file(server, tmp_path):
    target = tmp_path / "1.jpg"

    with pytest.raises(TransportError):
        RequestsTransport().download_to(_url(server, "/truncated.png"), target)

    assert target.exists()
    assert target.stat().st_size <= len(IMAGE_BODY)


def test_post_json_returns_body(monkeypatch):
    seen = {}

    class _Response:
        ok = True
        status_code = 200
        text = '{"candidates": []}'

    def fake_post(url, json, headers, timeout):
        seen.update(url=url, json=json, timeout=timeout)
        return _Response()

    monkeypatch.setattr(requests, "post", fake_post)

    body = RequestsTransport().post_json("https://g.example/m:generateContent", {"a": 1})

    assert body == '{"candidates": []}'
    assert seen == {"url": "https://g.example/m:generateContent", "json": {"a": 1}, "timeout": None}


def test_post_json_wraps_request_errors(monkeypatch):
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(requests, "post", fake_post)

    with pytest.raises(TransportError, match="refused"):
        RequestsTransport().post_json("https://g.example/m", {})
