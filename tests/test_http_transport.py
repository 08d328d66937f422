from __future__ import annotations

import email.message
import http.client
import io
import urllib.error
import urllib.parse
import urllib.request

import pytest

from radiocode.core.errors import TransportError
from radiocode.transports.http import HTTPTransport


class FakeResponse(io.BytesIO):
    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def test_post_form_encodes_fields_and_decodes_json(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}
    response = FakeResponse(b'{"error": 0, "code": "2487"}')

    def fake_urlopen(request, timeout=None):
        captured["request"] = request
        captured["timeout"] = timeout
        return response

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    result = HTTPTransport().post_form(
        "https://radio.example/api",
        [("key", "ABCD"), ("command", "calc"), ("serial", "12 34")],
        timeout_s=3.0,
    )

    assert result == {"error": 0, "code": "2487"}
    request = captured["request"]
    assert request.get_method() == "POST"
    assert request.full_url == "https://radio.example/api"
    assert urllib.parse.parse_qsl(request.data.decode("utf-8")) == [
        ("key", "ABCD"),
        ("command", "calc"),
        ("serial", "12 34"),
    ]
    assert request.get_header("Content-type") == "application/x-www-form-urlencoded"
    assert captured["timeout"] == 3.0
    assert response.closed


def test_connection_failure_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise urllib.error.URLError("Name or service not known")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    with pytest.raises(TransportError, match="Name or service not known"):
        HTTPTransport().post_form("https://radio.example/api", [("command", "login")])


def test_timeout_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise TimeoutError("timed out")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    with pytest.raises(TransportError, match="timed out"):
        HTTPTransport().post_form("https://radio.example/api", [("command", "login")], timeout_s=0.1)


def test_invalid_json_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    response = FakeResponse(b"<html>maintenance</html>")
    monkeypatch.setattr(urllib.request, "urlopen", lambda request, timeout=None: response)

    with pytest.raises(TransportError, match="Invalid JSON"):
        HTTPTransport().post_form("https://radio.example/api", [("command", "login")])
    assert response.closed


def _http_error(code: int, body: bytes) -> urllib.error.HTTPError:
    return urllib.error.HTTPError(
        "https://radio.example/api", code, "Forbidden", email.message.Message(), io.BytesIO(body)
    )


def test_error_status_body_is_decoded(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise _http_error(403, b'{"error": 100}')

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    assert HTTPTransport().post_form("https://radio.example/api", [("command", "login")]) == {"error": 100}


def test_error_status_without_json_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise _http_error(502, b"<html>Bad Gateway</html>")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    with pytest.raises(TransportError, match=r"Invalid JSON response from https://radio.example/api \(HTTP 502\)"):
        HTTPTransport().post_form("https://radio.example/api", [("command", "login")])


def test_bad_status_line_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise http.client.BadStatusLine("garbage")

    monkeypatch.setattr(urllib.request, "urlopen", fake_urlopen)

    with pytest.raises(TransportError, match="BadStatusLine") as exc:
        HTTPTransport().post_form("https://radio.example/api", [("command", "login")])
    assert isinstance(exc.value.__cause__, http.client.BadStatusLine)


def test_truncated_body_raises_transport_error(monkeypatch: pytest.MonkeyPatch) -> None:
    class TruncatedResponse(FakeResponse):
        def read(self, *args) -> bytes:
            raise http.client.IncompleteRead(b'{"error": ', 12)

    response = TruncatedResponse()
    monkeypatch.setattr(urllib.request, "urlopen", lambda request, timeout=None: response)

    with pytest.raises(TransportError, match="IncompleteRead"):
        HTTPTransport().post_form("https://radio.example/api", [("command", "login")])
    assert response.closed
