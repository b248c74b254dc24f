import pytest
import requests

from msauth.config import Timeouts
from msauth.errors import TransportError
from msauth.http import JSON_CONTENT_TYPE, HttpClient, HttpResponse


class FakeSession:
    def __init__(self, response=None, raises=None):
        self.headers = {}
        self.response = response
        self.raises = raises
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.raises:
            raise self.raises
        return self.response

    def close(self):
        pass


def _response(status, content):
    r = requests.Response()
    r.status_code = status
    r._content = content
    return r


def test_post_returns_any_status():
    session = FakeSession(_response(500, b"boom"))
    client = HttpClient(session)

    r = client.post("https://example.com", JSON_CONTENT_TYPE, b"{}", Timeouts(3, 7))

    assert r == HttpResponse(500, b"boom")
    method, url, kwargs = session.requests[0]
    assert method == "POST"
    assert kwargs["timeout"] == (3, 7)
    assert kwargs["headers"]["Content-Type"] == JSON_CONTENT_TYPE
    assert session.headers["User-Agent"] == "msauth"


def test_get_sends_headers():
    session = FakeSession(_response(200, b'{"ok": true}'))

    r = HttpClient(session).get("https://example.com", {"Authorization": "Bearer M1"}, Timeouts())

    assert r.json() == {"ok": True}
    assert session.requests[0][2]["headers"] == {"Authorization": "Bearer M1"}


@pytest.mark.parametrize("exc", [
    requests.ConnectTimeout("slow"),
    requests.ReadTimeout("slower"),
    requests.ConnectionError("dns"),
])
def test_transport_failures(exc):
    client = HttpClient(FakeSession(raises=exc))

    with pytest.raises(TransportError) as excinfo:
        client.get("https://example.com", {}, Timeouts())
    assert excinfo.value.__cause__ is exc


def test_bad_json():
    with pytest.raises(TransportError):
        HttpResponse(200, b"<html>").json()
