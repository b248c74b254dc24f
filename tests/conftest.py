import json
from collections import deque

import pytest
import requests

from msauth.config import ServiceConfig
from msauth.errors import TransportError
from msauth.http import HttpResponse


class FakeHttpClient:
    """Answers requests from a per-url queue and records every call."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url, status=200, body=None, raises=None):
        if raises is None and not isinstance(body, bytes):
            body = json.dumps(body if body is not None else {}).encode()
        self.routes.setdefault(url, deque()).append((status, body, raises))

    def timeout(self, url):
        cause = requests.ConnectTimeout(f"connect to {url} timed out")
        try:
            raise TransportError(f"POST {url} failed: {cause}") from cause
        except TransportError as e:
            self.add(url, raises=e)

    def post(self, url, content_type, body, timeouts, headers=None):
        self.calls.append(("POST", url, content_type, body))
        return self._answer(url)

    def get(self, url, headers, timeouts):
        self.calls.append(("GET", url, headers, None))
        return self._answer(url)

    def _answer(self, url):
        status, body, raises = self.routes[url].popleft()
        if raises is not None:
            raise raises
        return HttpResponse(status, body)

    def count(self, url):
        return sum(1 for call in self.calls if call[1] == url)

    def last_json(self, url):
        body = [call[3] for call in self.calls if call[1] == url][-1]
        return json.loads(body)


@pytest.fixture
def config():
    return ServiceConfig()


@pytest.fixture
def http():
    return FakeHttpClient()


@pytest.fixture
def happy_chain(http, config):
    """Routes for a login where every stage succeeds."""
    http.add(config.token_url, body={
        "token_type": "bearer",
        "expires_in": 3600,
        "scope": "XboxLive.signin offline_access",
        "access_token": "A1",
        "refresh_token": "R1",
        "user_id": "u1",
    })
    http.add(config.xbl_auth_url, body={
        "Token": "XBL1",
        "DisplayClaims": {"xui": [{"uhs": "H0"}]},
    })
    http.add(config.xsts_auth_url, body={
        "Token": "X1",
        "DisplayClaims": {"xui": [{"uhs": "H1"}]},
    })
    http.add(config.mc_login_url, body={
        "username": "some-guid",
        "access_token": "M1",
        "token_type": "Bearer",
        "expires_in": 86400,
    })
    http.add(config.mc_has_purchased_url, body={
        "items": [{"name": "product_minecraft"}, {"name": "game_minecraft"}],
        "signature": "sig",
    })
    http.add(config.mc_profile_url, body={
        "id": "069a79f444e94726a5befca90e38aaf5",
        "name": "Notch",
    })
    return http
