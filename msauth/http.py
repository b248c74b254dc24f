import json
import logging
from typing import Mapping, NamedTuple, Optional

import requests

from msauth.config import USER_AGENT, Timeouts
from msauth.errors import TransportError


log = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class HttpResponse(NamedTuple):
    status_code: int
    content: bytes

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def json(self):
        """Decode the body, a bad body is a transport problem."""
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise TransportError(f"Malformed JSON body (HTTP {self.status_code})") from e


class HttpClient:
    """
    Blocking HTTP client. Returns normally for every status code and raises
    TransportError only when no response could be read.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT

    def post(
        self,
        url: str,
        content_type: str,
        body: bytes,
        timeouts: Timeouts,
        headers: Optional[Mapping[str, str]] = None,
    ) -> HttpResponse:
        request_headers = {"Content-Type": content_type, "Accept": JSON_CONTENT_TYPE}
        request_headers.update(headers or {})
        return self._request("POST", url, timeouts, headers=request_headers, data=body)

    def get(self, url: str, headers: Mapping[str, str], timeouts: Timeouts) -> HttpResponse:
        return self._request("GET", url, timeouts, headers=dict(headers))

    def _request(self, method: str, url: str, timeouts: Timeouts, **kwargs) -> HttpResponse:
        try:
            r = self.session.request(method, url, timeout=tuple(timeouts), **kwargs)
        except requests.RequestException as e:
            raise TransportError(f"{method} {url} failed: {e}") from e

        log.debug("%s %s -> %s", method, url, r.status_code)
        return HttpResponse(r.status_code, r.content)

    def close(self):
        self.session.close()


def expect_str(value, name: str) -> str:
    """A response field that has to be a non-empty string."""
    if not isinstance(value, str) or not value:
        raise TypeError(f"{name} must be a non-empty string, got {value!r}")
    return value
