import json
import logging
import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

from msauth.config import ServiceConfig
from msauth.errors import TransportError
from msauth.http import JSON_CONTENT_TYPE, HttpClient, HttpResponse, expect_str
from msauth.result import StageResult
from msauth.xbox import XstsToken


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinecraftSession:
    access_token: str
    expires_in: int
    expires_at: int
    username: Optional[str] = None
    token_type: Optional[str] = None


@dataclass(frozen=True)
class Entitlement:
    owns_game: bool
    items: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Profile:
    uuid: str
    username: str


class MinecraftAuth:
    def __init__(self, http: HttpClient, config: ServiceConfig):
        self.http = http
        self.config = config

    def _bearer(self, mc_token: str) -> dict:
        return {
            "Authorization": f"Bearer {mc_token}",
            "Accept": JSON_CONTENT_TYPE,
        }

    def authenticate(self, xsts: XstsToken) -> StageResult[MinecraftSession, int]:
        """
        Step 4:
        XSTS token → Minecraft access token
        """
        body = json.dumps({"identityToken": xsts.identity}).encode()
        try:
            r = self.http.post(self.config.mc_login_url, JSON_CONTENT_TYPE, body, self.config.timeouts)
        except TransportError as e:
            return StageResult.of_transport_failure(e)

        def parse(data: dict) -> MinecraftSession:
            expires_in = int(data.get("expires_in", 24 * 3600))
            return MinecraftSession(
                access_token=expect_str(data.get("access_token"), "access_token"),
                expires_in=expires_in,
                expires_at=int(time.time()) + expires_in,
                username=data.get("username"),
                token_type=data.get("token_type"),
            )

        result = self._parse(r, "Minecraft login", parse)
        if result.has_value:
            log.info("Obtained Minecraft access token %s...", result.value.access_token[:8])
        return result

    def has_purchased(self, mc_token: str) -> StageResult[Entitlement, int]:
        """
        Step 5 (optional):
        Minecraft access token → game ownership
        """
        try:
            r = self.http.get(self.config.mc_has_purchased_url, self._bearer(mc_token), self.config.timeouts)
        except TransportError as e:
            return StageResult.of_transport_failure(e)

        def parse(data: dict) -> Entitlement:
            items = tuple(item["name"] for item in data.get("items") or ())
            return Entitlement(owns_game=bool(items), items=items)

        return self._parse(r, "Entitlement check", parse)

    def get_profile(self, mc_token: str) -> StageResult[Profile, int]:
        """
        Step 6 (optional):
        Minecraft access token → uuid and username
        """
        try:
            r = self.http.get(self.config.mc_profile_url, self._bearer(mc_token), self.config.timeouts)
        except TransportError as e:
            return StageResult.of_transport_failure(e)

        def parse(data: dict) -> Profile:
            return Profile(
                uuid=expect_str(data.get("id"), "id"),
                username=expect_str(data.get("name"), "name"),
            )

        result = self._parse(r, "Profile", parse)
        if result.has_value:
            log.info("Logged in as %s (%s)", result.value.username, result.value.uuid)
        return result

    @staticmethod
    def _parse(r: HttpResponse, what: str, parse) -> StageResult:
        if r.status_code >= 300:
            log.warning("%s rejected with HTTP %s", what, r.status_code)
            return StageResult.of_domain_error(r.status_code)

        try:
            data = r.json()
            if not isinstance(data, dict):
                raise TransportError(f"{what} response is not a JSON object")
            return StageResult.of_value(parse(data))
        except TransportError as e:
            return StageResult.of_transport_failure(e)
        except (KeyError, TypeError, ValueError) as e:
            return StageResult.of_transport_failure(TransportError(f"Malformed {what} response: {e!r}"))
