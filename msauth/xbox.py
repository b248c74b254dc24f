import enum
import json
import logging
from dataclasses import dataclass
from typing import Optional

from msauth.config import ServiceConfig
from msauth.errors import TransportError
from msauth.http import JSON_CONTENT_TYPE, HttpClient, expect_str
from msauth.result import StageResult


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class XstsToken:
    token: str
    user_hash: str

    @property
    def identity(self) -> str:
        return f"XBL3.0 x={self.user_hash};{self.token}"


@dataclass(frozen=True)
class XstsError:
    xerr: int
    message: str = ""
    redirect: Optional[str] = None
    identity: Optional[str] = None

    @property
    def code(self) -> Optional["XstsErrorCode"]:
        try:
            return XstsErrorCode(self.xerr)
        except ValueError:
            return None

    def __str__(self):
        return f"XErr {self.xerr}: {self.message}" if self.message else f"XErr {self.xerr}"


class XstsErrorCode(enum.IntEnum):
    NO_XBOX_ACCOUNT = 2148916233
    COUNTRY_UNAVAILABLE = 2148916235
    ADULT_VERIFICATION = 2148916236
    ADULT_VERIFICATION_KOREA = 2148916237
    CHILD_ACCOUNT = 2148916238

    def describe(self) -> str:
        return _XERR_DESCRIPTIONS[self]


_XERR_DESCRIPTIONS = {
    XstsErrorCode.NO_XBOX_ACCOUNT: "This account does not have an Xbox account, sign up at xbox.com first",
    XstsErrorCode.COUNTRY_UNAVAILABLE: "Xbox Live is not available in this account's country",
    XstsErrorCode.ADULT_VERIFICATION: "This account needs adult verification on the Xbox page",
    XstsErrorCode.ADULT_VERIFICATION_KOREA: "This account needs adult verification on the Xbox page",
    XstsErrorCode.CHILD_ACCOUNT: "This account belongs to a child and must be added to a Family by an adult",
}


class XboxAuth:
    def __init__(self, http: HttpClient, config: ServiceConfig):
        self.http = http
        self.config = config

    def authenticate(self, ms_access_token: str) -> StageResult[str, int]:
        """
        Step 2:
        Microsoft access token → Xbox Live token (XBL)
        """
        payload = {
            "Properties": {
                "AuthMethod": "RPS",
                "SiteName": "user.auth.xboxlive.com",
                "RpsTicket": f"d={ms_access_token}",
            },
            "RelyingParty": "http://auth.xboxlive.com",
            "TokenType": "JWT",
        }

        try:
            r = self.http.post(
                self.config.xbl_auth_url,
                JSON_CONTENT_TYPE,
                json.dumps(payload).encode(),
                self.config.timeouts,
            )
            if r.status_code >= 400:
                log.warning("Xbox Live authentication rejected with HTTP %s", r.status_code)
                return StageResult.of_domain_error(r.status_code)
            token = expect_str(r.json()["Token"], "Token")
        except TransportError as e:
            return StageResult.of_transport_failure(e)
        except (KeyError, TypeError) as e:
            return StageResult.of_transport_failure(TransportError(f"Malformed XBL response: {e!r}"))

        log.info("Obtained Xbox Live token %s...", token[:8])
        return StageResult.of_value(token)

    def authorize_xsts(
        self,
        xbl_token: str,
        relying_party: Optional[str] = None,
        sandbox_id: Optional[str] = None,
    ) -> StageResult[XstsToken, XstsError]:
        """
        Step 3:
        Xbox Live token → XSTS token and user hash
        """
        payload = {
            "Properties": {
                "SandboxId": sandbox_id or self.config.xsts_sandbox_id,
                "UserTokens": [xbl_token],
            },
            "RelyingParty": relying_party or self.config.xsts_relying_party,
            "TokenType": "JWT",
        }

        try:
            r = self.http.post(
                self.config.xsts_auth_url,
                JSON_CONTENT_TYPE,
                json.dumps(payload).encode(),
                self.config.timeouts,
            )
            data = r.json()
        except TransportError as e:
            return StageResult.of_transport_failure(e)

        if not isinstance(data, dict):
            return StageResult.of_transport_failure(TransportError("XSTS response is not a JSON object"))

        # XErr wins over everything else, rejections can come back as HTTP 200
        if "XErr" in data:
            try:
                error = XstsError(
                    xerr=int(data["XErr"]),
                    message=data.get("Message") or "",
                    redirect=data.get("Redirect"),
                    identity=data.get("Identity"),
                )
            except (TypeError, ValueError) as e:
                return StageResult.of_transport_failure(TransportError(f"Malformed XSTS error: {e!r}"))
            log.warning("XSTS authorization rejected: %s", error)
            return StageResult.of_domain_error(error)

        try:
            token = XstsToken(
                token=expect_str(data["Token"], "Token"),
                user_hash=expect_str(data["DisplayClaims"]["xui"][0]["uhs"], "uhs"),
            )
        except (KeyError, IndexError, TypeError) as e:
            return StageResult.of_transport_failure(TransportError(f"Malformed XSTS response: {e!r}"))

        log.info("Obtained XSTS token %s... for user hash %s", token.token[:8], token.user_hash)
        return StageResult.of_value(token)
