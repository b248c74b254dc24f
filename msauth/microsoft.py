import logging
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from msauth.config import ServiceConfig
from msauth.errors import TransportError
from msauth.http import FORM_CONTENT_TYPE, HttpClient, expect_str
from msauth.result import StageResult


log = logging.getLogger(__name__)


@dataclass(frozen=True)
class OAuthToken:
    access_token: str
    refresh_token: str
    expires_in: int
    expires_at: int
    token_type: Optional[str] = None
    scope: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(frozen=True)
class OAuthError:
    error: str
    error_description: Optional[str] = None
    correlation_id: Optional[str] = None

    def __str__(self):
        if self.error_description:
            return f"{self.error}: {self.error_description}"
        return self.error


class MicrosoftAuth:
    def __init__(self, http: HttpClient, config: ServiceConfig):
        self.http = http
        self.config = config

    def login_url(self) -> str:
        """URL the user opens in a browser to obtain an authorization code."""
        return f"{self.config.authorize_url}?" + urlencode({
            "client_id": self.config.client_id,
            "response_type": "code",
            "scope": self.config.scope,
            "redirect_uri": self.config.redirect_url,
        })

    def token_from_code(self, code: str) -> StageResult[OAuthToken, OAuthError]:
        """
        Step 1 (first login):
        authorization code → Microsoft OAuth token
        """
        return self._token_request({
            "client_id": self.config.client_id,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.config.redirect_url,
        })

    def token_from_refresh_token(self, refresh_token: str) -> StageResult[OAuthToken, OAuthError]:
        """
        Step 1 (renewal):
        stored refresh token → Microsoft OAuth token
        """
        return self._token_request({
            "client_id": self.config.client_id,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
            "redirect_uri": self.config.redirect_url,
        })

    def _token_request(self, params: dict) -> StageResult[OAuthToken, OAuthError]:
        try:
            r = self.http.post(
                self.config.token_url,
                FORM_CONTENT_TYPE,
                urlencode(params).encode(),
                self.config.timeouts,
            )
            data = r.json()
        except TransportError as e:
            return StageResult.of_transport_failure(e)

        if not isinstance(data, dict):
            return StageResult.of_transport_failure(TransportError("Token response is not a JSON object"))

        # The token endpoint can answer 200 with an error body, so the status is not checked
        if "error" in data:
            error = OAuthError(
                error=str(data["error"]),
                error_description=data.get("error_description"),
                correlation_id=data.get("correlation_id"),
            )
            log.warning("OAuth token request rejected: %s", error)
            return StageResult.of_domain_error(error)

        try:
            expires_in = int(data["expires_in"])
            token = OAuthToken(
                access_token=expect_str(data.get("access_token"), "access_token"),
                refresh_token=expect_str(data.get("refresh_token"), "refresh_token"),
                expires_in=expires_in,
                expires_at=int(time.time()) + expires_in,
                token_type=data.get("token_type"),
                scope=data.get("scope"),
                user_id=data.get("user_id"),
            )
        except (KeyError, TypeError, ValueError) as e:
            return StageResult.of_transport_failure(TransportError(f"Malformed token response: {e!r}"))

        log.info("Obtained Microsoft access token %s...", token.access_token[:8])
        return StageResult.of_value(token)
