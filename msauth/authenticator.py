"""
Runs the whole login chain:

    OAuth → Xbox Live → XSTS → Minecraft login → (entitlement, profile)

Stages run one after another. The first stage that does not return a plain
value stops the chain with an AuthenticationError naming that stage.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from msauth.config import ServiceConfig
from msauth.credentials import CredentialFile, MicrosoftCredentialFile
from msauth.errors import AuthenticationError
from msauth.http import HttpClient
from msauth.microsoft import MicrosoftAuth, OAuthToken
from msauth.minecraft import Entitlement, MinecraftAuth, MinecraftSession, Profile
from msauth.result import StageResult
from msauth.xbox import XboxAuth, XstsToken


log = logging.getLogger(__name__)

STAGE_OAUTH = "oauth"
STAGE_XBL = "xbl"
STAGE_XSTS = "xsts"
STAGE_MINECRAFT_LOGIN = "minecraft_login"
STAGE_ENTITLEMENT = "entitlement"
STAGE_PROFILE = "profile"


@dataclass(frozen=True)
class AuthenticatedUser:
    oauth: OAuthToken
    xsts: XstsToken
    session: MinecraftSession
    credential_file: MicrosoftCredentialFile
    entitlement: Optional[Entitlement] = None
    profile: Optional[Profile] = None

    @property
    def access_token(self) -> str:
        return self.session.access_token


class Authenticator:
    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        http: Optional[HttpClient] = None,
        retrieve_entitlement: bool = True,
        retrieve_profile: bool = True,
    ):
        self.config = config or ServiceConfig()
        self.http = http or HttpClient()
        self.retrieve_entitlement = retrieve_entitlement
        self.retrieve_profile = retrieve_profile

        self.microsoft = MicrosoftAuth(self.http, self.config)
        self.xbox = XboxAuth(self.http, self.config)
        self.minecraft = MinecraftAuth(self.http, self.config)

    # ---------- PUBLIC API ----------

    def login_url(self) -> str:
        return self.microsoft.login_url()

    def from_code(self, code: str) -> AuthenticatedUser:
        """First login. The code is single use, a failed attempt needs a new one."""
        log.info("Authenticating with authorization code")
        return self._run(self.microsoft.token_from_code(code))

    def from_refresh_token(self, refresh_token: str) -> AuthenticatedUser:
        log.info("Authenticating with refresh token")
        return self._run(self.microsoft.token_from_refresh_token(refresh_token))

    def from_file(self, credential_file: CredentialFile) -> AuthenticatedUser:
        if not isinstance(credential_file, MicrosoftCredentialFile):
            raise TypeError(f"Cannot authenticate with {type(credential_file).__name__}")
        if credential_file.client_id != self.config.client_id:
            raise ValueError(
                f"Credential file was issued to client {credential_file.client_id!r}, "
                f"this authenticator uses {self.config.client_id!r}"
            )
        return self.from_refresh_token(credential_file.refresh_token)

    # ---------- INTERNAL ----------

    def _run(self, oauth_result: StageResult) -> AuthenticatedUser:
        oauth = self._unwrap(STAGE_OAUTH, oauth_result)
        credential_file = MicrosoftCredentialFile(
            client_id=self.config.client_id,
            refresh_token=oauth.refresh_token,
        )

        def step(stage: str, result: StageResult):
            return self._unwrap(stage, result, credential_file)

        xbl_token = step(STAGE_XBL, self.xbox.authenticate(oauth.access_token))
        xsts = step(STAGE_XSTS, self.xbox.authorize_xsts(xbl_token))
        session = step(STAGE_MINECRAFT_LOGIN, self.minecraft.authenticate(xsts))

        entitlement = None
        if self.retrieve_entitlement:
            entitlement = step(STAGE_ENTITLEMENT, self.minecraft.has_purchased(session.access_token))

        profile = None
        if self.retrieve_profile:
            profile = step(STAGE_PROFILE, self.minecraft.get_profile(session.access_token))

        return AuthenticatedUser(
            oauth=oauth,
            xsts=xsts,
            session=session,
            credential_file=credential_file,
            entitlement=entitlement,
            profile=profile,
        )

    @staticmethod
    def _unwrap(stage: str, result: StageResult, credential_file: Optional[CredentialFile] = None):
        if result.has_value:
            return result.value

        if result.has_domain_error:
            error = AuthenticationError(stage, domain_error=result.domain_error, credential_file=credential_file)
            log.error("Authentication failed: %s", error)
            raise error

        cause = result.transport_failure
        error = AuthenticationError(stage, cause=cause, credential_file=credential_file)
        log.error("Authentication failed: %s", error)
        raise error from cause
