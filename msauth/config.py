import math
import os
from dataclasses import dataclass, replace
from typing import NamedTuple, Optional


CLIENT_ID_ENV = "MSAUTH_CLIENT_ID"
REDIRECT_URL_ENV = "MSAUTH_REDIRECT_URL"
CONNECT_TIMEOUT_ENV = "MSAUTH_CONNECT_TIMEOUT"
READ_TIMEOUT_ENV = "MSAUTH_READ_TIMEOUT"

USER_AGENT = "msauth"


class _Timeouts(NamedTuple):
    connect: float
    read: float


class Timeouts(_Timeouts):
    """(connect, read) in seconds, passed straight to requests. Never unbounded."""

    __slots__ = ()

    def __new__(cls, connect: float = 15.0, read: float = 15.0):
        for name, value in (("connect", connect), ("read", read)):
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value < math.inf:
                raise ValueError(f"{name} timeout must be a positive number of seconds, got {value!r}")
        return super().__new__(cls, float(connect), float(read))

    @classmethod
    def from_env(cls) -> "Timeouts":
        default = cls()
        return cls(
            connect=float(os.getenv(CONNECT_TIMEOUT_ENV) or default.connect),
            read=float(os.getenv(READ_TIMEOUT_ENV) or default.read),
        )


@dataclass(frozen=True)
class ServiceConfig:
    CLIENT_ID = "00000000402b5328"
    REDIRECT_URL = "https://login.live.com/oauth20_desktop.srf"

    client_id: str = CLIENT_ID
    redirect_url: str = REDIRECT_URL
    scope: str = "XboxLive.signin offline_access"

    authorize_url: str = "https://login.live.com/oauth20_authorize.srf"
    token_url: str = "https://login.live.com/oauth20_token.srf"
    xbl_auth_url: str = "https://user.auth.xboxlive.com/user/authenticate"
    xsts_auth_url: str = "https://xsts.auth.xboxlive.com/xsts/authorize"
    mc_login_url: str = "https://api.minecraftservices.com/authentication/login_with_xbox"
    mc_has_purchased_url: str = "https://api.minecraftservices.com/entitlements/mcstore"
    mc_profile_url: str = "https://api.minecraftservices.com/minecraft/profile"

    xsts_relying_party: str = "rp://api.minecraftservices.com/"
    xsts_sandbox_id: str = "RETAIL"

    timeouts: Timeouts = Timeouts()

    @property
    def is_custom_application(self) -> bool:
        return (self.client_id, self.redirect_url) != (self.CLIENT_ID, self.REDIRECT_URL)

    def with_application(self, client_id: str, redirect_url: str) -> "ServiceConfig":
        """
        Swap in a custom Azure application registration.
        Client id and redirect url belong together, both are required.
        """
        if not client_id or not redirect_url:
            raise ValueError("A custom application needs both a client id and a redirect url")
        return replace(self, client_id=client_id, redirect_url=redirect_url)

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        config = cls(timeouts=Timeouts.from_env())

        client_id: Optional[str] = os.getenv(CLIENT_ID_ENV)
        redirect_url: Optional[str] = os.getenv(REDIRECT_URL_ENV)
        if client_id or redirect_url:
            if not (client_id and redirect_url):
                raise ValueError(f"Set both {CLIENT_ID_ENV} and {REDIRECT_URL_ENV}, or neither")
            config = config.with_application(client_id, redirect_url)

        return config
