"""
Credential files

A credential file keeps the Microsoft refresh token between runs so the user
is not asked to log in again. Access and session tokens are never written,
they are derived again from the refresh token on every run.

Document shape:
    {"type": "microsoft", "clientId": "...", "refreshToken": "...", "warning": "..."}

"type" selects the variant. "warning" is written for humans and ignored on read.
"""

import abc
import enum
import json
import os
from dataclasses import dataclass
from typing import Union

from msauth.errors import CredentialFormatError


FILE_WARNING = (
    "This file contains a token that lets anyone log in to your Minecraft account. "
    "Do not share it with anyone!"
)


class CredentialType(str, enum.Enum):
    MICROSOFT = "microsoft"


@dataclass(frozen=True)
class CredentialFile(abc.ABC):
    client_id: str

    type = None

    def __post_init__(self):
        _require("client_id", self.client_id)

    @abc.abstractmethod
    def to_dict(self) -> dict:
        """The document without the warning."""

    def write(self) -> bytes:
        document = self.to_dict()
        document["warning"] = FILE_WARNING
        return json.dumps(document, indent=2).encode("utf-8")

    def save(self, path: Union[str, os.PathLike]) -> None:
        """Plain text on disk, keep the file private."""
        with open(path, "wb") as f:
            f.write(self.write())

    @staticmethod
    def read(raw: Union[bytes, str]) -> "CredentialFile":
        try:
            document = json.loads(raw)
        except ValueError as e:
            raise CredentialFormatError("Cannot parse credential file") from e
        return CredentialFile.from_dict(document)

    @staticmethod
    def load(path: Union[str, os.PathLike]) -> "CredentialFile":
        with open(path, "rb") as f:
            return CredentialFile.read(f.read())

    @staticmethod
    def from_dict(document) -> "CredentialFile":
        if not isinstance(document, dict):
            raise CredentialFormatError("Credential file must be a JSON object")

        try:
            credential_type = CredentialType(document.get("type"))
        except ValueError:
            raise CredentialFormatError(
                f"Unknown credential file type {document.get('type')!r}, expected 'microsoft'"
            ) from None

        return _DECODERS[credential_type](document)


@dataclass(frozen=True)
class MicrosoftCredentialFile(CredentialFile):
    refresh_token: str

    type = CredentialType.MICROSOFT

    def __post_init__(self):
        super().__post_init__()
        _require("refresh_token", self.refresh_token)

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "clientId": self.client_id,
            "refreshToken": self.refresh_token,
        }

    @classmethod
    def decode(cls, document: dict) -> "MicrosoftCredentialFile":
        client_id = document.get("clientId")
        refresh_token = document.get("refreshToken")
        if not isinstance(client_id, str) or not client_id:
            raise CredentialFormatError("Microsoft credential file is missing 'clientId'")
        if not isinstance(refresh_token, str) or not refresh_token:
            raise CredentialFormatError("Microsoft credential file is missing 'refreshToken'")
        return cls(client_id=client_id, refresh_token=refresh_token)


def _require(name: str, value) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string, got {value!r}")


_DECODERS = {
    CredentialType.MICROSOFT: MicrosoftCredentialFile.decode,
}
