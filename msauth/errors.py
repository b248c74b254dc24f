class MsAuthError(Exception):
    """Base class for everything raised by msauth."""


class IllegalStateError(MsAuthError):
    pass


class TransportError(MsAuthError):
    """Network, timeout or malformed response. The original cause is chained."""


class CredentialFormatError(MsAuthError):
    pass


class AuthenticationError(MsAuthError):
    """
    The chain stopped at `stage`.

    Exactly one of `domain_error` (the service rejected the request) or `cause`
    (transport failure) is set. `credential_file` is set when the OAuth stage
    already succeeded, its refresh token is still usable.
    """

    def __init__(self, stage: str, domain_error=None, cause: Exception = None, credential_file=None):
        self.stage = stage
        self.domain_error = domain_error
        self.cause = cause
        self.credential_file = credential_file

        if domain_error is not None:
            message = f"{stage} rejected the request: {domain_error}"
        else:
            message = f"{stage} failed: {cause}"
        super().__init__(message)
