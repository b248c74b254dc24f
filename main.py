import argparse
import logging
import os
import sys

import db
from msauth.authenticator import Authenticator
from msauth.config import ServiceConfig
from msauth.credentials import CredentialFile
from msauth.errors import AuthenticationError, CredentialFormatError
from msauth.xbox import XstsError


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Log in to Minecraft with a Microsoft account")
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--file", default="auth.json", help="credential file to read and update")
    target.add_argument("--store", metavar="NAME", help="keep the credential in the database under NAME")
    parser.add_argument("--no-profile", action="store_true", help="skip the profile request")
    parser.add_argument("--no-entitlement", action="store_true", help="skip the ownership check")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _load(args):
    if args.store:
        return db.load_credentials(args.store)
    if os.path.isfile(args.file):
        return CredentialFile.load(args.file)
    return None


def _save(args, credential_file):
    if args.store:
        db.save_credentials(args.store, credential_file)
    else:
        credential_file.save(args.file)


def _explain(error: AuthenticationError) -> str:
    if isinstance(error.domain_error, XstsError) and error.domain_error.code is not None:
        return error.domain_error.code.describe()
    return str(error)


def main(argv=None) -> int:
    args = _parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(name)s: %(message)s")

    if args.store:
        db.init_db()

    authenticator = Authenticator(
        ServiceConfig.from_env(),
        retrieve_entitlement=not args.no_entitlement,
        retrieve_profile=not args.no_profile,
    )

    try:
        credential_file = _load(args)
    except CredentialFormatError as e:
        print(f"Ignoring unreadable credentials: {e}")
        credential_file = None

    if credential_file and credential_file.client_id != authenticator.config.client_id:
        print(
            f"Stored credentials belong to client {credential_file.client_id!r}, "
            f"not {authenticator.config.client_id!r}, logging in again"
        )
        credential_file = None

    try:
        if credential_file:
            user = authenticator.from_file(credential_file)
        else:
            print("Open this URL in browser:")
            print(authenticator.login_url())

            code = input("Paste authorization code: ").strip()
            if not code:
                print("Authorization code not provided")
                return 1
            user = authenticator.from_code(code)
    except AuthenticationError as e:
        # The refresh token may have rotated even though a later stage failed
        if e.credential_file:
            _save(args, e.credential_file)
        print(f"Login failed: {_explain(e)}")
        return 1

    _save(args, user.credential_file)

    if user.profile:
        print(f"Logged in as: {user.profile.username} ({user.profile.uuid})")
    else:
        print("Logged in")
    if user.entitlement:
        print(f"Owns Minecraft: {'yes' if user.entitlement.owns_game else 'no'}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
