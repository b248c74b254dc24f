import pytest

import db
from msauth.credentials import MicrosoftCredentialFile


@pytest.fixture(autouse=True)
def memory_db():
    db.configure("sqlite://")
    db.init_db()
    yield
    db.Base.metadata.drop_all(db.engine)


def test_save_and_load():
    credential_file = MicrosoftCredentialFile(client_id="c", refresh_token="R1")

    db.save_credentials("alice", credential_file)

    assert db.load_credentials("alice") == credential_file


def test_overwrite():
    db.save_credentials("alice", MicrosoftCredentialFile(client_id="c", refresh_token="R1"))
    db.save_credentials("alice", MicrosoftCredentialFile(client_id="c", refresh_token="R2"))

    assert db.load_credentials("alice").refresh_token == "R2"


def test_missing_and_remove():
    assert db.load_credentials("bob") is None

    db.save_credentials("bob", MicrosoftCredentialFile(client_id="c", refresh_token="R1"))
    db.remove_credentials("bob")

    assert db.load_credentials("bob") is None
