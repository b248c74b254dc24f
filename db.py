import os

from typing import Optional

from sqlalchemy import create_engine, Column, String, Text
from sqlalchemy.orm import sessionmaker, declarative_base

from msauth.credentials import CredentialFile


DATABASE_URL = os.getenv("MSAUTH_DATABASE_URL", "sqlite:///msauth.db")

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(autoflush=False, bind=engine)


Base = declarative_base()


class StoredCredential(Base):
    __tablename__ = 'credentials'

    name     = Column(String(64), primary_key=True, nullable=False)
    document = Column(Text, nullable=False)


def configure(url: str) -> None:
    """Point the store at another database, e.g. "sqlite://" in tests."""
    global engine
    engine = create_engine(url, pool_pre_ping=True)
    SessionLocal.configure(bind=engine)


def init_db() -> None:
    Base.metadata.create_all(engine)


def save_credentials(name: str, credential_file: CredentialFile) -> None:
    document = credential_file.write().decode("utf-8")
    with SessionLocal() as session:
        stored = session.get(StoredCredential, name)
        if stored:
            stored.document = document
        else:
            session.add(StoredCredential(name=name, document=document))

        session.commit()


def load_credentials(name: str) -> Optional[CredentialFile]:
    with SessionLocal() as session:
        stored = session.get(StoredCredential, name)
        return CredentialFile.read(stored.document) if stored else None


def remove_credentials(name: str) -> None:
    with SessionLocal() as session:
        stored = session.get(StoredCredential, name)
        if stored:
            session.delete(stored)
            session.commit()
