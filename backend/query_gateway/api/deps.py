from collections.abc import Generator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from query_gateway.core.config import settings
from query_gateway.core.db import engine
from query_gateway.core.repository import QueryRepository, SQLModelQueryRepository
from query_gateway.core.security import CredentialCodec


def get_db() -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_db)]


def get_repository(session: SessionDep) -> QueryRepository:
    return SQLModelQueryRepository(session)


RepositoryDep = Annotated[QueryRepository, Depends(get_repository)]


@lru_cache
def get_codec() -> CredentialCodec:
    """One codec per process, built from the keyring read at startup."""
    return CredentialCodec(settings.credential_keyring)


CodecDep = Annotated[CredentialCodec, Depends(get_codec)]
