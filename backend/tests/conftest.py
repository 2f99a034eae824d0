from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from query_gateway.api.deps import get_codec, get_repository
from query_gateway.core.security import CredentialCodec
from query_gateway.main import app
from tests.utils.repository import InMemoryQueryRepository
from tests.utils.utils import make_keyring


@pytest.fixture(scope="session")
def codec() -> CredentialCodec:
    return CredentialCodec(make_keyring())


@pytest.fixture
def repository() -> InMemoryQueryRepository:
    return InMemoryQueryRepository()


@pytest.fixture
def client(
    repository: InMemoryQueryRepository, codec: CredentialCodec
) -> Generator[TestClient, None, None]:
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_codec] = lambda: codec
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
