import random
import string

from query_gateway.core.security import CredentialKey, CredentialKeyring

TEST_KEY = "0123456789abcdef0123456789abcdef"
TEST_IV = "fedcba9876543210"


def random_lower_string() -> str:
    return "".join(random.choices(string.ascii_lowercase, k=32))


def make_keyring(key: str | None = TEST_KEY, iv: str | None = TEST_IV) -> CredentialKeyring:
    """Same key/IV for every field; pass None to simulate missing settings."""
    pair = CredentialKey(key, iv)
    return CredentialKeyring(
        host=pair,
        database=pair,
        username=pair,
        password=pair,
        connect_string=pair,
    )
