"""
Connection descriptors built from a decrypted DatabaseProfile.
"""

from dataclasses import dataclass, field

from query_gateway.core.security import CredentialCodec
from query_gateway.models import DatabaseProfile, DialectEnum


@dataclass(frozen=True)
class ConnectionDescriptor:
    """Everything a driver needs to open one connection.

    Decrypted fields are excluded from repr so a descriptor can be logged
    without leaking them.
    """

    dialect: DialectEnum
    username: str = field(repr=False)
    password: str = field(repr=False)
    host: str | None = field(default=None, repr=False)
    database: str | None = field(default=None, repr=False)
    connect_string: str | None = field(default=None, repr=False)
    port: int | None = None
    encrypt: bool = False
    # None = no request timeout (ad hoc path)
    request_timeout_ms: int | None = None


def decrypt_profile_fields(
    profile: DatabaseProfile,
    codec: CredentialCodec,
    field_names: tuple[str, ...],
) -> dict[str, str]:
    """Decrypt only *field_names* of *profile*.

    A required field that is empty in the store decrypts to "" so the driver
    reports it rather than the codec.
    """
    out: dict[str, str] = {}
    for name in field_names:
        value = getattr(profile, name, None)
        out[name] = codec.decrypt(name, value) if value else ""
    return out
