"""
Connections to target databases (Oracle, SQL Server, MySQL).

No pooling: every execution builds a descriptor from freshly decrypted
credentials and opens its own connection.
"""

from .connect import connect, cursor_to_dicts, execute
from .descriptor import ConnectionDescriptor, decrypt_profile_fields

__all__ = [
    "ConnectionDescriptor",
    "connect",
    "cursor_to_dicts",
    "decrypt_profile_fields",
    "execute",
]
