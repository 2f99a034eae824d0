"""
Health-check helpers for liveness and readiness probes.

Liveness: is the process alive and not deadlocked? (cheap, no I/O)
Readiness: can it serve traffic? (metadata store, migrations, credential keys)
"""

import logging

from sqlmodel import Session, select

from query_gateway.core.config import settings
from query_gateway.core.db import engine

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Individual dependency checks
# ---------------------------------------------------------------------------

def check_metadata_store() -> bool:
    """Run SELECT 1 against the metadata store. Returns True if ok."""
    try:
        with Session(engine) as session:
            session.exec(select(1)).first()
        return True
    except Exception:
        logger.warning("Metadata store check failed", exc_info=True)
        return False


def check_migrations() -> bool:
    """Verify alembic revision matches head (DB schema is up-to-date)."""
    try:
        from alembic.config import Config
        from alembic.runtime.migration import MigrationContext
        from alembic.script import ScriptDirectory

        alembic_cfg = Config("alembic.ini")
        script = ScriptDirectory.from_config(alembic_cfg)
        head_revisions = set(script.get_heads())

        with engine.connect() as conn:
            context = MigrationContext.configure(conn)
            current_revisions = set(context.get_current_heads())

        return current_revisions == head_revisions
    except Exception:
        logger.warning("Migration check failed, treating as unhealthy", exc_info=True)
        return False


def check_credential_keys() -> bool:
    """Every encrypted field has a key/IV pair configured."""
    return not settings.credential_keyring.missing_fields()


# ---------------------------------------------------------------------------
# Composite probes
# ---------------------------------------------------------------------------

def liveness_check() -> tuple[bool, list[str]]:
    """
    Lightweight liveness probe: just confirms the Python process is responsive.
    No DB calls. Return format matches readiness_check for consistency.
    """
    return (True, [])


def readiness_check() -> tuple[bool, list[str]]:
    """
    Returns (ok, list of failure names). ok is False if any check fails.
    """
    failures: list[str] = []

    if not check_metadata_store():
        failures.append("metadata_store")

    if not check_migrations():
        failures.append("migrations_not_at_head")

    if not check_credential_keys():
        failures.append("credential_keys")

    return (len(failures) == 0, failures)
