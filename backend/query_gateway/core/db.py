from sqlmodel import Session, create_engine, select

from query_gateway.core.config import settings

engine = create_engine(str(settings.SQLALCHEMY_DATABASE_URI), pool_pre_ping=True)


# Tables are created and changed with Alembic migrations; see alembic/versions.
def init_db(session: Session) -> None:
    """Fail fast when the metadata store is unreachable."""
    session.exec(select(1))
