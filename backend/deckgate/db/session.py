from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from deckgate.core.config import settings

_connect_args = {"check_same_thread": False} if settings.database_dsn.startswith("sqlite") else {}

engine = create_engine(settings.database_dsn, connect_args=_connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db() -> None:
    from deckgate.db.base import Base
    import deckgate.models  # noqa: F401  registers tables

    Base.metadata.create_all(bind=engine)
