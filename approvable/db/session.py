from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from approvable.core.config import Settings, get_settings
from approvable.db.base import Base


def create_engine_from_settings(settings: Optional[Settings] = None) -> Engine:
    settings = settings or get_settings()
    return create_engine(settings.database_url, echo=settings.echo_sql)


def create_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Create all tables (dev convenience; use Alembic migrations in production)."""
    Base.metadata.create_all(bind=engine)


def get_db(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    factory = factory or create_session_factory(create_engine_from_settings())
    db = factory()
    try:
        yield db
    finally:
        db.close()
