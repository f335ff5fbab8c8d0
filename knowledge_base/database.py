"""
Database engine, session factory and declarative base
"""
import json
import logging
from pathlib import Path
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from knowledge_base.config import settings

logger = logging.getLogger(__name__)


def _engine_kwargs(database_url: str) -> dict:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return {"pool_pre_ping": True}

    kwargs = {
        "connect_args": {"check_same_thread": False},
        # Keep non-ASCII text searchable with LIKE
        "json_serializer": lambda value: json.dumps(value, ensure_ascii=False),
    }
    if not url.database or url.database == ":memory:":
        # One shared connection, otherwise every session sees an empty database
        kwargs["poolclass"] = StaticPool
    else:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return kwargs


engine = create_engine(settings.database_url, **_engine_kwargs(settings.database_url))
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Yield a database session for the duration of a request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create tables and, on PostgreSQL, the full-text search function"""
    import knowledge_base.models  # noqa: F401  (registers mappers)
    from knowledge_base.services.search import POSTGRES_SEARCH_FUNCTION

    Base.metadata.create_all(bind=engine)

    if engine.dialect.name == "postgresql":
        with engine.begin() as conn:
            conn.execute(text(POSTGRES_SEARCH_FUNCTION))
        logger.info("Installed search_content() function")
