"""Database engine and session handling for the gamification state store"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from vynce_analytics.config import settings
from vynce_analytics.models.db import Base

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> Dict[str, Any]:
    """SQLite needs cross-thread access, and in-memory databases one shared connection"""
    parsed = make_url(url)
    if parsed.get_backend_name() != 'sqlite':
        return {'pool_pre_ping': True}
    options: Dict[str, Any] = {'connect_args': {'check_same_thread': False}}
    if parsed.database in (None, '', ':memory:'):
        options['poolclass'] = StaticPool
    return options


class Database:
    """Owns the engine and hands out sessions bound to it"""

    def __init__(self):
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def initialized(self) -> bool:
        return self._session_factory is not None

    def init(self, database_url: Optional[str] = None) -> None:
        """
        Connect and make sure the state table exists.

        Args:
            database_url: SQLAlchemy URL, defaults to settings.DATABASE_URL
        """
        url = database_url or settings.DATABASE_URL
        try:
            engine = create_engine(url, **_engine_options(url))
            Base.metadata.create_all(engine)
        except SQLAlchemyError as e:
            logger.error(f"Could not open state database: {e}")
            raise
        self._engine = engine
        self._session_factory = sessionmaker(bind=engine, expire_on_commit=False)
        logger.info(f"State database ready ({engine.url.get_backend_name()})")

    def get_session(self) -> Session:
        if self._session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self._session_factory()

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """Commit on success, roll back on any error"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


db = Database()
