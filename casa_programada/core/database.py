"""
Database connection management and ORM session factory.
The Database handle owns the connection pool and is passed explicitly to every operation.
"""
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Union

from sqlalchemy import create_engine, event, exc, text
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import ConnectionPoolEntry, QueuePool

from casa_programada.core.config import Settings, settings as default_settings
from casa_programada.core.logger import logger

Base = declarative_base()

DIALECT_LABELS = {
    "mysql": "MySQL",
    "mariadb": "MariaDB",
    "sqlite": "SQLite",
    "postgresql": "PostgreSQL",
}

VERSION_QUERIES = {
    "mysql": "SELECT VERSION()",
    "mariadb": "SELECT VERSION()",
    "sqlite": "SELECT sqlite_version()",
    "postgresql": "SELECT version()",
}

UNKNOWN_VERSION = "Unknown"


class BoundedQueuePool(QueuePool):
    """
    QueuePool that caps how many callers may wait for a connection.

    Once every connection is checked out, at most queue_limit callers block
    waiting for one; further checkouts fail at once with TimeoutError.
    A queue_limit of 0 leaves the wait queue unbounded.
    """

    queue_limit = 0

    def __init__(self, creator: Any, **kw: Any) -> None:
        super().__init__(creator, **kw)
        self._waiting = 0
        self._waiting_lock = threading.Lock()

    def recreate(self) -> "BoundedQueuePool":
        pool = super().recreate()
        pool.queue_limit = self.queue_limit
        return pool

    def _do_get(self) -> ConnectionPoolEntry:
        exhausted = self._max_overflow > -1 and self.checkedout() >= self.size() + self._max_overflow
        if not self.queue_limit or not exhausted:
            return super()._do_get()

        with self._waiting_lock:
            if self._waiting >= self.queue_limit:
                raise exc.TimeoutError(f"Connection queue limit of {self.queue_limit} reached")
            self._waiting += 1

        try:
            return super()._do_get()
        finally:
            with self._waiting_lock:
                self._waiting -= 1


class Database:
    """Pooled connection to the relational store plus its session factory."""

    def __init__(self, url: Union[str, URL], **engine_options: Any) -> None:
        self.url = make_url(url)
        queue_limit = engine_options.pop("queue_limit", 0)

        if self.url.get_backend_name() == "sqlite":
            # SQLite specific: sessions may be used from threads other than the creator
            connect_args = engine_options.pop("connect_args", {})
            connect_args.setdefault("check_same_thread", False)
            engine_options["connect_args"] = connect_args

        self.engine: Engine = create_engine(self.url, **engine_options)
        if isinstance(self.engine.pool, BoundedQueuePool):
            self.engine.pool.queue_limit = queue_limit

        if self.url.get_backend_name() == "sqlite":
            # Foreign keys (and ON DELETE CASCADE) are off by default in SQLite
            @event.listens_for(self.engine, "connect")
            def set_sqlite_pragma(dbapi_connection: Any, connection_record: Any) -> None:
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "Database":
        """Builds the pool from the environment-selected configuration profile."""
        settings = settings or default_settings

        if settings.DATABASE_URL:
            database = cls(settings.DATABASE_URL)
        else:
            config = settings.database_config()
            database = cls(
                config.url,
                pool_size=config.connection_limit,
                max_overflow=0,
                # Without waiting, an exhausted pool fails immediately
                pool_timeout=30 if config.wait_for_connections else 0,
                pool_pre_ping=True,
                poolclass=BoundedQueuePool,
                queue_limit=config.queue_limit,
            )

        return database

    @property
    def label(self) -> str:
        name = self.engine.dialect.name
        return DIALECT_LABELS.get(name, name)

    @contextmanager
    def get_session(self) -> Iterator[Session]:
        """Yields a session bound to the pool. Ensures connection release upon completion."""
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def initialize(self) -> bool:
        """Idempotent creation of the clientes and simulacoes tables."""
        # Importing the models registers their tables on Base.metadata
        from casa_programada.clientes.models import Client
        from casa_programada.simulacoes.models import Simulation

        try:
            Client.__table__.create(bind=self.engine, checkfirst=True)
            logger.info("Table clientes verified/created")

            Simulation.__table__.create(bind=self.engine, checkfirst=True)
            logger.info("Table simulacoes verified/created")
        except Exception as e:
            logger.error(f"Error creating tables: {str(e)}", exc_info=True)
            return False

        return True

    def check_status(self) -> Dict[str, Any]:
        """Liveness check reporting connectivity, store type and server version."""
        try:
            with self.engine.connect() as connection:
                connected = connection.execute(text("SELECT 1 AS connected")).scalar() == 1
        except Exception as e:
            logger.error(f"Error checking database status: {str(e)}")
            return {
                "success": False,
                "connected": False,
                "error": str(e),
            }

        return {
            "success": True,
            "connected": connected,
            "tipo": self.label,
            "versao": self.get_version(),
        }

    def get_version(self) -> str:
        query = VERSION_QUERIES.get(self.engine.dialect.name)
        if query is None:
            return UNKNOWN_VERSION

        try:
            with self.engine.connect() as connection:
                version = connection.execute(text(query)).scalar()
        except Exception as e:
            logger.error(f"Error fetching database version: {str(e)}")
            return UNKNOWN_VERSION

        return str(version) if version else UNKNOWN_VERSION

    def dispose(self) -> None:
        """Closes every pooled connection."""
        self.engine.dispose()


def init_database(settings: Optional[Settings] = None) -> Optional[Database]:
    """
    Builds the pool and creates the schema in one step.

    Returns the ready handle, or None when either step fails. Failures are
    logged, never raised.
    """
    database = None
    try:
        database = Database.from_settings(settings)
        if not database.initialize():
            database.dispose()
            return None
    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}", exc_info=True)
        if database is not None:
            database.dispose()
        return None

    logger.info(f"Database connected at {database.url.host or 'local'}/{database.url.database}")
    return database
