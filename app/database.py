"""
Database Session Management - Core database connectivity layer
"""

from datetime import datetime, timezone
from typing import Generator, Optional
import logging
import time

from fastapi import Request
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Base class for all SQLAlchemy models - provides metadata and table registry
Base = declarative_base()


def enum_values(enum_cls) -> list:
    """Persist enum members by value ("in_progress"), not by name ("IN_PROGRESS")"""
    return [member.value for member in enum_cls]

def utcnow() -> datetime:
    """Naive UTC timestamp - the format every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)

class Database:
    """
    Owns the engine (connection pool) and the session factory.

    Constructed once at application startup, stored on app.state and disposed
    at shutdown. Request handlers reach it only through get_db().
    """

    def __init__(self, config: Settings):
        self.config = config
        url = config.database_url
        engine_kwargs = {
            "pool_pre_ping": True,  # Verify connection health before using (prevents stale connections)
            "echo": config.DEBUG,  # Log all SQL queries in debug mode
        }
        if url.startswith("sqlite"):
            # SQLite connections are used from the threadpool FastAPI runs sync handlers in
            engine_kwargs["connect_args"] = {"check_same_thread": False}
        else:
            engine_kwargs.update(
                pool_size=config.DB_POOL_SIZE,  # Number of persistent connections
                max_overflow=config.DB_MAX_OVERFLOW,  # Additional connections when pool is exhausted
                pool_timeout=config.DB_POOL_TIMEOUT,  # Wait time for available connection
            )
        self.engine = create_engine(url, **engine_kwargs)
        self._register_listeners(is_sqlite=url.startswith("sqlite"))

        # Session factory - creates new sessions for each request
        self.SessionLocal = sessionmaker(
            autocommit=False,  # Require explicit commits
            autoflush=False,   # Control when changes are flushed to database
            expire_on_commit=False,  # Keep loaded attributes usable after commit for responses
            bind=self.engine,
        )

    def _register_listeners(self, is_sqlite: bool) -> None:
        @event.listens_for(self.engine, "connect")
        def receive_connect(dbapi_conn, connection_record):
            if is_sqlite:
                # SQLite ignores ON DELETE clauses unless foreign keys are switched on per connection
                cursor = dbapi_conn.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()
            logger.debug("🔌 New database connection established")

        @event.listens_for(self.engine, "close")
        def receive_close(dbapi_conn, connection_record):
            logger.debug("🔌 Database connection closed")

    def session(self) -> Session:
        return self.SessionLocal()

    def check_connection(self) -> bool:
        """
        Verify database connectivity - used for health checks and startup validation.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"❌ Database connection failed: {str(e)}")
            return False

    def wait_until_ready(self, retries: Optional[int] = None, delay: Optional[float] = None) -> bool:
        """
        Startup connectivity check: a fixed number of attempts with a fixed delay.
        Returns False once the budget is spent so the caller can exit.
        """
        retries = retries if retries is not None else self.config.DB_CONNECT_RETRIES
        delay = delay if delay is not None else self.config.DB_CONNECT_RETRY_DELAY
        for attempt in range(1, retries + 1):
            if self.check_connection():
                logger.info("✅ Database connection successful")
                return True
            remaining = retries - attempt
            logger.warning(f"⚠️  Database connection failed. Retries left: {remaining}")
            if remaining:
                time.sleep(delay)
        return False

    def init_db(self) -> None:
        """
        Create all tables and, when enabled, the default users.
        Production deployments may manage the schema externally; create_all is idempotent.
        """
        logger.info("🏗️  Creating database tables...")
        from app.models import User, Task, TaskDocument  # noqa: F401 - registers tables with Base
        Base.metadata.create_all(bind=self.engine)
        logger.info("✅ Database tables created successfully")
        if self.config.SEED_DEFAULT_USERS:
            self.seed_default_users()

    def seed_default_users(self) -> None:
        """
        Create admin@test.com and user@test.com (password: "password") if missing.
        Failures are logged and re-raised; the app must not serve without its accounts.
        """
        from app.core.security import hash_password
        from app.models import User, UserRole

        db = self.session()
        try:
            hashed = hash_password("password", self.config)
            for email, role in (("admin@test.com", UserRole.ADMIN), ("user@test.com", UserRole.USER)):
                if db.query(User).filter(User.email == email).first() is None:
                    db.add(User(email=email, password_hash=hashed, role=role))
            db.commit()
            logger.info("👤 Default users ensured")
        except Exception as e:
            db.rollback()
            logger.error(f"❌ Error creating default users: {str(e)}", exc_info=True)
            raise
        finally:
            db.close()

    def pool_stats(self) -> dict:
        """
        Current connection pool statistics.
        Useful for monitoring connection usage and detecting leaks.
        """
        pool = self.engine.pool
        stats = {"status": pool.status()}
        for name in ("size", "checkedout", "overflow", "checkedin"):
            if hasattr(pool, name):
                stats[name] = getattr(pool, name)()
        return stats

    def dispose(self) -> None:
        """Close all pooled connections - called during application shutdown"""
        logger.info("🔌 Closing database connections...")
        self.engine.dispose()
        logger.info("✅ All database connections closed")

def get_database(request: Request) -> Database:
    return request.app.state.database

def get_db(request: Request) -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides database session per request.
    Automatically handles session lifecycle and cleanup.
    """
    db = get_database(request).session()
    try:
        yield db
    except Exception:
        db.rollback()  # Rollback failed transaction to prevent partial commits
        raise
    finally:
        db.close()  # Always close session - returns the connection to the pool
