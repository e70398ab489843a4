import logging
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Build the engine for the single authoritative database.

    SQLite files get a busy timeout so concurrent writers queue on the
    database lock; in-memory databases share one connection so every
    session sees the same data.
    """
    url = make_url(database_url)
    kwargs = {"echo": echo}

    if url.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False, "timeout": 30}
        if url.database in (None, "", ":memory:"):
            kwargs["poolclass"] = StaticPool
    else:
        kwargs.update(
            pool_size=5,  # Connections in pool
            max_overflow=10,  # Extra connections when pool full
            pool_pre_ping=True,  # Verify connections before use
            pool_recycle=3600,  # Recycle connections every hour
        )

    engine = create_engine(url, **kwargs)

    if url.get_backend_name() == "sqlite":
        @event.listens_for(engine, "connect")
        def _set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    """
    Initialize database tables and seed the permission catalog.
    """
    # Import all models to register them with Base
    from account_registry.models import account, permission_level, login_history, operation_log  # noqa: F401
    from account_registry.permissions import seed_permission_levels

    Base.metadata.create_all(bind=engine)

    SessionLocal = make_session_factory(engine)
    db = SessionLocal()
    try:
        seed_permission_levels(db)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
    logger.info(f"Database initialized: {engine.url.render_as_string(hide_password=True)}")
