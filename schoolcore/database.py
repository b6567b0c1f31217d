import threading
from typing import Iterator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from schoolcore.config import settings

_engine: Engine | None = None
_session_factory: sessionmaker | None = None
_init_lock = threading.Lock()


def _build_engine(url: str) -> Engine:
    if url.startswith("sqlite"):
        # SQLite has no real pool; pool sizing arguments are rejected
        return create_engine(
            url,
            echo=settings.DEBUG,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        url,
        pool_pre_ping=True,  # Verify connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        echo=settings.DEBUG,  # Log SQL queries in debug mode
    )


def get_engine() -> Engine:
    """
    Return the process-wide engine, creating it on first use.

    Safe to call from many threads at once: only the first caller builds
    the engine, everybody else gets the same instance.
    """
    global _engine, _session_factory
    if _engine is None:
        with _init_lock:
            if _engine is None:
                engine = _build_engine(settings.DATABASE_URL)
                _session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
                _engine = engine
    return _engine


def get_session_factory() -> sessionmaker:
    """
    FastAPI dependency returning the session factory.

    Used by side channels (audit) that must write outside the request's
    own session so their failures never touch the business transaction.
    """
    get_engine()
    return _session_factory


def get_db() -> Iterator[Session]:
    """
    FastAPI dependency for database sessions.

    Yields a database session and ensures it's closed after use.

    Usage:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
