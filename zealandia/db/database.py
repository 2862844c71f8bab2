"""Database engine and session configuration."""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from zealandia.config import settings
from zealandia.db.models import Base


def build_engine(url: str, echo: bool = False) -> Engine:
    # the engine is shared across request threads
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, echo=echo)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def init_db(bind: Engine = engine) -> None:
    """Create every reputation table that does not exist yet."""
    Base.metadata.create_all(bind=bind)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session and close it after the request.

    Usage as a FastAPI dependency::

        @router.get("/health")
        def health_check(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
