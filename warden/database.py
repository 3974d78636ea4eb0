"""Database engine and session factory."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def make_engine(database_url: str, echo: bool = False, **kwargs) -> Engine:
    """Create an engine, with SQLite connections shareable across worker threads."""
    return create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False} if database_url.startswith("sqlite") else {},
        **kwargs,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to the engine."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
