from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def build_engine(database_url: str) -> Engine:
    """Creates the engine; SQLite connections are shared across request threads."""
    kwargs = {}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in IN_MEMORY_URLS:
            # one connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool

    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, bind=engine)


def create_database_tables(engine: Engine) -> None:
    """Creates all database tables defined in models.py."""
    import models  # noqa: F401  registers the tables on Base.metadata

    Base.metadata.create_all(bind=engine)


@contextmanager
def transaction(db: Session):
    """Commits on a clean exit and rolls back on any exception."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
