from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

# Create declarative base for models
Base = declarative_base()

IN_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def create_session_factory(database_url: str):
    """Create the engine and session factory for a cache database.

    SQLite files get their parent directory created. Tables are created on
    first use.
    """
    engine_args = {}
    if database_url.startswith("sqlite"):
        engine_args["connect_args"] = {"check_same_thread": False}
        if database_url in IN_MEMORY_URLS:
            # One shared connection, otherwise every thread sees its own empty database
            engine_args["poolclass"] = StaticPool
        else:
            Path(database_url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, **engine_args)

    from . import models  # noqa: F401  registers the tables on Base
    Base.metadata.create_all(engine)

    return sessionmaker(autocommit=False, autoflush=False, bind=engine)
