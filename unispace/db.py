import os
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from unispace.config import settings


SQLALCHEMY_DATABASE_URL = settings.database_url


def build_engine(url: str):
    """Create an engine, allowing SQLite connections to cross threads."""
    connect_args = {}
    if make_url(url).get_backend_name() == "sqlite":
        connect_args = {"check_same_thread": False, "timeout": 15}
    return create_engine(url, connect_args=connect_args)


engine = build_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_database():
    database = make_url(SQLALCHEMY_DATABASE_URL).database
    if database and database != ":memory:":
        directory = os.path.dirname(database)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)
    # registers every mapped table on Base.metadata
    import unispace.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    """Provide a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
