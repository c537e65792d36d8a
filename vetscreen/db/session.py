from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from vetscreen import config

DATABASE_URL = config.DATABASE_URL

_connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, connect_args=_connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create all tables. Models are imported here to register them on Base."""
    from vetscreen.db import models  # noqa: F401
    from vetscreen.db.base import Base

    Base.metadata.create_all(bind=engine)
