"""
Client store connection and session management.
"""

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from processing.models import Base


def sqlite_directory(database_url: str) -> Optional[Path]:
    """Directory holding a file-based SQLite database, or None for other URLs."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite" or url.database in (None, "", ":memory:"):
        return None
    return Path(url.database).expanduser().resolve().parent


_db_dir = sqlite_directory(settings.DATABASE_URL)
if _db_dir is not None:
    _db_dir.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    future=True,
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db():
    """Create the client tables if missing."""
    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for a script run; always closed, never committed implicitly."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
