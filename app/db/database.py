from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):
    pass


# lié à un engine par init_db() au démarrage de l'app
SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False)

_engine: Engine | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # sans ce PRAGMA, SQLite ignore ON DELETE CASCADE
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_db(database_url: str) -> Engine:
    """
    Crée l'engine, lie SessionLocal et crée les tables manquantes.
    """
    global _engine

    url = make_url(database_url)
    connect_args = {}
    if url.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
        if url.database and url.database != ":memory:":
            Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    if _engine is not None:
        _engine.dispose()

    engine = create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)
    if url.get_backend_name() == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    # import local : enregistre les modèles sur Base.metadata
    from app.db import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    SessionLocal.configure(bind=engine)
    _engine = engine
    return engine


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
