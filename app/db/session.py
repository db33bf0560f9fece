"""
Engine, session factory et unité de travail.
"""
from contextlib import contextmanager
from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import DATABASE_URL


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    # SQLite n'applique pas les FK (ni ON DELETE CASCADE) sans ce pragma
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(url: str):
    """Crée un engine; SQLite n'accepte pas les options de pool serveur."""
    if url.startswith("sqlite"):
        eng = create_engine(url, connect_args={"check_same_thread": False, "timeout": 30})
        event.listen(eng, "connect", _enable_sqlite_foreign_keys)
        return eng
    return create_engine(
        url,
        pool_size=8,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_timeout=30,
    )


def make_session_factory(engine) -> sessionmaker:
    # expire_on_commit=False: les objets restent lisibles après le commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


@contextmanager
def get_db_session(factory: Optional[sessionmaker] = None):
    """Context manager pour obtenir une session DB (commit ou rollback complet)."""
    session: Session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
