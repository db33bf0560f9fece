"""
Fixtures partagées: une base SQLite fichier par test, un BookmarkStore
branché dessus, et des helpers pour créer des deals.
"""
import os
import uuid

# Avant tout import de app.*: l'engine global ne doit pas viser Postgres
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

import pytest
from sqlalchemy import delete, select

from app.db.session import make_engine, make_session_factory
from app.models import Base, Bookmark, Business, Deal, DealStatus
from app.services.bookmark_service import BookmarkStore


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'bookmarks.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def store(session_factory):
    return BookmarkStore(session_factory)


@pytest.fixture
def make_deal(session_factory):
    """Crée un deal (et son business). Retourne l'id du deal."""

    def _make(status=DealStatus.ACTIVE.value, save_count=0, title="50% Off Pizza", deal_id=None):
        with session_factory() as session:
            business = Business(
                business_name="Test Pizza",
                slug=f"test-pizza-{uuid.uuid4().hex[:8]}",
                category="restaurant",
                city="New York",
                location={"lat": 40.7128, "lng": -74.006},
            )
            session.add(business)
            session.flush()
            deal = Deal(
                id=deal_id or str(uuid.uuid4()),
                business_id=business.id,
                title=title,
                original_price=20.0,
                discounted_price=10.0,
                discount_percentage=50,
                category="food_beverage",
                status=status,
                save_count=save_count,
            )
            session.add(deal)
            session.commit()
            return deal.id

    return _make


@pytest.fixture
def save_count(session_factory):
    def _get(deal_id):
        with session_factory() as session:
            return session.execute(select(Deal.save_count).where(Deal.id == deal_id)).scalar_one()

    return _get


@pytest.fixture
def bookmark_rows(session_factory):
    def _count(user_id=None, deal_id=None):
        with session_factory() as session:
            stmt = select(Bookmark)
            if user_id is not None:
                stmt = stmt.where(Bookmark.user_id == user_id)
            if deal_id is not None:
                stmt = stmt.where(Bookmark.deal_id == deal_id)
            return len(session.execute(stmt).scalars().all())

    return _count


@pytest.fixture
def purge_deal(engine):
    """
    Supprime physiquement un deal en laissant ses bookmarks orphelins.

    Avec les FK actives, ON DELETE CASCADE emporterait les bookmarks: on les
    coupe le temps de ce DELETE pour reproduire une ligne héritée d'avant la
    contrainte (ou une purge faite hors de l'ORM).
    """

    def _purge(deal_id):
        with engine.connect() as conn:
            conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            conn.execute(delete(Deal).where(Deal.id == deal_id))
            conn.commit()
            conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    return _purge
