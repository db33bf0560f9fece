"""
tests/test_deal_catalog.py

DealCatalog: lecture des deals et delta atomique sur save_count.
"""
from datetime import datetime, timezone

import pytest
from sqlalchemy import update

from app.core.exceptions import NotFoundError
from app.models import Bookmark, Deal
from app.repositories.deal_repository import DealCatalog


def test_get_deal_returns_live_deal(session_factory, make_deal):
    deal_id = make_deal()
    with session_factory() as session:
        deal = DealCatalog(session).get_deal(deal_id)
        assert deal.id == deal_id
        assert deal.is_bookmarkable is True


def test_get_deal_hides_soft_deleted(session_factory, make_deal):
    deal_id = make_deal()
    with session_factory() as session:
        session.execute(update(Deal).where(Deal.id == deal_id).values(deleted_at=datetime.now(timezone.utc)))
        session.commit()

    with session_factory() as session:
        with pytest.raises(NotFoundError):
            DealCatalog(session).get_deal(deal_id)


@pytest.mark.parametrize("start, delta, expected", [
    (0, 1, 1),
    (5, -1, 4),
    (1, -1, 0),
    (0, -1, 0),
    (2, -5, 0),
])
def test_apply_counter_delta(session_factory, make_deal, save_count, start, delta, expected):
    deal_id = make_deal(save_count=start)
    with session_factory() as session:
        DealCatalog(session).apply_counter_delta(deal_id, delta)
        session.commit()

    assert save_count(deal_id) == expected


def test_apply_counter_delta_on_missing_deal(session_factory):
    with session_factory() as session:
        with pytest.raises(NotFoundError) as exc:
            DealCatalog(session).apply_counter_delta("missing", 1)
    assert exc.value.resource == "deal"


def test_apply_counter_delta_is_rolled_back_with_transaction(session_factory, make_deal, save_count):
    deal_id = make_deal(save_count=3)
    with session_factory() as session:
        DealCatalog(session).apply_counter_delta(deal_id, 1)
        session.rollback()

    assert save_count(deal_id) == 3


def test_recount_save_count(session_factory, make_deal, save_count):
    deal_id = make_deal(save_count=7)
    with session_factory() as session:
        session.add_all([Bookmark(user_id=f"u{i}", deal_id=deal_id) for i in range(2)])
        session.commit()

    with session_factory() as session:
        before, after = DealCatalog(session).recount_save_count(deal_id)
        session.commit()

    assert (before, after) == (7, 2)
    assert save_count(deal_id) == 2


def test_all_deal_ids(session_factory, make_deal):
    ids = {make_deal(), make_deal()}
    with session_factory() as session:
        assert set(DealCatalog(session).all_deal_ids()) == ids
