"""
Jobs RQ de réconciliation de deals.save_count.

save_count est un cache du nombre de bookmarks vivants. Quand le -1 d'un
unsave échoue après la suppression, ou après un crash, ces jobs recalculent
le compteur depuis la table bookmarks.
"""
from typing import Dict, Any

import redis
from rq import Queue

from app.core.config import REDIS_URL, COUNTER_QUEUE
from app.core.exceptions import NotFoundError
from app.core.logging import get_logger, timed
from app.db.session import get_db_session
from app.repositories.deal_repository import DealCatalog

logger = get_logger(__name__)


def get_queue() -> Queue:
    redis_conn = redis.from_url(REDIS_URL)
    return Queue(COUNTER_QUEUE, connection=redis_conn)


def reconcile_save_count(deal_id: str, session_factory=None) -> Dict[str, Any]:
    """Recalcule le save_count d'un deal."""
    try:
        with get_db_session(session_factory) as session:
            cached, actual = DealCatalog(session).recount_save_count(deal_id)
    except NotFoundError:
        logger.info("reconcile_skipped_missing_deal", deal_id=deal_id)
        return {"deal_id": deal_id, "status": "missing"}

    if cached != actual:
        logger.counter_drift(deal_id, cached, actual)
    return {"deal_id": deal_id, "status": "ok", "cached": cached, "actual": actual}


@timed(logger)
def reconcile_all_save_counts(session_factory=None) -> Dict[str, int]:
    """Balaye tous les deals. Une transaction par deal pour ne pas bloquer la table."""
    with get_db_session(session_factory) as session:
        deal_ids = DealCatalog(session).all_deal_ids()

    corrected = 0
    for deal_id in deal_ids:
        result = reconcile_save_count(deal_id, session_factory=session_factory)
        if result["status"] == "ok" and result["cached"] != result["actual"]:
            corrected += 1

    logger.info("reconcile_all_completed", scanned=len(deal_ids), corrected=corrected)
    return {"scanned": len(deal_ids), "corrected": corrected}


def enqueue_save_count_reconcile(deal_id: str) -> None:
    """Planifie la réconciliation d'un deal. Un échec Redis est loggé, pas levé."""
    try:
        job = get_queue().enqueue(reconcile_save_count, deal_id, job_timeout=60)
        logger.info("reconcile_enqueued", deal_id=deal_id, job_id=job.id)
    except redis.RedisError as e:
        logger.error(
            f"reconcile_enqueue_failed: {e}",
            deal_id=deal_id,
            error_type=type(e).__name__,
            exc_info=False,
        )
