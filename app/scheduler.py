"""
Scheduler - Jobs planifiés de maintenance des compteurs.
"""
from datetime import datetime, timedelta, timezone

import redis
from rq_scheduler import Scheduler

from app.core.config import LOG_LEVEL, REDIS_URL, COUNTER_QUEUE, RECONCILE_INTERVAL_SECONDS
from app.core.logging import get_logger, setup_logging
from app.jobs_counters import reconcile_all_save_counts

logger = get_logger(__name__)


def get_scheduler() -> Scheduler:
    redis_conn = redis.from_url(REDIS_URL)
    return Scheduler(connection=redis_conn, queue_name=COUNTER_QUEUE)


def setup_scheduled_jobs(scheduler=None):
    scheduler = scheduler or get_scheduler()

    # Annuler les jobs existants
    for job in scheduler.get_jobs():
        scheduler.cancel(job)

    # Réconciliation complète des save_count
    scheduler.schedule(
        scheduled_time=datetime.now(timezone.utc) + timedelta(minutes=5),
        func=reconcile_all_save_counts,
        interval=RECONCILE_INTERVAL_SECONDS,
        repeat=None,
        result_ttl=3600,
        queue_name=COUNTER_QUEUE,
    )
    logger.info(f"Scheduled: save_count reconciliation every {RECONCILE_INTERVAL_SECONDS}s")
    return scheduler


def get_scheduled_jobs_info(scheduler=None):
    scheduler = scheduler or get_scheduler()

    return [{
        "id": job.id,
        "func_name": job.func_name,
        "interval": job.meta.get("interval"),
    } for job in scheduler.get_jobs()]


def main():
    """Enregistre les jobs planifiés. Le process `rqscheduler` doit tourner à côté."""
    setup_logging(level=LOG_LEVEL)
    scheduler = setup_scheduled_jobs()
    for info in get_scheduled_jobs_info(scheduler):
        logger.info("scheduled_job", job_id=info["id"], func_name=info["func_name"], interval=info["interval"])


if __name__ == "__main__":
    main()
