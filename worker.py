#!/usr/bin/env python3
"""
Worker RQ avec logging JSON structuré.
Usage: python worker.py [queue_name ...]

La réconciliation périodique des save_count est planifiée par rq-scheduler,
pas par ce worker. En production il faut en plus:
    python -m app.scheduler          # enregistre les jobs (une fois par déploiement)
    rqscheduler --url $REDIS_URL     # process qui pousse les jobs dus dans la queue
"""
import sys

import redis
from rq import Worker, Queue

from app.core.config import LOG_LEVEL, REDIS_URL, COUNTER_QUEUE
from app.core.logging import setup_logging

# Setup structured logging avant tout
setup_logging(level=LOG_LEVEL)


def main():
    queue_names = sys.argv[1:] if len(sys.argv) > 1 else [COUNTER_QUEUE]
    redis_conn = redis.from_url(REDIS_URL)

    queues = [Queue(name, connection=redis_conn) for name in queue_names]
    worker = Worker(queues, connection=redis_conn)
    worker.work(with_scheduler=False)


if __name__ == "__main__":
    main()
