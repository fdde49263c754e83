"""Runs the RQ worker for the fatigue queue: python -m trainload.worker"""
import logging
from rq import Worker
from rq.registry import FailedJobRegistry
from .tasks import queue, redis_conn

logger = logging.getLogger(__name__)


def requeue_failed_jobs():
    """Gives jobs that exhausted their retries in a previous run one more go."""
    failed_registry = FailedJobRegistry(queue.name, connection=redis_conn)
    job_ids = failed_registry.get_job_ids()
    for job_id in job_ids:
        logger.info("Requeuing failed fatigue job %s", job_id)
        queue.requeue(job_id)
    return len(job_ids)


def main():
    logging.basicConfig(level=logging.INFO)
    requeue_failed_jobs()
    Worker([queue], connection=redis_conn).work(with_scheduler=True)


if __name__ == "__main__":
    main()
