import os
import logging
from datetime import datetime, timezone
import psycopg2
import psycopg2.extras
from redis import Redis
from rq import Queue, Retry, get_current_job

from .app import get_db_connection, release_db_connection
from .fatigue import apply_rest_recovery, save_user_fatigue
from .models import UserFatigue

logger = logging.getLogger(__name__)

# Redis connection for RQ
redis_url = os.getenv("REDIS_URL", "redis://redis:6379/0")
redis_conn = Redis.from_url(redis_url)

# Default queue used by the API and worker
queue = Queue("fatigue", connection=redis_conn)

DEFAULT_RETRY = Retry(max=3, interval=[10, 30, 60])


def enqueue_nightly_fatigue_recovery():
    """Enqueue the nightly rest-day recovery with retry strategy."""
    return queue.enqueue(
        nightly_fatigue_recovery,
        retry=DEFAULT_RETRY,
    )


def nightly_fatigue_recovery(now=None):
    """
    Decays every stored snapshot for the rest time since its last write.

    Users whose row changed between read and write (a workout landed in the
    meantime) are skipped; the next run picks them up.
    Returns the number of snapshots written.
    """
    job = get_current_job()
    if job and job.meta.get("retry_count", 0) > 0:
        logger.info(
            "Retry attempt %s for job %s", job.meta["retry_count"], job.id
        )

    now = now or datetime.now(timezone.utc)
    conn = None
    updated = 0
    try:
        conn = get_db_connection()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(
                "SELECT user_id, current_fatigue, muscle_group_fatigue, last_updated, version FROM user_fatigue;"
            )
            rows = cur.fetchall()
        logger.info("--- Starting nightly fatigue recovery for %s users ---", len(rows))
        for row in rows:
            snapshot = UserFatigue.from_row(row)
            recovered = apply_rest_recovery(snapshot, now)
            with conn.cursor() as cur:
                written = save_user_fatigue(cur, recovered, expected_version=snapshot.version)
            if written is None:
                conn.rollback()
                logger.warning(
                    "Skipping user %s: fatigue row changed during recovery (version %s).",
                    snapshot.user_id, snapshot.version,
                )
                continue
            conn.commit()
            updated += 1
        logger.info("--- Finished nightly fatigue recovery: %s snapshots updated ---", updated)
        return updated
    except psycopg2.Error as e:
        logger.error("Database error during nightly fatigue recovery: %s", e)
        if conn:
            conn.rollback()
        raise
    finally:
        if conn:
            release_db_connection(conn)
