"""
Per-user fatigue snapshot: reading, recomputing after a workout, and the
load modifier derived from it.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Optional

import psycopg2
import psycopg2.extras
from psycopg2.extras import Json

from .constants import (
    DEFAULT_CURRENT_FATIGUE,
    DEFAULT_MUSCLE_GROUP_FATIGUE,
    MIN_FATIGUE,
    MAX_FATIGUE,
    FATIGUE_MODIFIER_AT_ZERO,
    FATIGUE_MODIFIER_AT_MIDPOINT,
    FATIGUE_MODIFIER_AT_MAX,
    FATIGUE_MIDPOINT,
    VOLUME_SET_CAP,
    TECHNIQUE_COUNT_CAP,
    DURATION_CAP_MINUTES,
    VOLUME_WEIGHT,
    TECHNIQUE_WEIGHT,
    DURATION_WEIGHT,
    GLOBAL_RECOVERY_PER_DAY,
    MUSCLE_GROUP_RECOVERY_PER_DAY,
    MUSCLE_GROUP_CONTRIBUTION_SCALE,
    RECOVERY_STATUS_THRESHOLDS,
    READY_TO_TRAIN_BELOW,
)
from .models import UserFatigue, WorkoutLog

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 86400.0


def clamp_fatigue(value: float) -> float:
    return max(MIN_FATIGUE, min(float(value), MAX_FATIGUE))


def default_user_fatigue(user_id: str, now: Optional[datetime] = None) -> UserFatigue:
    """Snapshot used when nothing is stored for the user (or it can't be read)."""
    return UserFatigue(
        user_id=str(user_id),
        current_fatigue=DEFAULT_CURRENT_FATIGUE,
        muscle_group_fatigue=dict(DEFAULT_MUSCLE_GROUP_FATIGUE),
        last_updated=now or datetime.now(timezone.utc),
        version=0,
    )


# --- Pure calculations ---

def fatigue_modifier(fatigue: float) -> float:
    """
    Maps global fatigue (0-100) to a load multiplier.

    Linear from 1.05 at 0 down to 1.00 at 50 (fresh lifters get a small
    bonus), then linear down to 0.80 at 100.
    """
    f = clamp_fatigue(fatigue)
    if f <= FATIGUE_MIDPOINT:
        drop = FATIGUE_MODIFIER_AT_ZERO - FATIGUE_MODIFIER_AT_MIDPOINT
        return FATIGUE_MODIFIER_AT_ZERO - drop * (f / FATIGUE_MIDPOINT)
    drop = FATIGUE_MODIFIER_AT_MIDPOINT - FATIGUE_MODIFIER_AT_MAX
    return FATIGUE_MODIFIER_AT_MIDPOINT - drop * ((f - FATIGUE_MIDPOINT) / (MAX_FATIGUE - FATIGUE_MIDPOINT))


def calculate_workout_intensity(workout_log: WorkoutLog) -> float:
    """
    Session intensity on a 0-100 scale.

    40% set volume (20 sets saturates), 40% advanced techniques (5 saturates,
    every technique flag on every set counts), 20% duration (90 min saturates).
    """
    set_count = len(workout_log.completed_sets)
    technique_count = sum(len(s.techniques) for s in workout_log.completed_sets)
    duration = max(0.0, workout_log.duration or 0.0)

    volume_factor = min(set_count / VOLUME_SET_CAP, 1.0) * 100
    technique_factor = min(technique_count / TECHNIQUE_COUNT_CAP, 1.0) * 100
    duration_factor = min(duration / DURATION_CAP_MINUTES, 1.0) * 100

    return (
        volume_factor * VOLUME_WEIGHT
        + technique_factor * TECHNIQUE_WEIGHT
        + duration_factor * DURATION_WEIGHT
    )


def calculate_recovery_days(since: datetime, now: Optional[datetime] = None) -> float:
    """Fractional days elapsed since `since`. Timestamps in the future count as zero."""
    now = now or datetime.now(timezone.utc)
    elapsed = (now - since).total_seconds() / SECONDS_PER_DAY
    return max(0.0, elapsed)


def compute_updated_fatigue(
    previous: UserFatigue,
    workout_log: WorkoutLog,
    now: Optional[datetime] = None,
) -> UserFatigue:
    """
    Blends recovery since the log's date with the new session's load.

    Returns a new snapshot; `previous` is left untouched. The version is
    carried over unchanged, the writer bumps it.
    """
    now = now or datetime.now(timezone.utc)
    intensity = calculate_workout_intensity(workout_log)
    recovery_days = calculate_recovery_days(workout_log.date, now)

    recovered = max(0.0, previous.current_fatigue - recovery_days * GLOBAL_RECOVERY_PER_DAY)
    new_global = clamp_fatigue(recovered + intensity)

    groups: Dict[str, float] = dict(previous.muscle_group_fatigue)
    for group, contribution in workout_log.muscle_group_fatigue.items():
        added = contribution * MUSCLE_GROUP_CONTRIBUTION_SCALE
        prior = groups.get(group)
        if prior is None:
            groups[group] = clamp_fatigue(added)
        else:
            prior_recovered = max(0.0, prior - recovery_days * MUSCLE_GROUP_RECOVERY_PER_DAY)
            groups[group] = clamp_fatigue(prior_recovered + added)

    logger.info(
        "Fatigue for user %s: intensity=%.1f recovery_days=%.2f global %.1f -> %.1f",
        previous.user_id, intensity, recovery_days, previous.current_fatigue, new_global,
    )

    return UserFatigue(
        user_id=previous.user_id,
        current_fatigue=new_global,
        muscle_group_fatigue={g: clamp_fatigue(v) for g, v in groups.items()},
        last_updated=now,
        version=previous.version,
    )


def apply_rest_recovery(snapshot: UserFatigue, now: Optional[datetime] = None) -> UserFatigue:
    """Decays a snapshot for the rest time elapsed since it was last written."""
    now = now or datetime.now(timezone.utc)
    days = calculate_recovery_days(snapshot.last_updated, now)
    return UserFatigue(
        user_id=snapshot.user_id,
        current_fatigue=clamp_fatigue(snapshot.current_fatigue - days * GLOBAL_RECOVERY_PER_DAY),
        muscle_group_fatigue={
            group: clamp_fatigue(value - days * MUSCLE_GROUP_RECOVERY_PER_DAY)
            for group, value in snapshot.muscle_group_fatigue.items()
        },
        last_updated=now,
        version=snapshot.version,
    )


def classify_recovery_status(fatigue: float) -> str:
    for upper_bound, status in RECOVERY_STATUS_THRESHOLDS:
        if fatigue < upper_bound:
            return status
    return "poor"


def is_ready_to_train(fatigue: float) -> bool:
    return fatigue < READY_TO_TRAIN_BELOW


# --- Persistence ---

def load_user_fatigue(cur, user_id: str) -> Optional[UserFatigue]:
    """Strict read: None when there is no row, database errors propagate."""
    cur.execute(
        """
        SELECT user_id, current_fatigue, muscle_group_fatigue, last_updated, version
        FROM user_fatigue WHERE user_id = %s;
        """,
        (str(user_id),)
    )
    row = cur.fetchone()
    if not row:
        return None
    snapshot = UserFatigue.from_row(row)
    if row.get("muscle_group_fatigue") is None:
        snapshot.muscle_group_fatigue = dict(DEFAULT_MUSCLE_GROUP_FATIGUE)
    return snapshot


def save_user_fatigue(cur, snapshot: UserFatigue, expected_version: int) -> Optional[UserFatigue]:
    """
    Upserts the snapshot if the stored version still equals `expected_version`.

    Returns the written snapshot (with its bumped version), or None when
    another writer got there first. The caller owns commit/rollback.
    """
    written = UserFatigue(
        user_id=snapshot.user_id,
        current_fatigue=clamp_fatigue(snapshot.current_fatigue),
        muscle_group_fatigue={g: clamp_fatigue(v) for g, v in snapshot.muscle_group_fatigue.items()},
        last_updated=snapshot.last_updated,
        version=expected_version + 1,
    )
    cur.execute(
        """
        INSERT INTO user_fatigue (user_id, current_fatigue, muscle_group_fatigue, last_updated, version)
        VALUES (%s, %s, %s, %s, %s)
        ON CONFLICT (user_id) DO UPDATE
        SET current_fatigue = EXCLUDED.current_fatigue,
            muscle_group_fatigue = EXCLUDED.muscle_group_fatigue,
            last_updated = EXCLUDED.last_updated,
            version = EXCLUDED.version
        WHERE user_fatigue.version = %s;
        """,
        (
            written.user_id,
            written.current_fatigue,
            Json(written.muscle_group_fatigue),
            written.last_updated,
            written.version,
            expected_version,
        )
    )
    if cur.rowcount != 1:
        return None
    return written


def seed_user_fatigue(cur, snapshot: UserFatigue) -> bool:
    """Inserts a first snapshot; leaves an existing row alone."""
    cur.execute(
        """
        INSERT INTO user_fatigue (user_id, current_fatigue, muscle_group_fatigue, last_updated, version)
        VALUES (%s, %s, %s, %s, %s)
        ON CONFLICT (user_id) DO NOTHING;
        """,
        (
            snapshot.user_id,
            snapshot.current_fatigue,
            Json(snapshot.muscle_group_fatigue),
            snapshot.last_updated,
            snapshot.version,
        )
    )
    return cur.rowcount == 1


def get_user_fatigue(user_id: str, db_conn) -> UserFatigue:
    """
    Returns the stored snapshot, or the default one.

    Never raises: recommendations must keep working without a fatigue record.
    When the record is simply missing the default is also stored so that
    the next workout has something to update.
    """
    try:
        with db_conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            snapshot = load_user_fatigue(cur, user_id)
    except (psycopg2.Error, ValueError, KeyError, TypeError) as e:
        logger.error(f"Error reading fatigue for user {user_id}: {e}", exc_info=True)
        return default_user_fatigue(user_id)

    if snapshot is not None:
        return snapshot

    logger.info(f"No fatigue record for user {user_id}; using and storing defaults.")
    default = default_user_fatigue(user_id)
    try:
        with db_conn.cursor() as cur:
            seed_user_fatigue(cur, default)
        db_conn.commit()
    except psycopg2.Error as e:
        logger.error(f"Could not store default fatigue for user {user_id}: {e}")
        db_conn.rollback()
    return default


def apply_workout_to_fatigue(
    user_id: str,
    workout_log: WorkoutLog,
    db_conn,
    now: Optional[datetime] = None,
) -> Optional[UserFatigue]:
    """
    Folds a completed workout into the user's snapshot and returns what was written.

    None when the user has no snapshot yet, when the write fails, or when a
    concurrent update changed the row since it was read. Nothing is retried.
    """
    try:
        with db_conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            previous = load_user_fatigue(cur, user_id)
            if previous is None:
                logger.warning(f"Fatigue update skipped: no snapshot stored for user {user_id}.")
                return None

            updated = compute_updated_fatigue(previous, workout_log, now)
            written = save_user_fatigue(cur, updated, expected_version=previous.version)
        if written is None:
            logger.warning(
                f"Fatigue update for user {user_id} lost a concurrent write (version {previous.version}); not applied."
            )
            db_conn.rollback()
            return None
        db_conn.commit()
        logger.info(f"Fatigue updated for user {user_id}: global={written.current_fatigue:.1f}, version={written.version}")
        return written
    except (psycopg2.Error, ValueError, KeyError, TypeError) as e:
        logger.error(f"Error updating fatigue for user {user_id}: {e}", exc_info=True)
        db_conn.rollback()
        return None


def update_user_fatigue(
    user_id: str,
    workout_log: WorkoutLog,
    db_conn,
    now: Optional[datetime] = None,
) -> bool:
    return apply_workout_to_fatigue(user_id, workout_log, db_conn, now) is not None
