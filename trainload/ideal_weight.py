# Epley formula for 1RM estimation
# Formula: 1RM = w * (1 + r / 30)
# Solving the same formula for w gives the working weight for a rep target:
# w = 1RM / (1 + (reps + rir) / 30), counting reps left in reserve as reps.

import logging
import math
from typing import Any, Dict, List, Optional

import psycopg2
import psycopg2.extras

from .constants import (
    BASE_WEIGHT_TABLE_KG,
    DEFAULT_BASE_WEIGHT_KG,
    BASELINE_REPS,
    PER_REP_WEIGHT_ADJUSTMENT,
    PER_RIR_WEIGHT_ADJUSTMENT,
    HISTORY_LOG_LIMIT,
    MIN_HISTORY_ENTRIES,
    EPLEY_REP_DIVISOR,
    WEIGHT_INCREMENT_KG,
)
from .fatigue import get_user_fatigue, fatigue_modifier
from .models import ExerciseHistoryEntry, WorkoutLog

logger = logging.getLogger(__name__)

SOURCE_HISTORY = "history"
SOURCE_STATIC_TABLE = "static_table"


def epley_1rm(weight: float, reps: float) -> float:
    return weight * (1 + reps / EPLEY_REP_DIVISOR)


def weight_for_reps(one_rm: float, reps: float, rir: float = 0) -> float:
    """Working weight that leaves `rir` reps in reserve after `reps` reps."""
    return one_rm / (1 + (reps + rir) / EPLEY_REP_DIVISOR)


def round_to_increment(weight: float, increment: float = WEIGHT_INCREMENT_KG) -> float:
    """Rounds to the nearest increment, halves going up."""
    return math.floor(weight / increment + 0.5) * increment


def normalize_exercise_id(exercise_id: str) -> str:
    return str(exercise_id).strip().lower().replace("_", "-").replace(" ", "-")


def static_table_weight(exercise_id: str, target_reps: int, target_rir: float) -> float:
    """
    Recommendation for users without enough history.

    Table weight for 8 reps, 2.5% less per extra rep (more per rep below 8),
    2.5% more per unit of target RIR. Never negative.
    """
    base = BASE_WEIGHT_TABLE_KG.get(normalize_exercise_id(exercise_id), DEFAULT_BASE_WEIGHT_KG)
    reps_modifier = 1 - (target_reps - BASELINE_REPS) * PER_REP_WEIGHT_ADJUSTMENT
    rir_modifier = 1 + target_rir * PER_RIR_WEIGHT_ADJUSTMENT
    return round_to_increment(max(0.0, base * reps_modifier * rir_modifier))


def fetch_recent_workout_logs(cur, user_id: str, limit: int = HISTORY_LOG_LIMIT) -> List[WorkoutLog]:
    cur.execute(
        """
        SELECT user_id, date, completed_sets, duration, muscle_group_fatigue
        FROM workout_logs
        WHERE user_id = %s
        ORDER BY date DESC
        LIMIT %s;
        """,
        (str(user_id), limit)
    )
    return [WorkoutLog.from_dict(row) for row in cur.fetchall()]


def build_exercise_history(workout_logs: List[WorkoutLog], exercise_id: str) -> List[ExerciseHistoryEntry]:
    """
    Sets performed for `exercise_id` (directly or as the logged substitute)
    that recorded weight, reps and RIR. Keeps the order of `workout_logs`.
    """
    history = []
    for log in workout_logs:
        for completed in log.completed_sets:
            if not completed.matches(exercise_id):
                continue
            if completed.weight is None or completed.reps is None or completed.rir is None:
                continue
            history.append(ExerciseHistoryEntry(
                exercise_id=exercise_id,
                date=log.date,
                weight=completed.weight,
                reps=completed.reps,
                rir=completed.rir,
            ))
    return history


def calculate_weight_recommendation(
    user_id: str,
    exercise_id: str,
    target_reps: int,
    target_rir: float,
    db_conn,
) -> Optional[Dict[str, Any]]:
    """
    Recommended load plus how it was reached.

    Returns None for unusable targets (reps < 1, negative RIR or a
    non-finite value). Database errors while reading history are logged
    and answered from the static table; this function does not raise for them.
    """
    if (
        target_reps is None or target_rir is None
        or not math.isfinite(target_reps) or not math.isfinite(target_rir)
        or target_reps < 1 or target_rir < 0
    ):
        logger.warning(f"Invalid weight target for user {user_id}, exercise {exercise_id}: reps={target_reps}, rir={target_rir}")
        return None

    history: List[ExerciseHistoryEntry] = []
    try:
        with db_conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            logs = fetch_recent_workout_logs(cur, user_id)
        history = build_exercise_history(logs, exercise_id)
    except (psycopg2.Error, ValueError, KeyError, TypeError) as e:
        logger.error(f"Error reading workout history for user {user_id}, exercise {exercise_id}: {e}", exc_info=True)
        history = []

    if len(history) < MIN_HISTORY_ENTRIES:
        weight = static_table_weight(exercise_id, target_reps, target_rir)
        logger.info(
            f"User {user_id}, exercise {exercise_id}: {len(history)} history entries, "
            f"static table weight {weight:.1f}kg for {target_reps} reps @ RIR {target_rir}."
        )
        return {
            "recommended_weight_kg": weight,
            "source": SOURCE_STATIC_TABLE,
            "history_entries": len(history),
            "estimated_1rm_kg": None,
            "fatigue": None,
            "fatigue_modifier": 1.0,
        }

    latest = history[0]
    one_rm = epley_1rm(latest.weight, latest.reps)
    target_weight = weight_for_reps(one_rm, target_reps, target_rir)

    fatigue = get_user_fatigue(user_id, db_conn)
    modifier = fatigue_modifier(fatigue.current_fatigue)
    weight = round_to_increment(max(0.0, target_weight * modifier))

    logger.info(
        f"User {user_id}, exercise {exercise_id}: e1RM {one_rm:.1f}kg from {latest.weight}kg x {latest.reps}, "
        f"target {target_weight:.1f}kg, fatigue {fatigue.current_fatigue:.0f} (x{modifier:.3f}) -> {weight:.1f}kg."
    )
    return {
        "recommended_weight_kg": weight,
        "source": SOURCE_HISTORY,
        "history_entries": len(history),
        "estimated_1rm_kg": round(one_rm, 2),
        "fatigue": fatigue.current_fatigue,
        "fatigue_modifier": round(modifier, 4),
    }


def calculate_ideal_weight(
    user_id: str,
    exercise_id: str,
    target_reps: int,
    target_rir: float,
    db_conn,
) -> Optional[float]:
    recommendation = calculate_weight_recommendation(user_id, exercise_id, target_reps, target_rir, db_conn)
    if recommendation is None:
        return None
    return recommendation["recommended_weight_kg"]
