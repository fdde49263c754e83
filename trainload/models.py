"""
Record types shared by the fatigue and weight modules.

Rows come out of psycopg2's RealDictCursor as plain dicts; the helpers here
turn them (and the JSON blobs inside them) into typed records.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from .constants import TECHNIQUE_FLAGS

logger = logging.getLogger(__name__)


class MuscleGroup(str, Enum):
    """Muscle groups tracked by the fatigue snapshot."""
    CHEST = "chest"
    BACK = "back"
    LEGS = "legs"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    CORE = "core"


MUSCLE_GROUP_NAMES = frozenset(group.value for group in MuscleGroup)


def parse_muscle_group_map(raw: Optional[Dict[str, Any]]) -> Dict[str, float]:
    """
    Keeps only known muscle groups with numeric values.

    Unknown keys are dropped with a warning so that a typo in a stored blob
    doesn't quietly start its own fatigue track.
    """
    if not raw:
        return {}
    parsed: Dict[str, float] = {}
    for key, value in raw.items():
        name = str(key).strip().lower()
        if name not in MUSCLE_GROUP_NAMES:
            logger.warning("Ignoring unknown muscle group '%s' in fatigue map.", key)
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            logger.warning("Ignoring non-numeric fatigue value %r for muscle group '%s'.", value, key)
            continue
        parsed[name] = float(value)
    return parsed


def parse_timestamp(value: Any) -> datetime:
    """Accepts datetimes or ISO-8601 strings (a trailing 'Z' included); naive values are taken as UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class UserFatigue:
    user_id: str
    current_fatigue: float
    muscle_group_fatigue: Dict[str, float]
    last_updated: datetime
    version: int = 0

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "UserFatigue":
        return cls(
            user_id=str(row["user_id"]),
            current_fatigue=float(row["current_fatigue"]),
            muscle_group_fatigue=parse_muscle_group_map(row.get("muscle_group_fatigue")),
            last_updated=parse_timestamp(row["last_updated"]),
            version=int(row.get("version") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "current_fatigue": self.current_fatigue,
            "muscle_group_fatigue": dict(self.muscle_group_fatigue),
            "last_updated": self.last_updated.isoformat(),
            "version": self.version,
        }


@dataclass
class CompletedSet:
    exercise_id: str
    alternative_exercise_id: Optional[str] = None
    weight: Optional[float] = None
    reps: Optional[int] = None
    rir: Optional[float] = None
    techniques: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CompletedSet":
        def _number(key):
            value = data.get(key)
            if value is None or isinstance(value, bool):
                return None
            return float(value)

        reps = _number("reps")
        if reps is not None and not reps.is_integer():
            raise ValueError(f"reps must be a whole number, got {data.get('reps')!r}")
        return cls(
            exercise_id=str(data.get("exerciseId") or ""),
            alternative_exercise_id=data.get("alternativeExerciseId") or None,
            weight=_number("weight"),
            reps=int(reps) if reps is not None else None,
            rir=_number("rir"),
            techniques=[flag for flag in TECHNIQUE_FLAGS if data.get(flag) is True],
        )

    def matches(self, exercise_id: str) -> bool:
        return exercise_id in (self.exercise_id, self.alternative_exercise_id)


@dataclass
class WorkoutLog:
    user_id: str
    date: datetime
    completed_sets: List[CompletedSet] = field(default_factory=list)
    duration: float = 0.0 # minutes
    muscle_group_fatigue: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], user_id: Optional[str] = None) -> "WorkoutLog":
        """
        Builds a log from a workout_logs row or a request body.

        Accepts both the snake_case column names and the camelCase keys the
        front end sends.
        """
        sets_raw = data.get("completed_sets", data.get("completedSets")) or []
        if not isinstance(sets_raw, list):
            raise ValueError("completed_sets must be a list")
        contribution_raw = data.get("muscle_group_fatigue", data.get("muscleGroupFatigue"))
        if contribution_raw is not None and not isinstance(contribution_raw, dict):
            raise ValueError("muscle_group_fatigue must be an object")
        if data.get("date") is None:
            raise ValueError("date is required")
        duration = data.get("duration") or 0
        if isinstance(duration, bool) or not isinstance(duration, (int, float, Decimal)):
            raise ValueError("duration must be a number of minutes")

        return cls(
            user_id=str(user_id or data.get("user_id") or data.get("userId") or ""),
            date=parse_timestamp(data["date"]),
            completed_sets=[CompletedSet.from_dict(s) for s in sets_raw if isinstance(s, dict)],
            duration=float(duration),
            muscle_group_fatigue=parse_muscle_group_map(contribution_raw),
        )


@dataclass
class ExerciseHistoryEntry:
    exercise_id: str
    date: datetime
    weight: float
    reps: int
    rir: float
