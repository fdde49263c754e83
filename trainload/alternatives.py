"""
Exercise substitutes and the RIR to prescribe when one is used.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .constants import MIN_RECOMMENDED_RIR, MAX_RECOMMENDED_RIR
from .models import MuscleGroup


@dataclass(frozen=True)
class ExerciseProfile:
    id: str
    name: str
    is_compound: bool
    equipment: Tuple[str, ...]
    movement_pattern: str = "isolation"
    primary_muscle: Optional[MuscleGroup] = None

    @property
    def uses_barbell(self) -> bool:
        return "barbell" in self.equipment

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExerciseProfile":
        """Inline profile from a request body. Raises ValueError on missing fields."""
        if not isinstance(data, dict):
            raise ValueError("exercise profile must be an object")
        if "id" not in data or "is_compound" not in data:
            raise ValueError("exercise profile needs 'id' and 'is_compound'")
        if not isinstance(data["is_compound"], bool):
            raise ValueError("'is_compound' must be true or false")
        equipment = data.get("equipment") or ()
        if isinstance(equipment, str):
            equipment = (equipment,)
        muscle = data.get("primary_muscle")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            is_compound=data["is_compound"],
            equipment=tuple(str(e).lower() for e in equipment),
            movement_pattern=str(data.get("movement_pattern") or "isolation"),
            primary_muscle=MuscleGroup(muscle) if muscle else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_compound": self.is_compound,
            "equipment": list(self.equipment),
            "movement_pattern": self.movement_pattern,
            "primary_muscle": self.primary_muscle.value if self.primary_muscle else None,
        }


def _profile(id, name, is_compound, equipment, pattern, muscle):
    return ExerciseProfile(id, name, is_compound, tuple(equipment), pattern, muscle)


EXERCISE_CATALOG: Dict[str, ExerciseProfile] = {p.id: p for p in (
    _profile("bench-press", "Barbell Bench Press", True, ["barbell"], "horizontal_push", MuscleGroup.CHEST),
    _profile("incline-bench-press", "Incline Barbell Bench Press", True, ["barbell"], "horizontal_push", MuscleGroup.CHEST),
    _profile("dumbbell-bench-press", "Dumbbell Bench Press", True, ["dumbbell"], "horizontal_push", MuscleGroup.CHEST),
    _profile("chest-fly", "Cable Chest Fly", False, ["cable"], "horizontal_push", MuscleGroup.CHEST),
    _profile("overhead-press", "Barbell Overhead Press", True, ["barbell"], "vertical_push", MuscleGroup.SHOULDERS),
    _profile("dumbbell-shoulder-press", "Dumbbell Shoulder Press", True, ["dumbbell"], "vertical_push", MuscleGroup.SHOULDERS),
    _profile("lateral-raise", "Dumbbell Lateral Raise", False, ["dumbbell"], "vertical_push", MuscleGroup.SHOULDERS),
    _profile("barbell-row", "Barbell Row", True, ["barbell"], "horizontal_pull", MuscleGroup.BACK),
    _profile("dumbbell-row", "One-Arm Dumbbell Row", True, ["dumbbell"], "horizontal_pull", MuscleGroup.BACK),
    _profile("seated-cable-row", "Seated Cable Row", True, ["cable", "machine"], "horizontal_pull", MuscleGroup.BACK),
    _profile("lat-pulldown", "Lat Pulldown", True, ["cable", "machine"], "vertical_pull", MuscleGroup.BACK),
    _profile("pull-up", "Pull-Up", True, ["bodyweight"], "vertical_pull", MuscleGroup.BACK),
    _profile("squat", "Barbell Back Squat", True, ["barbell"], "squat", MuscleGroup.LEGS),
    _profile("front-squat", "Barbell Front Squat", True, ["barbell"], "squat", MuscleGroup.LEGS),
    _profile("leg-press", "Leg Press", True, ["machine"], "squat", MuscleGroup.LEGS),
    _profile("leg-extension", "Leg Extension", False, ["machine"], "squat", MuscleGroup.LEGS),
    _profile("deadlift", "Conventional Deadlift", True, ["barbell"], "hip_hinge", MuscleGroup.LEGS),
    _profile("romanian-deadlift", "Romanian Deadlift", True, ["barbell"], "hip_hinge", MuscleGroup.LEGS),
    _profile("hip-thrust", "Barbell Hip Thrust", True, ["barbell"], "hip_hinge", MuscleGroup.LEGS),
    _profile("leg-curl", "Lying Leg Curl", False, ["machine"], "hip_hinge", MuscleGroup.LEGS),
    _profile("bicep-curl", "Dumbbell Biceps Curl", False, ["dumbbell"], "isolation", MuscleGroup.ARMS),
    _profile("tricep-extension", "Cable Triceps Extension", False, ["cable"], "isolation", MuscleGroup.ARMS),
)}


def get_exercise_profile(exercise_id: str) -> Optional[ExerciseProfile]:
    return EXERCISE_CATALOG.get(exercise_id)


def get_alternatives(exercise_id: str) -> List[ExerciseProfile]:
    """Catalog exercises sharing the movement pattern and primary muscle of `exercise_id`."""
    target = get_exercise_profile(exercise_id)
    if target is None:
        return []
    return [
        profile for profile in EXERCISE_CATALOG.values()
        if profile.id != target.id
        and profile.movement_pattern == target.movement_pattern
        and profile.primary_muscle == target.primary_muscle
    ]


def recommend_alternative_rir(target: ExerciseProfile, alternative: ExerciseProfile, target_rir: int) -> int:
    """
    RIR to prescribe for `alternative` when it replaces `target`.

    A compound substitute for an isolation movement, or a barbell substitute
    for a non-barbell one, counts as the harder variant and gets one rep less
    in reserve; the reverse mismatches get one more. Both adjustments add up,
    clamped to 0-4.
    """
    adjustment = 0
    if alternative.is_compound and not target.is_compound:
        adjustment -= 1
    elif target.is_compound and not alternative.is_compound:
        adjustment += 1

    if alternative.uses_barbell and not target.uses_barbell:
        adjustment -= 1
    elif target.uses_barbell and not alternative.uses_barbell:
        adjustment += 1

    return max(MIN_RECOMMENDED_RIR, min(int(target_rir) + adjustment, MAX_RECOMMENDED_RIR))
