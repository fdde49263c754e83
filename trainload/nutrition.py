"""
Daily calorie and macronutrient targets.

BMR uses the revised Harris-Benedict equations, TDEE applies the usual
activity multipliers, and the goal scales TDEE before macros are split.
"""
import math
from typing import Dict

KCAL_PER_GRAM_PROTEIN = 4
KCAL_PER_GRAM_CARBS = 4
KCAL_PER_GRAM_FAT = 9

ACTIVITY_MULTIPLIERS = {
    'sedentary': 1.2,
    'light': 1.375,
    'moderate': 1.55,
    'active': 1.725,
    'very_active': 1.9,
}

GOAL_CALORIE_FACTORS = {
    'lose_weight': 0.8,   # 20% deficit
    'maintain': 1.0,
    'gain_weight': 1.1,
    'gain_muscle': 1.15,
}

# Grams of protein per kg bodyweight for the balanced split
PROTEIN_G_PER_KG = {
    'lose_weight': 2.2,
    'gain_muscle': 2.0,
}
DEFAULT_PROTEIN_G_PER_KG = 1.8
BALANCED_FAT_FRACTION = 0.3

# (protein, carbs, fat) as fractions of total calories
DIET_MACRO_SPLITS = {
    'keto': (0.25, 0.05, 0.70),
    'low_carb': (0.30, 0.20, 0.50),
    'high_protein': (0.40, 0.30, 0.30),
}
DIET_TYPES = ('balanced',) + tuple(DIET_MACRO_SPLITS)

CALORIE_ROUNDING = 50


def _require_positive(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value) or value <= 0:
        raise ValueError(f"{name} must be a positive number")
    return float(value)


def calculate_bmr(weight_kg: float, height_cm: float, age: float, sex: str = 'male') -> float:
    weight_kg = _require_positive("weight_kg", weight_kg)
    height_cm = _require_positive("height_cm", height_cm)
    age = _require_positive("age", age)

    male = 88.362 + 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age
    female = 447.593 + 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age

    sex_processed = (sex or 'unknown').lower()
    if sex_processed == 'male':
        return male
    if sex_processed == 'female':
        return female
    return (male + female) / 2


def calculate_tdee(bmr: float, activity_level: str) -> float:
    multiplier = ACTIVITY_MULTIPLIERS.get((activity_level or '').lower())
    if multiplier is None:
        raise ValueError(f"Unknown activity level '{activity_level}'. Expected one of {sorted(ACTIVITY_MULTIPLIERS)}")
    return bmr * multiplier


def round_calories(calories: float) -> int:
    return int(math.floor(calories / CALORIE_ROUNDING + 0.5) * CALORIE_ROUNDING)


def calculate_macros(calories: float, weight_kg: float, goal: str, diet_type: str = 'balanced') -> Dict[str, int]:
    """Grams of protein, carbs and fat for a calorie target."""
    if diet_type in DIET_MACRO_SPLITS:
        protein_frac, carbs_frac, fat_frac = DIET_MACRO_SPLITS[diet_type]
        protein_g = calories * protein_frac / KCAL_PER_GRAM_PROTEIN
        carbs_g = calories * carbs_frac / KCAL_PER_GRAM_CARBS
        fat_g = calories * fat_frac / KCAL_PER_GRAM_FAT
    elif diet_type == 'balanced':
        protein_g = weight_kg * PROTEIN_G_PER_KG.get(goal, DEFAULT_PROTEIN_G_PER_KG)
        fat_g = calories * BALANCED_FAT_FRACTION / KCAL_PER_GRAM_FAT
        remaining = calories - protein_g * KCAL_PER_GRAM_PROTEIN - fat_g * KCAL_PER_GRAM_FAT
        carbs_g = max(0.0, remaining / KCAL_PER_GRAM_CARBS)
    else:
        raise ValueError(f"Unknown diet type '{diet_type}'. Expected one of {list(DIET_TYPES)}")

    return {
        'protein_g': int(round(protein_g)),
        'carbs_g': int(round(carbs_g)),
        'fat_g': int(round(fat_g)),
    }


def generate_nutrition_plan(
    weight_kg: float,
    height_cm: float,
    age: float,
    sex: str,
    activity_level: str,
    goal: str = 'maintain',
    diet_type: str = 'balanced',
) -> dict:
    """
    Calorie target and macro split for one user.

    Raises ValueError for non-positive body metrics or unknown
    activity level, goal or diet type.
    """
    if goal not in GOAL_CALORIE_FACTORS:
        raise ValueError(f"Unknown goal '{goal}'. Expected one of {sorted(GOAL_CALORIE_FACTORS)}")

    bmr = calculate_bmr(weight_kg, height_cm, age, sex)
    tdee = calculate_tdee(bmr, activity_level)
    calories = round_calories(tdee * GOAL_CALORIE_FACTORS[goal])
    macros = calculate_macros(calories, float(weight_kg), goal, diet_type)

    return {
        'bmr': round(bmr, 1),
        'tdee': round(tdee, 1),
        'calories_target': calories,
        'goal': goal,
        'diet_type': diet_type,
        **macros,
    }
