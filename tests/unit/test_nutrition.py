import pytest

from trainload.nutrition import (
    calculate_bmr,
    calculate_tdee,
    calculate_macros,
    round_calories,
    generate_nutrition_plan,
)


def test_bmr_male():
    assert calculate_bmr(80, 180, 30, 'male') == pytest.approx(1853.632)


def test_bmr_female():
    assert calculate_bmr(60, 165, 25, 'Female') == pytest.approx(1405.333)


def test_bmr_unspecified_sex_is_average():
    male = calculate_bmr(70, 175, 40, 'male')
    female = calculate_bmr(70, 175, 40, 'female')
    assert calculate_bmr(70, 175, 40, 'other') == pytest.approx((male + female) / 2)
    assert calculate_bmr(70, 175, 40, None) == pytest.approx((male + female) / 2)


@pytest.mark.parametrize("weight, height, age", [
    (0, 180, 30), (80, -1, 30), (80, 180, 'thirty'), (True, 180, 30),
    (float('inf'), 180, 30), (80, float('nan'), 30),
])
def test_bmr_rejects_bad_metrics(weight, height, age):
    with pytest.raises(ValueError):
        calculate_bmr(weight, height, age)


def test_tdee_multiplier_and_unknown_level():
    assert calculate_tdee(1000, 'sedentary') == pytest.approx(1200)
    assert calculate_tdee(1000, 'Very_Active') == pytest.approx(1900)
    with pytest.raises(ValueError):
        calculate_tdee(1000, 'couch')


@pytest.mark.parametrize("raw, expected", [(2873.13, 2850), (2875, 2900), (2824.9, 2800)])
def test_round_calories(raw, expected):
    assert round_calories(raw) == expected


def test_plan_balanced_maintain():
    plan = generate_nutrition_plan(80, 180, 30, 'male', 'moderate')
    assert plan['bmr'] == pytest.approx(1853.6)
    assert plan['calories_target'] == 2850
    assert plan['protein_g'] == 144
    assert plan['fat_g'] == 95
    assert plan['carbs_g'] == 355
    assert plan['goal'] == 'maintain'
    assert plan['diet_type'] == 'balanced'


def test_plan_keto():
    plan = generate_nutrition_plan(80, 180, 30, 'male', 'moderate', diet_type='keto')
    assert (plan['protein_g'], plan['carbs_g'], plan['fat_g']) == (178, 36, 222)


def test_plan_goal_scales_calories():
    maintain = generate_nutrition_plan(80, 180, 30, 'male', 'moderate')
    cut = generate_nutrition_plan(80, 180, 30, 'male', 'moderate', goal='lose_weight')
    bulk = generate_nutrition_plan(80, 180, 30, 'male', 'moderate', goal='gain_muscle')
    assert cut['calories_target'] < maintain['calories_target'] < bulk['calories_target']
    assert cut['calories_target'] % 50 == 0
    # cutting raises protein per kg
    assert cut['protein_g'] == 176


def test_balanced_carbs_never_negative():
    macros = calculate_macros(800, 150, 'lose_weight', 'balanced')
    assert macros['carbs_g'] == 0


@pytest.mark.parametrize("kwargs", [{'goal': 'get_swole'}, {'diet_type': 'carnivore'}])
def test_plan_rejects_unknown_options(kwargs):
    with pytest.raises(ValueError):
        generate_nutrition_plan(80, 180, 30, 'male', 'moderate', **kwargs)
