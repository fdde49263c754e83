import pytest
from datetime import datetime, timezone
from decimal import Decimal

from trainload.models import (
    MuscleGroup,
    parse_muscle_group_map,
    parse_timestamp,
    UserFatigue,
    CompletedSet,
    WorkoutLog,
)


def test_parse_muscle_group_map_drops_unknown_and_non_numeric():
    parsed = parse_muscle_group_map({'Chest': 3, 'glutes': 2, 'legs': 'heavy', 'arms': True, 'core': Decimal('1.5')})
    assert parsed == {'chest': 3.0, 'core': 1.5}


def test_parse_muscle_group_map_empty():
    assert parse_muscle_group_map(None) == {}
    assert parse_muscle_group_map({}) == {}


def test_parse_timestamp_variants():
    expected = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
    assert parse_timestamp('2024-03-01T12:00:00Z') == expected
    assert parse_timestamp('2024-03-01T12:00:00') == expected
    assert parse_timestamp(datetime(2024, 3, 1, 12, 0)) == expected
    with pytest.raises(ValueError):
        parse_timestamp(1709294400)
    with pytest.raises(ValueError):
        parse_timestamp('yesterday')


def test_user_fatigue_from_row_and_to_dict():
    row = {
        'user_id': 'abc',
        'current_fatigue': Decimal('42.50'),
        'muscle_group_fatigue': {'legs': 40},
        'last_updated': datetime(2024, 3, 1, tzinfo=timezone.utc),
        'version': None,
    }
    snapshot = UserFatigue.from_row(row)
    assert snapshot.current_fatigue == 42.5
    assert snapshot.version == 0
    assert snapshot.to_dict() == {
        'user_id': 'abc',
        'current_fatigue': 42.5,
        'muscle_group_fatigue': {'legs': 40.0},
        'last_updated': '2024-03-01T00:00:00+00:00',
        'version': 0,
    }


def test_completed_set_reads_camel_case_and_true_flags_only():
    completed = CompletedSet.from_dict({
        'exerciseId': 'squat',
        'alternativeExerciseId': 'leg-press',
        'weight': 100,
        'reps': 5,
        'rir': 2,
        'isDropSet': True,
        'isRestPause': False,
        'isMyoReps': 'yes',
    })
    assert completed.techniques == ['isDropSet']
    assert completed.reps == 5
    assert completed.matches('squat')
    assert completed.matches('leg-press')
    assert not completed.matches('deadlift')


def test_workout_log_accepts_request_body():
    log = WorkoutLog.from_dict({
        'date': '2024-03-01T10:00:00Z',
        'completedSets': [{'exerciseId': 'squat', 'reps': 5}, 'garbage'],
        'duration': 55,
        'muscleGroupFatigue': {'legs': 4, MuscleGroup.CORE.value: 1},
    }, user_id='u1')
    assert log.user_id == 'u1'
    assert len(log.completed_sets) == 1
    assert log.duration == 55.0
    assert log.muscle_group_fatigue == {'legs': 4.0, 'core': 1.0}


def test_workout_log_accepts_database_row():
    log = WorkoutLog.from_dict({
        'user_id': 'u2',
        'date': datetime(2024, 3, 1, tzinfo=timezone.utc),
        'completed_sets': [],
        'duration': Decimal('47.5'),
        'muscle_group_fatigue': None,
    })
    assert log.user_id == 'u2'
    assert log.duration == 47.5
    assert log.muscle_group_fatigue == {}


@pytest.mark.parametrize("body", [
    {'completedSets': []},
    {'date': '2024-03-01', 'completedSets': [{'exerciseId': 'squat', 'reps': 5.5}]},
    {'date': '2024-03-01', 'completedSets': {'a': 1}},
    {'date': '2024-03-01', 'muscleGroupFatigue': [1, 2]},
    {'date': '2024-03-01', 'duration': 'long'},
])
def test_workout_log_rejects_malformed_bodies(body):
    with pytest.raises(ValueError):
        WorkoutLog.from_dict(body)
