import pytest
import uuid
from unittest.mock import MagicMock

from trainload.blueprints import recommendations as recommendations_bp


@pytest.fixture
def fake_conn(monkeypatch):
    conn = MagicMock()
    monkeypatch.setattr(recommendations_bp, 'get_db_connection', lambda: conn)
    monkeypatch.setattr(recommendations_bp, 'release_db_connection', lambda c: None)
    return conn


def ideal_weight_url(user_id, exercise_id='bench-press', **params):
    query = '&'.join(f'{k}={v}' for k, v in params.items())
    return f'/v1/users/{user_id}/exercises/{exercise_id}/ideal-weight?{query}'


def test_ideal_weight_static_table(client, user_id, auth_headers, fake_conn):
    fake_conn.cursor.return_value.__enter__.return_value.fetchall.return_value = []

    response = client.get(ideal_weight_url(user_id, reps=8, rir=2), headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data['recommended_weight_kg'] == 85.0
    assert data['source'] == 'static_table'
    assert data['exercise_id'] == 'bench-press'
    assert data['target_reps'] == 8
    assert data['target_rir'] == 2.0


def test_ideal_weight_passes_targets_through(client, user_id, auth_headers, fake_conn, monkeypatch):
    seen = {}

    def fake_recommendation(uid, exercise_id, reps, rir, conn):
        seen.update(uid=uid, exercise_id=exercise_id, reps=reps, rir=rir)
        return {'recommended_weight_kg': 102.5, 'source': 'history', 'history_entries': 4,
                'estimated_1rm_kg': 130.0, 'fatigue': 20.0, 'fatigue_modifier': 1.03}

    monkeypatch.setattr(recommendations_bp, 'calculate_weight_recommendation', fake_recommendation)

    response = client.get(ideal_weight_url(user_id, 'squat', reps=5, rir=1.5), headers=auth_headers)

    assert response.status_code == 200
    assert response.get_json()['recommended_weight_kg'] == 102.5
    assert seen == {'uid': user_id, 'exercise_id': 'squat', 'reps': 5, 'rir': 1.5}


@pytest.mark.parametrize("params", [
    {}, {'reps': 'eight', 'rir': 2}, {'reps': 8}, {'reps': 0, 'rir': 2}, {'reps': 8, 'rir': -1},
    {'reps': 8, 'rir': 'inf'}, {'reps': 8, 'rir': 'nan'}, {'reps': 8.5, 'rir': 2},
])
def test_ideal_weight_bad_query(client, user_id, auth_headers, fake_conn, params):
    response = client.get(ideal_weight_url(user_id, **params), headers=auth_headers)
    assert response.status_code == 400


def test_ideal_weight_forbidden_for_other_user(client, auth_headers):
    response = client.get(ideal_weight_url(uuid.uuid4(), reps=8, rir=2), headers=auth_headers)
    assert response.status_code == 403


def test_list_alternatives_with_rir(client, auth_headers):
    response = client.get('/v1/exercises/bench-press/alternatives?rir=2', headers=auth_headers)

    assert response.status_code == 200
    data = response.get_json()
    assert data['exercise']['id'] == 'bench-press'
    by_id = {a['id']: a for a in data['alternatives']}
    assert by_id['dumbbell-bench-press']['recommended_rir'] == 3
    assert by_id['chest-fly']['recommended_rir'] == 4


def test_list_alternatives_without_rir(client, auth_headers):
    response = client.get('/v1/exercises/squat/alternatives', headers=auth_headers)
    data = response.get_json()
    assert data['target_rir'] is None
    assert all('recommended_rir' not in a for a in data['alternatives'])


def test_list_alternatives_unknown_and_bad_rir(client, auth_headers):
    assert client.get('/v1/exercises/nope/alternatives', headers=auth_headers).status_code == 404
    assert client.get('/v1/exercises/squat/alternatives?rir=9', headers=auth_headers).status_code == 400


def test_alternative_rir_by_id(client, auth_headers):
    response = client.post('/v1/exercises/alternative-rir', headers=auth_headers, json={
        'target': 'chest-fly', 'alternative': 'bench-press', 'target_rir': 2,
    })
    assert response.status_code == 200
    assert response.get_json() == {
        'target_exercise_id': 'chest-fly',
        'alternative_exercise_id': 'bench-press',
        'target_rir': 2,
        'recommended_rir': 0,
    }


def test_alternative_rir_inline_profile(client, auth_headers):
    response = client.post('/v1/exercises/alternative-rir', headers=auth_headers, json={
        'target': 'bench-press',
        'alternative': {'id': 'push-up', 'is_compound': True, 'equipment': ['bodyweight']},
        'target_rir': '1',
    })
    assert response.status_code == 200
    assert response.get_json()['recommended_rir'] == 2


@pytest.mark.parametrize("body, status", [
    ({'target': 'nope', 'alternative': 'bench-press', 'target_rir': 2}, 404),
    ({'target': 'bench-press', 'alternative': 'chest-fly'}, 400),
    ({'target': 'bench-press', 'alternative': 'chest-fly', 'target_rir': 7}, 400),
    ({'target': 42, 'alternative': 'chest-fly', 'target_rir': 2}, 400),
    ({'target': {'id': 'x'}, 'alternative': 'chest-fly', 'target_rir': 2}, 400),
    ({'target': 'bench-press', 'alternative': 'chest-fly', 'target_rir': 2.7}, 400),
    ({'target': {'id': 'a', 'is_compound': 'false'}, 'alternative': 'chest-fly', 'target_rir': 2}, 400),
])
def test_alternative_rir_errors(client, auth_headers, body, status):
    response = client.post('/v1/exercises/alternative-rir', headers=auth_headers, json=body)
    assert response.status_code == status


def test_alternatives_require_token(client):
    assert client.get('/v1/exercises/bench-press/alternatives').status_code == 401
