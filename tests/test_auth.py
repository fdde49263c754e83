import pytest
import uuid

import jwt
from trainload.app import app, decode_access_token


@pytest.fixture
def secret(client):
    return app.config["JWT_SECRET_KEY"]


def test_token_signed_with_other_secret_is_rejected(client, user_id):
    token = jwt.encode({'sub': user_id}, 'another-secret-that-is-long-enough-1234', algorithm='HS256')
    response = client.post('/v1/nutrition/plan', headers={'Authorization': f'Bearer {token}'}, json={})
    assert response.status_code == 401


def test_token_without_user_claim_is_rejected(client, secret):
    token = jwt.encode({'role': 'authenticated'}, secret, algorithm='HS256')
    response = client.get('/v1/exercises/squat/alternatives', headers={'Authorization': f'Bearer {token}'})
    assert response.status_code == 401
    assert 'missing user id' in response.get_json()['message']


def test_token_without_bearer_prefix_is_accepted(client, secret, user_id):
    token = jwt.encode({'sub': user_id}, secret, algorithm='HS256')
    response = client.get('/v1/exercises/squat/alternatives', headers={'Authorization': token})
    assert response.status_code == 200


def test_audience_is_checked_when_configured(client, secret):
    app.config['JWT_AUDIENCE'] = 'authenticated'
    try:
        good = jwt.encode({'sub': str(uuid.uuid4()), 'aud': 'authenticated'}, secret, algorithm='HS256')
        bad = jwt.encode({'sub': str(uuid.uuid4()), 'aud': 'someone-else'}, secret, algorithm='HS256')
        assert decode_access_token(good)['aud'] == 'authenticated'
        with pytest.raises(jwt.InvalidAudienceError):
            decode_access_token(bad)
    finally:
        app.config['JWT_AUDIENCE'] = None


def test_unknown_route_keeps_404(client):
    assert client.get('/v1/does-not-exist').status_code == 404
