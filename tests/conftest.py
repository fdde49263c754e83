import pytest
import os
import sys
import uuid
from datetime import datetime, timezone, timedelta

import jwt

sys.path.append(os.path.dirname(os.path.dirname(__file__)))

# Shared in-memory limiter would otherwise leak request counts between tests
os.environ.setdefault("RATELIMIT_ENABLED", "false")

from trainload.app import app

TEST_JWT_SECRET = "test-secret-key-for-trainload-unit-tests"


@pytest.fixture()
def client():
    app.config.update(TESTING=True, JWT_SECRET_KEY=TEST_JWT_SECRET, JWT_AUDIENCE=None)
    with app.test_client() as client:
        yield client


@pytest.fixture()
def user_id():
    return str(uuid.uuid4())


@pytest.fixture()
def make_auth_headers():
    def _make(user_id, expires_in=timedelta(minutes=15), claim='sub'):
        payload = {claim: str(user_id), 'exp': datetime.now(timezone.utc) + expires_in}
        token = jwt.encode(payload, TEST_JWT_SECRET, algorithm="HS256")
        return {'Authorization': f'Bearer {token}'}
    return _make


@pytest.fixture()
def auth_headers(make_auth_headers, user_id):
    return make_auth_headers(user_id)
