import os

# Must happen before config.py is imported anywhere.
os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('HUGGING_FACE_API_KEY', 'test-key')

import pytest

import analysis_storage
from app import create_app
from sentiscope.extensions import db

EMOTION_PAYLOAD = [[
    {'label': 'joy', 'score': 0.9},
    {'label': 'anger', 'score': 0.05},
]]
SENTIMENT_PAYLOAD = [{'label': 'LABEL_2', 'score': 0.7}]


class FakeResponse:

    def __init__(self, status_code=200, json_data=None, text=''):
        self.status_code = status_code
        self._json = json_data
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._json is None:
            raise ValueError('No JSON object could be decoded')
        return self._json


class FakeSession:
    """Stands in for requests.Session; replays queued responses or errors."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.calls = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def post(self, url, headers=None, json=None, timeout=None):
        self.calls.append({'url': url, 'headers': headers, 'json': json, 'timeout': timeout})
        if not self.responses:
            raise AssertionError(f'Unexpected request to {url}')
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def ok(payload):
    return FakeResponse(200, payload)


def failing(status, text='error'):
    return FakeResponse(status, None, text)


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'SECRET_KEY': 'test-secret',
    'HUGGING_FACE_API_KEY': 'test-key',
    'PRIMARY_MODEL_URL': 'https://models.test/emotion',
    'FALLBACK_MODEL_URL': 'https://models.test/sentiment',
    'RETRY_BASE_DELAY': 0,
}


@pytest.fixture(autouse=True)
def clean_device_blobs():
    analysis_storage.global_device_blobs.clear()
    yield
    analysis_storage.global_device_blobs.clear()


@pytest.fixture
def fake_http():
    return FakeSession()


@pytest.fixture
def make_app(fake_http):
    created = []

    def _make(**overrides):
        settings = dict(TEST_CONFIG)
        settings.update(overrides)
        app = create_app(settings, http_session=fake_http)
        created.append(app)
        return app

    yield _make

    for app in created:
        with app.app_context():
            db.session.remove()
            db.drop_all()


@pytest.fixture
def app(make_app):
    return make_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def signed_in(client):
    with client.session_transaction() as sess:
        sess['user_id'] = 'user-1'
    return client
