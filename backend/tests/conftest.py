import os
import sys
import pytest

# Ensure the backend root (containing the `typerace` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from typerace import create_app, socketio
from typerace.services.party import SessionManager


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    # Short enough for socket tests to wait out a whole round
    ROUND_DURATION_MS = 200
    CHALLENGE_WORD_COUNT = 4


class RecordingBroadcaster:
    def __init__(self):
        self.published = []
        self.emitted = []

    def emit(self, event, payload, to=None):
        self.emitted.append((event, payload, to))

    def publish(self, party):
        self.published.append(party.to_dict())

    def states(self, room):
        return [snap['state'] for snap in self.published if snap['name'] == room]


class ManualSpawner:
    """Collects background tasks instead of running them; `fire` runs them."""

    def __init__(self):
        self.tasks = []

    def __call__(self, fn, *args):
        self.tasks.append((fn, args))

    def fire(self, index=-1):
        fn, args = self.tasks[index]
        fn(*args)

    def fire_all(self):
        tasks, self.tasks = self.tasks, []
        for fn, args in tasks:
            fn(*args)


@pytest.fixture()
def broadcaster():
    return RecordingBroadcaster()


@pytest.fixture()
def spawner():
    return ManualSpawner()


@pytest.fixture()
def sessions(broadcaster, spawner):
    return SessionManager(
        broadcaster=broadcaster,
        spawn=spawner,
        sleep=lambda seconds: None,
        challenge=lambda: 'the quick brown fox',
        round_duration_ms=30000,
    )


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
    yield test_client
    try:
        test_client.disconnect()
    except Exception:
        pass
