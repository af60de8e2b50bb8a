import os
import sys
import pytest

# Ensure the backend root (containing the `tictac` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from tictac import create_app, socketio


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    CORS_ORIGINS = ['http://localhost:5173']
    LOBBY_ROOM_TTL_SEC = 3600
    CREATOR_GRACE_SEC = 30
    SOCKETIO_ASYNC_MODE = 'threading'


class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FixedCoin:
    """Random source whose ``random()`` always returns the same value."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def make_sio_client(flask_app):
    """Factory for extra Socket.IO clients; all are disconnected on teardown."""
    created = []

    def _make():
        c = socketio.test_client(flask_app, namespace='/ws')
        created.append(c)
        return c

    yield _make
    for c in created:
        try:
            if c.is_connected('/ws'):
                c.disconnect(namespace='/ws')
        except Exception:
            pass
