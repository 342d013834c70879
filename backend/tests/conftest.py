import os
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `trivia` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from trivia import build_services, create_app, socketio
from trivia.services import ManualClock


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    TRIVIA_CLOCK = 'manual'
    SOCKETIO_NAMESPACE = '/'
    LOG_LEVEL = 'DEBUG'


class RecordingTransport:
    """Stands in for Socket.IO: remembers group membership and every emit."""

    def __init__(self):
        self.sent = []
        self.groups = defaultdict(set)

    def emit(self, event, payload, to=None):
        self.sent.append((event, payload, to))

    def join_group(self, connection_id, group):
        self.groups[group].add(connection_id)

    def leave_group(self, connection_id, group):
        self.groups[group].discard(connection_id)

    def events(self, name, to=None):
        return [p for e, p, t in self.sent if e == name and (to is None or t == to)]

    def names(self):
        return [e for e, _, _ in self.sent]

    def clear(self):
        self.sent.clear()


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(make_sio_client):
    return make_sio_client()


@pytest.fixture()
def transport():
    return RecordingTransport()


@pytest.fixture()
def clock():
    return ManualClock()


@pytest.fixture()
def game(flask_app, transport, clock):
    """Services wired to a recording transport and a manual clock.

    They replace the app's own services so HTTP views read the same store.
    """
    services = build_services(flask_app, transport=transport, clock=clock)
    flask_app.extensions['trivia'] = services
    return services


@pytest.fixture()
def trio(game):
    """Session 'abc' with master A and players B and C, in join order."""
    game.membership.join('abc', 'A', 'sid-a')
    game.membership.join('abc', 'B', 'sid-b')
    game.membership.join('abc', 'C', 'sid-c')
    return game.store.get('abc')
