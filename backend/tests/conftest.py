import os
import sys
import pytest

# Ensure the backend root (containing the `foxchase` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from config import Config
from foxchase import create_app, socketio
from foxchase.services.games import BoardCatalog, RoomRegistry, SessionCoordinator, Broadcaster


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    BOARDS_DIR = os.path.join(BACKEND_ROOT, 'boards')


def grid_template(rows):
    """Template from ascii rows: '#' is a wall, '.' plain, 'g' grass, 'f' flowers."""
    legend = {'#': 'wall', '.': 'plain', 'g': 'grass', 'f': 'flowers'}
    return {
        'width': len(rows[0]),
        'height': len(rows),
        'tiles': [[legend[ch] for ch in row] for row in rows],
    }


class FakeChannel(Broadcaster):
    """Records everything the coordinator sends."""

    def __init__(self):
        self.sent = []
        self.broadcasts = []
        self.groups = {}

    def send(self, connection, event, payload):
        self.sent.append((connection, event, payload))

    def broadcast(self, room_code, event, payload):
        self.broadcasts.append((room_code, event, payload))

    def subscribe(self, connection, room_code):
        self.groups.setdefault(room_code, set()).add(connection)

    def unsubscribe(self, connection, room_code):
        self.groups.get(room_code, set()).discard(connection)

    def events_for(self, connection, event=None):
        return [p for c, e, p in self.sent if c == connection and (event is None or e == event)]

    def room_events(self, room_code, event):
        return [p for r, e, p in self.broadcasts if r == room_code and e == event]


class FakeClock:
    def __init__(self, now=10_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture()
def catalog():
    return BoardCatalog({
        'Open': grid_template([
            '#####',
            '#.g.#',
            '#...#',
            '#.f.#',
            '#####',
        ]),
        'Pocket': grid_template([
            '###',
            '#.#',
            '###',
        ]),
    })


@pytest.fixture()
def channel():
    return FakeChannel()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def registry(catalog):
    return RoomRegistry(catalog)


@pytest.fixture()
def coordinator(catalog, registry, channel, clock):
    return SessionCoordinator(catalog, registry, channel, clock=clock)


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
    if test_client.is_connected('/ws'):
        test_client.disconnect(namespace='/ws')
