import json
import os
import sys
import pytest

# Ensure the backend root (containing the `bingo` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from bingo import create_app, socketio
from bingo.gateway import Gateway
from bingo.services.games import RoomRegistry


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    LOG_LEVEL = 'DEBUG'
    ALLOWED_ORIGINS = ['http://localhost:5173']
    DISCORD_CLIENT_ID = 'client-123'
    DISCORD_CLIENT_SECRET = 'shh'
    DISCORD_API_BASE = 'https://discord.test/api'
    TOKEN_EXCHANGE_TIMEOUT_SEC = 1
    PUBLIC_DIR = None
    DEFAULT_GAME_ID = 'default'
    DEFAULT_PLAYER_NAME = 'Anonymous'


class FakeConnection:
    """In-memory connection handle recording every envelope sent to it."""

    _counter = 0

    def __init__(self, conn_id=None):
        FakeConnection._counter += 1
        self.id = conn_id or f"conn{FakeConnection._counter}"
        self.sent = []
        self.open = True

    def send(self, envelope):
        self.sent.append(envelope)

    def is_open(self):
        return self.open

    def close(self):
        self.open = False

    def of_type(self, msg_type):
        return [m for m in self.sent if m.get('type') == msg_type]

    def last(self, msg_type=None):
        msgs = self.of_type(msg_type) if msg_type else self.sent
        return msgs[-1] if msgs else None

    def clear(self):
        self.sent = []


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def gateway(registry):
    return Gateway(registry)


@pytest.fixture()
def make_conn():
    def _make(conn_id=None):
        return FakeConnection(conn_id)
    return _make


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        yield application


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_factory(flask_app):
    created = []

    def _make():
        test_client = socketio.test_client(
            flask_app,
            flask_test_client=flask_app.test_client(),
            namespace='/ws'
        )
        created.append(test_client)
        return test_client

    yield _make
    for test_client in created:
        try:
            if test_client.is_connected('/ws'):
                test_client.disconnect(namespace='/ws')
        except RuntimeError:
            pass


@pytest.fixture()
def sio_client(sio_factory):
    return sio_factory()


def send_envelope(sio_client, envelope):
    sio_client.send(json.dumps(envelope), namespace='/ws')


def received_envelopes(sio_client):
    """Decode every pending server message for ``sio_client``."""
    out = []
    for pkt in sio_client.get_received('/ws'):
        if pkt['name'] != 'message':
            continue
        args = pkt['args']
        if isinstance(args, list):
            args = args[0]
        out.append(json.loads(args))
    return out
