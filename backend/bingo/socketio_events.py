import json
import random
import string
from typing import Any, Dict

from flask import request

from bingo import socketio
from bingo.gateway import Gateway

NAMESPACE = '/ws'


def generate_connection_id(length: int = 7) -> str:
    """Generate a short opaque id for a new connection."""
    return ''.join(random.choices(string.ascii_lowercase + string.digits, k=length))


class SocketIOConnection:
    """Connection handle over a single Socket.IO client session."""

    def __init__(self, sid: str, namespace: str = NAMESPACE):
        self.id = generate_connection_id()
        self.sid = sid
        self.namespace = namespace
        self._open = True

    def send(self, envelope: Dict[str, Any]) -> None:
        socketio.send(json.dumps(envelope), to=self.sid, namespace=self.namespace)

    def is_open(self) -> bool:
        return self._open

    def mark_closed(self) -> None:
        self._open = False

    def close(self) -> None:
        if not self._open:
            return
        self._open = False
        socketio.server.disconnect(self.sid, namespace=self.namespace)


_sid_to_conn: Dict[str, SocketIOConnection] = {}


def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _conn_key(namespace: str) -> str:
    return f"{namespace}:{_get_sid()}"


def register_socketio_handlers(gateway: Gateway, testing: bool = False) -> None:
    """Register Socket.IO event handlers bound to ``gateway``.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """

    def make_handlers(namespace: str):

        def handle_connect(auth=None):
            conn = SocketIOConnection(_get_sid(), namespace)
            _sid_to_conn[_conn_key(namespace)] = conn
            gateway.connect(conn)

        def handle_disconnect(*args):
            conn = _sid_to_conn.pop(_conn_key(namespace), None)
            if conn is None:
                return
            conn.mark_closed()
            gateway.disconnect(conn)

        def handle_message(data):
            conn = _sid_to_conn.get(_conn_key(namespace))
            if conn is None:
                # Connection already torn down
                return
            gateway.handle(conn, data)

        return handle_connect, handle_disconnect, handle_message

    namespaces = [NAMESPACE, '/'] if testing else [NAMESPACE]
    for namespace in namespaces:
        handle_connect, handle_disconnect, handle_message = make_handlers(namespace)
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('message', handle_message, namespace=namespace)
        socketio.on_event('json', handle_message, namespace=namespace)
