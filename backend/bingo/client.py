"""
Session client for the bingo server.

The server keeps no session across reconnects: a dropped transport comes
back as a brand-new connection, so the client re-joins its last room
(and receives a new player id) whenever the socket reconnects.
"""

import json
import logging
import threading
import time
from typing import Any, Dict, Optional

import click
import socketio

logger = logging.getLogger(__name__)

NAMESPACE = '/ws'
PROBE_TIMEOUT_SEC = 1.2
RECONNECT_DELAY_SEC = 1.5


class BingoClient:

    def __init__(self, url: str, namespace: str = NAMESPACE, sio=None):
        self.url = url
        self.namespace = namespace
        self.sio = sio or socketio.Client(
            reconnection=True,
            reconnection_attempts=0,  # retry forever
            reconnection_delay=RECONNECT_DELAY_SEC,
            reconnection_delay_max=RECONNECT_DELAY_SEC,
            randomization_factor=0,
        )
        self.player_id: Optional[str] = None
        self.state: Optional[Dict[str, Any]] = None
        self.winner: Optional[Dict[str, Any]] = None
        self.last_error: Optional[str] = None
        self._join_args: Optional[Dict[str, Any]] = None
        self._probe_event = threading.Event()
        self._probe_result: Optional[Dict[str, Any]] = None
        self._connected_once = False

        self.sio.on('connect', self._on_connect, namespace=namespace)
        self.sio.on('disconnect', self._on_disconnect, namespace=namespace)
        self.sio.on('message', self._on_message, namespace=namespace)

    def connect(self) -> None:
        self.sio.connect(self.url, namespaces=[self.namespace])

    def close(self) -> None:
        self.sio.disconnect()

    def _send(self, envelope: Dict[str, Any]) -> None:
        self.sio.send(json.dumps(envelope), namespace=self.namespace)

    # ---- requests ----

    def probe(self, game_id: str, timeout: float = PROBE_TIMEOUT_SEC) -> Dict[str, Any]:
        """Ask whether ``game_id`` exists; silence counts as "no"."""
        self._probe_event.clear()
        self._probe_result = None
        self._send({'type': 'probe', 'gameId': game_id})
        if not self._probe_event.wait(timeout):
            logger.info(f"[probe-timeout] game={game_id} after {timeout}s")
            return {'type': 'game_exists', 'exists': False}
        return self._probe_result or {'type': 'game_exists', 'exists': False}

    def join(self, game_id: str, name: str, theme: Optional[str] = None, create: bool = False) -> None:
        self._join_args = {'gameId': game_id, 'name': name, 'theme': theme, 'create': create}
        self._send({'type': 'join', **self._join_args})

    def probe_and_join(self, game_id: str, name: str, theme: Optional[str] = None) -> bool:
        """Join ``game_id``, flagging creation when the probe found nothing.

        Returns whether the room already existed.
        """
        exists = bool(self.probe(game_id).get('exists'))
        self.join(game_id, name, theme=theme, create=not exists)
        return exists

    def mark(self, row: int, col: int, marked: bool = True) -> None:
        self._send({'type': 'mark', 'r': row, 'c': col, 'marked': marked})

    def request_bingo(self) -> None:
        self._send({'type': 'request_bingo'})

    # ---- inbound ----

    def _on_connect(self, *args):
        if self._connected_once and self._join_args:
            logger.info(f"[rejoin] game={self._join_args['gameId']}")
            self._send({'type': 'join', **self._join_args})
        self._connected_once = True

    def _on_disconnect(self, *args):
        logger.info(f"[disconnected] retrying every {RECONNECT_DELAY_SEC}s")

    def _on_message(self, data):
        try:
            msg = json.loads(data) if isinstance(data, (str, bytes)) else data
        except ValueError:
            logger.warning(f"[client] dropped unparseable frame {data!r}")
            return
        if not isinstance(msg, dict):
            return
        msg_type = msg.get('type')
        if msg_type == 'game_exists':
            self._probe_result = msg
            self._probe_event.set()
        elif msg_type == 'joined':
            self.player_id = msg.get('playerId')
            self.state = msg.get('state')
        elif msg_type == 'state':
            self.state = msg.get('state')
        elif msg_type == 'bingo':
            self.winner = {'playerId': msg.get('playerId'), 'name': msg.get('name')}
        elif msg_type == 'error':
            self.last_error = msg.get('message')
            logger.info(f"[client-error] {self.last_error}")


@click.command()
@click.argument('url', default='http://localhost:8080')
@click.option('--game', 'game_id', default='default', help='Game id to join.')
@click.option('--name', default='Anonymous', help='Display name.')
@click.option('--theme', default=None, help='Theme id for a new room.')
def main(url, game_id, name, theme):
    """Joins a bingo room and prints room updates until interrupted."""
    logging.basicConfig(level=logging.INFO)
    client = BingoClient(url)
    client.connect()
    existed = client.probe_and_join(game_id, name, theme=theme)
    click.echo(f"{'joined' if existed else 'created'} {game_id} as {name}")
    last = None
    try:
        while True:
            time.sleep(0.5)
            if client.state and client.state != last:
                last = client.state
                click.echo(f"status={last.get('status')} players={len(last.get('players') or [])}")
            if client.winner:
                click.echo(f"BINGO! {client.winner['name']}")
                client.winner = None
    except KeyboardInterrupt:
        pass
    finally:
        client.close()


if __name__ == '__main__':
    main()
