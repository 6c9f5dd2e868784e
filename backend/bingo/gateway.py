"""Connection gateway: parses tagged JSON envelopes and drives rooms.

The gateway never touches the transport directly. It works on connection
handles that expose ``id``, ``send(envelope)``, ``is_open()`` and
``close()``, so the same dispatch runs behind Socket.IO or a test double.
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from bingo.services.games import GameError, Room, RoomRegistry

logger = logging.getLogger(__name__)


@dataclass
class Session:
    connection: Any
    game_id: Optional[str] = None
    player_id: Optional[str] = None

    @property
    def is_bound(self) -> bool:
        return self.game_id is not None


class Gateway:

    def __init__(self, registry: RoomRegistry, default_game_id: str = 'default',
                 default_name: str = 'Anonymous'):
        self.registry = registry
        self.default_game_id = default_game_id
        self.default_name = default_name
        self._sessions: Dict[str, Session] = {}
        self._handlers = {
            'mark': self._handle_mark,
            'request_bingo': self._handle_request_bingo,
            'call': self._handle_call,
        }

    # ---- connection lifecycle ----

    def connect(self, connection) -> Session:
        session = Session(connection=connection)
        self._sessions[connection.id] = session
        logger.debug(f"[connect] conn={connection.id}")
        return session

    def session_for(self, connection) -> Optional[Session]:
        return self._sessions.get(connection.id)

    def disconnect(self, connection) -> None:
        session = self._sessions.pop(connection.id, None)
        if not session or not session.is_bound:
            return
        self._leave(session)
        logger.info(f"[disconnect] conn={connection.id} game={session.game_id}")

    def _leave(self, session: Session) -> None:
        room = self.registry.get(session.game_id)
        if room is None:
            return
        with room.lock:
            room.remove_player(session.player_id)
            self.broadcast_state(room)

    # ---- inbound ----

    def handle(self, connection, raw) -> None:
        """Handle one inbound frame from ``connection``."""
        session = self._sessions.get(connection.id) or self.connect(connection)
        try:
            msg = _parse(raw)
            msg_type = msg.get('type')
            if msg_type == 'probe':
                self._handle_probe(session, msg)
            elif msg_type == 'join':
                self._handle_join(session, msg)
            else:
                room, player_id = self._resolve(session)
                handler = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
                if handler is None:
                    raise GameError('unknown_message_type')
                with room.lock:
                    handler(session, room, player_id, msg)
        except GameError as exc:
            logger.info(f"[rejected] conn={connection.id} error={exc.code}")
            self.send_error(connection, exc.code)

    def _resolve(self, session: Session):
        if not session.is_bound:
            raise GameError('not_joined')
        room = self.registry.get(session.game_id)
        if room is None:
            raise GameError('game_not_found')
        if session.player_id not in room.players:
            raise GameError('player_not_found')
        return room, session.player_id

    def _handle_probe(self, session: Session, msg: Dict[str, Any]) -> None:
        game_id = _game_id(msg, self.default_game_id)
        room = self.registry.get(game_id)
        if room is None:
            send(session.connection, {'type': 'game_exists', 'exists': False})
            return
        with room.lock:
            send(session.connection, {'type': 'game_exists', 'exists': True, 'state': room.snapshot()})

    def _handle_join(self, session: Session, msg: Dict[str, Any]) -> None:
        game_id = _game_id(msg, self.default_game_id)
        name = msg.get('name') or self.default_name
        if not isinstance(name, str):
            name = str(name)
        # The 'create' hint is advisory: joining always creates a missing room
        if session.is_bound and session.game_id != game_id:
            self._leave(session)
        room = self.registry.get_or_create(game_id)
        player_id = session.connection.id
        with room.lock:
            room.add_player(player_id, name, connection=session.connection, theme=msg.get('theme'))
            session.game_id = game_id
            session.player_id = player_id
            send(session.connection, {'type': 'joined', 'playerId': player_id, 'state': room.snapshot()})
            self.broadcast_state(room)

    def _handle_mark(self, session: Session, room: Room, player_id: str, msg: Dict[str, Any]) -> None:
        room.mark(player_id, msg.get('r'), msg.get('c'), msg.get('marked'))
        self.broadcast_state(room)

    def _handle_request_bingo(self, session: Session, room: Room, player_id: str, msg: Dict[str, Any]) -> None:
        winner = room.claim_bingo(player_id)
        self.broadcast(room, {'type': 'bingo', 'playerId': winner.id, 'name': winner.name})
        self.broadcast_state(room)

    def _handle_call(self, session: Session, room: Room, player_id: str, msg: Dict[str, Any]) -> None:
        if room.host_id != player_id:
            raise GameError('not_host')
        item = room.call_next()
        logger.info(f"[call] game={room.game_id} item={item!r} total={len(room.calls)}")
        self.broadcast_state(room)

    # ---- outbound ----

    def broadcast_state(self, room: Room) -> None:
        self.broadcast(room, {'type': 'state', 'state': room.snapshot()})

    def broadcast(self, room: Room, envelope: Dict[str, Any]) -> int:
        """Push ``envelope`` to every open connection in ``room``."""
        delivered = 0
        for player in list(room.players.values()):
            conn = player.connection
            if conn is None or not conn.is_open():
                continue
            try:
                conn.send(envelope)
            except (OSError, RuntimeError) as exc:
                logger.warning(f"[broadcast-skip] game={room.game_id} player={player.id} error={exc}")
                continue
            delivered += 1
        return delivered

    def send_error(self, connection, code: str) -> None:
        send(connection, {'type': 'error', 'message': code})


def send(connection, envelope: Dict[str, Any]) -> bool:
    if connection is None or not connection.is_open():
        return False
    connection.send(envelope)
    return True


def _parse(raw) -> Dict[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode('utf-8')
        except UnicodeDecodeError:
            raise GameError('invalid_json')
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, str):
        raise GameError('invalid_json')
    try:
        msg = json.loads(raw)
    except ValueError:
        raise GameError('invalid_json')
    if not isinstance(msg, dict):
        raise GameError('invalid_json')
    return msg


def _game_id(msg: Dict[str, Any], default: str) -> str:
    game_id = msg.get('gameId')
    if game_id is None or game_id == '':
        return default
    return str(game_id)
