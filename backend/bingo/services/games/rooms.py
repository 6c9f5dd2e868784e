import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bingo.themes import get_theme
from .cards import CENTER, GRID_SIZE, generate_card, is_card_complete, new_marks, shuffled_pool

logger = logging.getLogger(__name__)

LOBBY = 'lobby'
ENDED = 'ended'


class GameError(Exception):
    """A rejected request, reported to the sender as an error envelope."""

    def __init__(self, code: str):
        super().__init__(code)
        self.code = code


@dataclass
class Player:
    id: str
    name: str
    card: List[List[Any]]
    marks: List[List[bool]] = field(default_factory=new_marks)
    # Not owned; used for routing broadcasts only
    connection: Any = None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'card': self.card,
            'marks': self.marks,
        }


class Room:
    """State machine for a single game id.

    Status moves from ``lobby`` to ``ended`` once a valid bingo is claimed
    and never returns. Callers hold ``lock`` across a mutation and the
    broadcast that follows it.
    """

    def __init__(self, game_id: str):
        self.game_id = game_id
        self.status = LOBBY
        self.host_id: Optional[str] = None
        self.theme_key: Optional[str] = None
        self.theme_items: List[str] = []
        self.item_pool: List[str] = []
        self.calls: List[str] = []
        self.players: 'OrderedDict[str, Player]' = OrderedDict()
        self.created_at = time.time()
        self.updated_at = self.created_at
        self.lock = threading.RLock()

    def _touch(self) -> None:
        self.updated_at = time.time()

    def get_player(self, player_id: str) -> Player:
        player = self.players.get(player_id)
        if player is None:
            raise GameError('player_not_found')
        return player

    def apply_theme(self, theme_key) -> bool:
        """Adopt a theme if none is set yet; later requests are ignored."""
        if self.theme_key or not theme_key:
            return False
        theme = get_theme(theme_key)
        if theme is None:
            logger.info(f"[theme-ignored] game={self.game_id} theme={theme_key!r} unknown")
            return False
        self.theme_key = theme.key
        self.theme_items = list(theme.items)
        self.item_pool = shuffled_pool(theme.items)
        logger.info(f"[theme] game={self.game_id} theme={theme.key}")
        return True

    def add_player(self, player_id: str, name: str, connection=None, theme=None) -> Player:
        self.apply_theme(theme)
        existing = self.players.get(player_id)
        if existing is not None:
            # Same membership: keep the card and marks
            existing.name = name
            existing.connection = connection
            self._touch()
            logger.info(f"[rejoin] game={self.game_id} player={player_id} name={name!r}")
            return existing
        player = Player(
            id=player_id,
            name=name,
            card=generate_card(self.theme_items),
            connection=connection,
        )
        self.players[player_id] = player
        if not self.host_id:
            self.host_id = player_id
        self._touch()
        logger.info(f"[join] game={self.game_id} player={player_id} name={name!r} host={self.host_id}")
        return player

    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.players.pop(player_id, None)
        if player is None:
            return None
        if self.host_id == player_id:
            self.host_id = next(iter(self.players), None)
            logger.info(f"[host] game={self.game_id} host {player_id} left -> {self.host_id}")
        self._touch()
        return player

    def mark(self, player_id: str, row, col, marked) -> None:
        player = self.get_player(player_id)
        if not _is_coordinate(row) or not _is_coordinate(col):
            raise GameError('invalid_mark')
        if (row, col) != CENTER:
            player.marks[row][col] = bool(marked)
        self._touch()

    def claim_bingo(self, player_id: str) -> Player:
        player = self.get_player(player_id)
        if self.status == ENDED or not is_card_complete(player.marks):
            raise GameError('invalid_bingo')
        self.status = ENDED
        self._touch()
        logger.info(f"[bingo] game={self.game_id} winner={player_id} name={player.name!r}")
        return player

    def call_next(self) -> str:
        if not self.theme_key:
            raise GameError('no_theme')
        if not self.item_pool:
            raise GameError('pool_exhausted')
        item = self.item_pool.pop()
        self.calls.append(item)
        self._touch()
        return item

    def snapshot(self) -> Dict[str, Any]:
        theme = get_theme(self.theme_key)
        return {
            'gameId': self.game_id,
            'status': self.status,
            'hostId': self.host_id,
            'themeKey': self.theme_key,
            'themeDisplayName': theme.name if theme else None,
            'players': [p.to_dict() for p in self.players.values()],
            'numbersCalled': list(self.calls),
        }


def _is_coordinate(value) -> bool:
    # bool is an int subclass; reject it explicitly
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < GRID_SIZE


class RoomRegistry:
    """Process-wide mapping of game id to Room.

    Rooms are created lazily and never destroyed.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def get_or_create(self, game_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(game_id)
            if room is None:
                room = Room(game_id)
                self._rooms[game_id] = room
                logger.info(f"[room-created] game={game_id}")
            return room

    def get(self, game_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(game_id)

    def exists(self, game_id: str) -> bool:
        with self._lock:
            return game_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
