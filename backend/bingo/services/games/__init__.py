"""Game domain services: card generation and the room state machine.

This package contains pure domain logic that is driven by the connection
gateway, keeping transport concerns separated from core game mechanics.
"""

from .cards import FREE_CELL, generate_card, is_card_complete, new_marks
from .rooms import GameError, Player, Room, RoomRegistry

__all__ = [
    'FREE_CELL',
    'GameError',
    'Player',
    'Room',
    'RoomRegistry',
    'generate_card',
    'is_card_complete',
    'new_marks',
]
