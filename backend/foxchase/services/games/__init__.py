"""Game domain services: boards, rooms and per-connection sessions.

This package contains the pure game logic that is driven by the socket
handlers, keeping transport concerns separated from movement rules and
room bookkeeping.
"""

from .board import Board, NoEmptyTile
from .catalog import RANDOM_BOARD, BoardCatalog, UnknownBoard
from .rooms import RoomRegistry, RoomState
from .session import Broadcaster, SessionCoordinator

__all__ = [
    'Board',
    'BoardCatalog',
    'Broadcaster',
    'NoEmptyTile',
    'RANDOM_BOARD',
    'RoomRegistry',
    'RoomState',
    'SessionCoordinator',
    'UnknownBoard',
]
