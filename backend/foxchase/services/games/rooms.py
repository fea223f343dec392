import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from .board import Board
from .catalog import RANDOM_BOARD, BoardCatalog

MAX_PLAYERS = 8
ROOM_CODE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ23456789'


class RoomCodeExhausted(RuntimeError):
    """Raised when no unused room code was found within the attempt cap."""


class RoomState(str, Enum):
    LOBBY = 'lobby'
    IN_GAME = 'in_game'


@dataclass
class PlayerSlot:
    username: str
    connection: str

    def to_dict(self):
        return {'username': self.username}


@dataclass
class Room:
    code: str
    board: Board
    capacity: int = MAX_PLAYERS
    state: RoomState = RoomState.LOBBY
    owner_slot: Optional[int] = None
    owner_connection: Optional[str] = None
    players: List[Optional[PlayerSlot]] = field(default_factory=list)

    def __post_init__(self):
        if not self.players:
            self.players = [None] * self.capacity

    def occupied(self) -> Iterator[Tuple[int, PlayerSlot]]:
        for index, slot in enumerate(self.players):
            if slot is not None:
                yield index, slot

    def is_empty(self) -> bool:
        return all(slot is None for slot in self.players)

    def username_taken(self, username: str) -> bool:
        return any(slot.username == username for _, slot in self.occupied())

    def to_dict(self):
        return {
            'room_code': self.code,
            'state': self.state.value,
            'owner_slot': self.owner_slot,
            'board': self.board.name,
            'players': encode_players(self.players),
        }


def encode_players(players) -> list:
    """Fixed-length seat view: ``{'username': ...}`` per occupied slot, ``False`` per gap."""
    return [slot.to_dict() if slot is not None else False for slot in players]


def generate_room_code(length=4, rng=None) -> str:
    rng = rng or random
    return ''.join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(length))


class RoomRegistry:
    """All live rooms, keyed by their code."""

    def __init__(self, catalog: BoardCatalog, capacity=MAX_PLAYERS, code_length=4,
                 code_attempts=10, rng=None):
        self.catalog = catalog
        self.capacity = capacity
        self.code_length = code_length
        self.code_attempts = code_attempts
        self.rng = rng
        self.rooms: Dict[str, Room] = {}

    def _new_code(self) -> str:
        for _ in range(max(1, self.code_attempts)):
            code = generate_room_code(self.code_length, rng=self.rng)
            if code not in self.rooms:
                return code
        raise RoomCodeExhausted(f'no free room code after {self.code_attempts} attempts')

    def create_room(self, board_type: str = RANDOM_BOARD) -> str:
        board = Board.from_template(self.catalog, board_type, rng=self.rng)
        code = self._new_code()
        self.rooms[code] = Room(code=code, board=board, capacity=self.capacity)
        return code

    def get(self, code) -> Optional[Room]:
        if not isinstance(code, str):
            return None
        return self.rooms.get(code.upper())

    def add_player(self, code: str, player: PlayerSlot) -> int:
        """Seat ``player`` in the first empty slot; -1 when the room is full."""
        room = self.rooms[code]
        for index, slot in enumerate(room.players):
            if slot is None:
                room.players[index] = player
                if room.owner_slot is None:
                    room.owner_slot = index
                    room.owner_connection = player.connection
                return index
        return -1

    def remove_player(self, code: str, slot_index: int) -> None:
        # Leaves a gap; ownership stays with the seating connection
        room = self.rooms[code]
        room.players[slot_index] = None

    def discard(self, code: str) -> Optional[Room]:
        return self.rooms.pop(code, None)

    @staticmethod
    def encode_players(players) -> list:
        return encode_players(players)

    def __contains__(self, code):
        return code in self.rooms

    def __len__(self):
        return len(self.rooms)
