import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .board import NoEmptyTile, parse_direction
from .catalog import RANDOM_BOARD, BoardCatalog, UnknownBoard
from .rooms import PlayerSlot, RoomCodeExhausted, RoomRegistry, RoomState, encode_players
from .sanitize import sanitize as default_sanitize

log = logging.getLogger(__name__)


class Broadcaster:
    """Outbound message fabric the coordinator talks to.

    ``connection`` is an opaque per-connection handle (the Socket.IO sid in
    production). Broadcasts are fire-and-forget.
    """

    def send(self, connection, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def broadcast(self, room_code: str, event: str, payload: Dict[str, Any]) -> None:
        raise NotImplementedError

    def subscribe(self, connection, room_code: str) -> None:
        raise NotImplementedError

    def unsubscribe(self, connection, room_code: str) -> None:
        raise NotImplementedError


@dataclass
class ConnectionState:
    room_code: Optional[str] = None
    slot: Optional[int] = None
    last_move_at: Optional[float] = None
    last_direction: Optional[Tuple[int, int]] = None
    last_chat_at: Optional[float] = None

    @property
    def joined(self) -> bool:
        return self.room_code is not None


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class SessionCoordinator:
    """Maps player intents from one connection onto rooms and boards.

    Every handler runs to completion before the next message is processed,
    so no locking is done here.
    """

    def __init__(self, catalog: BoardCatalog, registry: RoomRegistry, channel: Broadcaster,
                 sanitize=default_sanitize, clock=_monotonic_ms, move_interval_ms=500,
                 chat_interval_ms=500, username_max_length=20, reap_empty_rooms=True,
                 rng=None, logger=None):
        self.catalog = catalog
        self.registry = registry
        self.channel = channel
        self.sanitize = sanitize
        self.clock = clock
        self.move_interval_ms = move_interval_ms
        self.chat_interval_ms = chat_interval_ms
        self.username_max_length = username_max_length
        self.reap_empty_rooms = reap_empty_rooms
        self.rng = rng
        self.log = logger or log
        self.connections: Dict[Any, ConnectionState] = {}

    def state_for(self, connection) -> ConnectionState:
        state = self.connections.get(connection)
        if state is None:
            state = self.connections[connection] = ConnectionState()
        return state

    def _reject(self, connection, reason: str) -> None:
        self.log.info(f"[login-error] conn={connection} reason={reason}")
        self.channel.send(connection, 'login_error', {'message': reason})

    def _clean_username(self, username) -> Optional[str]:
        username = self.sanitize(username)
        if not 1 <= len(username) <= self.username_max_length:
            return None
        return username

    def _broadcast_players(self, room) -> None:
        self.channel.broadcast(room.code, 'update_players', {'players': encode_players(room.players)})

    def _seat(self, connection, room, username: str) -> int:
        slot = self.registry.add_player(room.code, PlayerSlot(username=username, connection=connection))
        if slot < 0:
            return slot
        state = self.state_for(connection)
        state.room_code = room.code
        state.slot = slot
        self.channel.subscribe(connection, room.code)
        self.channel.send(connection, 'joined_lobby', {'room_code': room.code, 'slot': slot})
        self.channel.send(connection, 'create_board', {'board': room.board.to_dict()})
        return slot

    # ---- intents ----

    def connect(self, connection) -> None:
        self.state_for(connection)
        self.channel.send(connection, 'boards_list', {'boards': self.catalog.names()})

    def create(self, connection, username, board_type=RANDOM_BOARD) -> Optional[str]:
        if self.state_for(connection).joined:
            self._reject(connection, 'Already in a room')
            return None
        username = self._clean_username(username)
        if username is None:
            self._reject(connection, 'Username is invalid')
            return None
        if not isinstance(board_type, str) or not board_type:
            board_type = RANDOM_BOARD

        try:
            code = self.registry.create_room(board_type)
        except UnknownBoard:
            self._reject(connection, 'Board is invalid')
            return None
        except RoomCodeExhausted as exc:
            self.log.error(f"[room-create] failed: {exc}")
            self._reject(connection, 'Unable to create room')
            return None

        room = self.registry.get(code)
        self._seat(connection, room, username)
        self.log.info(f"[room-create] room={code} board={room.board.name} owner={username}")
        self.channel.send(connection, 'lobby_owner', {})
        self._broadcast_players(room)
        return code

    def join(self, connection, room_code, username) -> Optional[int]:
        if self.state_for(connection).joined:
            self._reject(connection, 'Already in a room')
            return None
        room = self.registry.get(room_code)
        if room is None:
            self._reject(connection, 'Room is invalid')
            return None
        if room.state != RoomState.LOBBY:
            self._reject(connection, 'Room is already in game')
            return None
        username = self._clean_username(username)
        if username is None:
            self._reject(connection, 'Username is invalid')
            return None
        if room.username_taken(username):
            self._reject(connection, 'Username is already taken')
            return None

        slot = self._seat(connection, room, username)
        if slot < 0:
            self._reject(connection, 'Room is full')
            return None
        self.log.info(f"[join] room={room.code} slot={slot} user={username}")
        self._broadcast_players(room)
        return slot

    def start(self, connection) -> bool:
        state = self.state_for(connection)
        if not state.joined:
            return False
        room = self.registry.get(state.room_code)
        if room is None or room.owner_connection != connection or room.state != RoomState.LOBBY:
            return False

        room.state = RoomState.IN_GAME
        self.channel.broadcast(room.code, 'start_game', {})
        for slot, player in room.occupied():
            try:
                tile = room.board.get_random_empty_tile(rng=self.rng)
            except NoEmptyTile:
                self.log.warning(f"[spawn] room={room.code} no empty tile for slot={slot} user={player.username}")
                continue
            room.board.update_player(slot, tile.x, tile.y)
        self.log.info(f"[start] room={room.code} players={len(room.board.players)}")
        self.channel.broadcast(room.code, 'update_player_positions', {'positions': room.board.positions()})
        return True

    def move(self, connection, direction) -> Optional[dict]:
        state = self.state_for(connection)
        if not state.joined:
            return None
        room = self.registry.get(state.room_code)
        if room is None or room.state != RoomState.IN_GAME:
            return None
        direction = parse_direction(direction)
        if direction is None:
            return None

        now = self.clock()
        if state.last_move_at is not None and now - state.last_move_at < self.move_interval_ms:
            return None
        if state.last_direction is not None and direction == room.board.reverse_direction(state.last_direction):
            return None

        tile = room.board.attempt_move(state.slot, direction)
        if tile is None:
            return None
        state.last_move_at = now
        state.last_direction = direction
        self.channel.broadcast(room.code, 'animate_fox', {
            'slot': state.slot,
            'x': tile['x'],
            'y': tile['y'],
            'tile_type': tile['type'],
        })
        return tile

    def chat(self, connection, text) -> Optional[str]:
        state = self.state_for(connection)
        if not state.joined:
            return None
        room = self.registry.get(state.room_code)
        if room is None:
            return None
        player = room.players[state.slot]
        if player is None:
            return None

        text = self.sanitize(text)
        if not text:
            return None
        now = self.clock()
        if state.last_chat_at is not None and now - state.last_chat_at < self.chat_interval_ms:
            return None
        state.last_chat_at = now
        self.channel.broadcast(room.code, 'chat_message', {'username': player.username, 'text': text})
        return text

    def disconnect(self, connection) -> None:
        state = self.connections.pop(connection, None)
        if state is None or not state.joined:
            return
        room = self.registry.get(state.room_code)
        if room is None:
            return
        self.registry.remove_player(room.code, state.slot)
        room.board.remove_player(state.slot)
        self.channel.unsubscribe(connection, room.code)
        self.log.info(f"[disconnect] room={room.code} slot={state.slot}")
        if self.reap_empty_rooms and room.is_empty():
            self.registry.discard(room.code)
            self.log.info(f"[room-reap] room={room.code}")
            return
        self._broadcast_players(room)
