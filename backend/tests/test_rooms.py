import random

import pytest

from foxchase.services.games import RoomRegistry, RoomState, UnknownBoard
from foxchase.services.games.rooms import (
    MAX_PLAYERS, ROOM_CODE_ALPHABET, PlayerSlot, RoomCodeExhausted, generate_room_code,
)


def player(name, conn=None):
    return PlayerSlot(username=name, connection=conn or f'sid-{name}')


def test_generate_room_code_uses_alphabet():
    rng = random.Random(0)
    for _ in range(50):
        code = generate_room_code(4, rng=rng)
        assert len(code) == 4
        assert set(code) <= set(ROOM_CODE_ALPHABET)
    assert '0' not in ROOM_CODE_ALPHABET
    assert '1' not in ROOM_CODE_ALPHABET


def test_create_room_starts_in_lobby(registry):
    code = registry.create_room('Open')
    room = registry.get(code)
    assert code in registry
    assert room.state == RoomState.LOBBY
    assert room.owner_slot is None
    assert room.players == [None] * MAX_PLAYERS
    assert room.board.name == 'Open'
    assert registry.get(code.lower()) is room


def test_create_room_unknown_board(registry):
    with pytest.raises(UnknownBoard):
        registry.create_room('Missing')
    assert len(registry) == 0


def test_create_room_gives_up_after_attempt_cap(catalog):
    registry = RoomRegistry(catalog, code_attempts=3)
    first = registry.create_room('Open')
    registry.rng = _Repeat(first)
    with pytest.raises(RoomCodeExhausted):
        registry.create_room('Open')
    assert len(registry) == 1


class _Repeat:
    """rng stand-in whose choice() spells out a fixed code."""

    def __init__(self, code):
        self.code = code
        self.i = 0

    def choice(self, seq):
        ch = self.code[self.i % len(self.code)]
        self.i += 1
        return ch

    def shuffle(self, seq):
        pass


def test_create_room_retries_collision(catalog):
    registry = RoomRegistry(catalog, code_attempts=2)
    registry.rng = _Repeat('AAAABBBB')
    assert registry.create_room('Open') == 'AAAA'
    registry.rng = _Repeat('AAAABBBB')
    assert registry.create_room('Open') == 'BBBB'


def test_add_player_fills_first_gap_and_sets_owner(registry):
    code = registry.create_room('Open')
    room = registry.get(code)
    assert registry.add_player(code, player('Alice')) == 0
    assert registry.add_player(code, player('Bob')) == 1
    assert registry.add_player(code, player('Cara')) == 2
    assert room.owner_slot == 0

    registry.remove_player(code, 1)
    assert registry.add_player(code, player('Dan')) == 1


def test_room_full_returns_minus_one(registry):
    code = registry.create_room('Open')
    for i in range(MAX_PLAYERS):
        assert registry.add_player(code, player(f'p{i}')) == i
    assert registry.add_player(code, player('late')) == -1


def test_owner_not_reassigned_on_leave(registry):
    code = registry.create_room('Open')
    registry.add_player(code, player('Alice'))
    registry.add_player(code, player('Bob'))
    registry.remove_player(code, 0)
    room = registry.get(code)
    assert room.owner_slot == 0
    assert room.owner_connection == 'sid-Alice'
    assert room.players[0] is None

    assert registry.add_player(code, player('Mallory')) == 0
    assert room.owner_slot == 0
    assert room.owner_connection == 'sid-Alice'
    assert room.players[1].username == 'Bob'


def test_encode_players_keeps_gaps_under_churn(registry):
    code = registry.create_room('Open')
    room = registry.get(code)
    rng = random.Random(4)
    seated = {}
    for step in range(200):
        if seated and rng.random() < 0.4:
            slot = rng.choice(sorted(seated))
            registry.remove_player(code, slot)
            del seated[slot]
        else:
            name = f'user{step}'
            slot = registry.add_player(code, player(name))
            if slot >= 0:
                seated[slot] = name
        encoded = RoomRegistry.encode_players(room.players)
        assert len(encoded) == MAX_PLAYERS
        for i, entry in enumerate(encoded):
            if i in seated:
                assert entry == {'username': seated[i]}
            else:
                assert entry is False


def test_discard_and_to_dict(registry):
    code = registry.create_room('Pocket')
    registry.add_player(code, player('Alice'))
    data = registry.get(code).to_dict()
    assert data['room_code'] == code
    assert data['state'] == 'lobby'
    assert data['owner_slot'] == 0
    assert data['players'][0] == {'username': 'Alice'}
    assert registry.discard(code) is not None
    assert registry.get(code) is None
    assert registry.get(None) is None
