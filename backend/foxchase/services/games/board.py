import random
from typing import Dict, Optional, Tuple

from .catalog import RANDOM_BOARD, BoardCatalog
from .tiles import Tile, TileGrid

Direction = Tuple[int, int]

LEFT: Direction = (-1, 0)
RIGHT: Direction = (1, 0)
UP: Direction = (0, -1)
DOWN: Direction = (0, 1)
DIRECTIONS = (LEFT, RIGHT, UP, DOWN)


class NoEmptyTile(RuntimeError):
    """Raised when every passable tile is already occupied."""


def parse_direction(raw) -> Optional[Direction]:
    """Coerce a client-supplied ``[dx, dy]`` into one of the four unit vectors."""
    if isinstance(raw, dict):
        raw = (raw.get('dx'), raw.get('dy'))
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        return None
    dx, dy = raw
    if isinstance(dx, bool) or isinstance(dy, bool):
        return None
    if not isinstance(dx, int) or not isinstance(dy, int):
        return None
    direction = (dx, dy)
    return direction if direction in DIRECTIONS else None


class Board:
    """A tile grid plus the live position of every placed player."""

    def __init__(self, name: str, grid: TileGrid):
        self.name = name
        self.grid = grid
        self.players: Dict[int, Tuple[int, int]] = {}

    @classmethod
    def from_template(cls, catalog: BoardCatalog, name: str = RANDOM_BOARD, rng=None) -> 'Board':
        template_name = catalog.resolve(name, rng=rng)
        grid = catalog.build_grid(template_name)
        grid.shuffle_tile_types(rng=rng)
        return cls(template_name, grid)

    def occupant_at(self, x: int, y: int) -> Optional[int]:
        for player_id, position in self.players.items():
            if position == (x, y):
                return player_id
        return None

    def get_random_empty_tile(self, rng=None) -> Tile:
        occupied = set(self.players.values())
        candidates = [t for t in self.grid.passable_tiles() if (t.x, t.y) not in occupied]
        if not candidates:
            raise NoEmptyTile(self.name)
        return (rng or random).choice(candidates)

    def update_player(self, player_id: int, x: int, y: int) -> None:
        # No legality checks; spawning and forced moves only
        self.players[player_id] = (x, y)

    def remove_player(self, player_id: int) -> None:
        self.players.pop(player_id, None)

    @staticmethod
    def reverse_direction(direction: Direction) -> Direction:
        dx, dy = direction
        return (-dx, -dy)

    def attempt_move(self, player_id: int, direction: Direction) -> Optional[dict]:
        """Move a placed player one step if the target tile allows it.

        Returns the ``{x, y, type}`` of the new tile, or None when the player is
        not on the board, the direction is not a unit step, or the target is out
        of bounds, a wall, or held by another player.
        """
        position = self.players.get(player_id)
        if position is None or tuple(direction) not in DIRECTIONS:
            return None
        x, y = position[0] + direction[0], position[1] + direction[1]
        tile = self.grid.tile_at(x, y)
        if tile is None or not tile.passable:
            return None
        occupant = self.occupant_at(x, y)
        if occupant is not None and occupant != player_id:
            return None
        self.players[player_id] = (x, y)
        return {'x': tile.x, 'y': tile.y, 'type': tile.type.value}

    def positions(self) -> Dict[int, dict]:
        return {pid: {'x': x, 'y': y} for pid, (x, y) in self.players.items()}

    def to_dict(self):
        data = self.grid.to_dict()
        data['name'] = self.name
        return data
