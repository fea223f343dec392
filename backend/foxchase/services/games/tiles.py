import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional


class TemplateError(ValueError):
    """Raised when a board template cannot be turned into a grid."""


class TileKind(str, Enum):
    PLAIN = 'plain'
    WALL = 'wall'
    GRASS = 'grass'
    FLOWERS = 'flowers'
    MUSHROOMS = 'mushrooms'
    BERRIES = 'berries'
    BURROW = 'burrow'

    @property
    def passable(self) -> bool:
        return self is not TileKind.WALL


@dataclass
class Tile:
    type: TileKind
    passable: bool
    x: int
    y: int

    def to_dict(self):
        return {
            'x': self.x,
            'y': self.y,
            'type': self.type.value,
            'passable': self.passable,
        }


class TileGrid:
    """Fixed-shape grid of tiles.

    Dimensions and wall positions never change after construction; only the
    kinds carried by passable tiles can be rearranged.
    """

    def __init__(self, width: int, height: int, rows: List[List[Tile]]):
        self.width = width
        self.height = height
        self.rows = rows

    @classmethod
    def from_template(cls, shape) -> 'TileGrid':
        """Build a grid from a raw template mapping.

        The template is ``{"width": W, "height": H, "tiles": [[kind, ...], ...]}``
        with ``H`` rows of ``W`` kind names.
        """
        if not isinstance(shape, dict):
            raise TemplateError('template must be an object')
        try:
            width = int(shape['width'])
            height = int(shape['height'])
            raw_rows = shape['tiles']
        except (KeyError, TypeError, ValueError) as exc:
            raise TemplateError(f'template is missing dimensions or tiles: {exc}') from exc

        if width < 1 or height < 1:
            raise TemplateError(f'invalid dimensions {width}x{height}')
        if not isinstance(raw_rows, list) or len(raw_rows) != height:
            raise TemplateError(f'expected {height} rows of tiles')

        rows = []
        for y, raw_row in enumerate(raw_rows):
            if not isinstance(raw_row, list) or len(raw_row) != width:
                raise TemplateError(f'row {y} does not have {width} tiles')
            row = []
            for x, raw_kind in enumerate(raw_row):
                try:
                    kind = TileKind(raw_kind)
                except ValueError as exc:
                    raise TemplateError(f'unknown tile kind {raw_kind!r} at ({x}, {y})') from exc
                row.append(Tile(type=kind, passable=kind.passable, x=x, y=y))
            rows.append(row)
        return cls(width, height, rows)

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, x: int, y: int) -> Optional[Tile]:
        if not self.in_bounds(x, y):
            return None
        return self.rows[y][x]

    def __iter__(self) -> Iterator[Tile]:
        for row in self.rows:
            yield from row

    def passable_tiles(self) -> List[Tile]:
        return [tile for tile in self if tile.passable]

    def shuffle_tile_types(self, rng=None) -> None:
        """Randomly permute the kinds of passable tiles in place.

        Walls keep their kind and position, so the walkable area is the same
        before and after; only which passable cell carries which kind changes.
        """
        rng = rng or random
        tiles = self.passable_tiles()
        kinds = [tile.type for tile in tiles]
        rng.shuffle(kinds)
        for tile, kind in zip(tiles, kinds):
            tile.type = kind

    def to_dict(self):
        return {
            'width': self.width,
            'height': self.height,
            'tiles': [[tile.to_dict() for tile in row] for row in self.rows],
        }
