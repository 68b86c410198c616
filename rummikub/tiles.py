from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

MIN_NUMBER = 1
MAX_NUMBER = 13


class Color(str, Enum):
    RED = "red"
    BLUE = "blue"
    ORANGE = "orange"
    BLACK = "black"
    JOKER = "joker"


TILE_COLORS = (Color.RED, Color.BLUE, Color.ORANGE, Color.BLACK)
_COLOR_ORDER = {color: idx for idx, color in enumerate(TILE_COLORS)}


@dataclass(frozen=True)
class Tile:
    """A single tile. Two tiles are the same tile only if their ids match."""

    tile_id: str
    color: Color = field(compare=False)
    number: Optional[int] = field(default=None, compare=False)

    def is_joker(self) -> bool:
        return self.color == Color.JOKER

    @classmethod
    def numbered(cls, color: Color, number: int, copy_index: int = 0) -> "Tile":
        if color == Color.JOKER:
            raise ValueError("numbered tile cannot use the joker color")
        if not MIN_NUMBER <= number <= MAX_NUMBER:
            raise ValueError(f"tile number must be in {MIN_NUMBER}..{MAX_NUMBER}")
        return cls(f"{color.value}-{number}-{copy_index}", color, number)

    @classmethod
    def joker(cls, index: int = 0) -> "Tile":
        return cls(f"joker-{index}", Color.JOKER, None)

    def __str__(self) -> str:
        if self.is_joker():
            return "J"
        return f"{self.color.value}-{self.number}"


def face_value(tile: Tile) -> int:
    if tile.is_joker():
        return 0
    return tile.number


def hand_value(tiles: Iterable[Tile]) -> int:
    return sum(face_value(t) for t in tiles)


def _joker_last(tile: Tile) -> int:
    return 1 if tile.is_joker() else 0


def sort_tiles(tiles: Iterable[Tile]) -> List[Tile]:
    """Color first, then number. Jokers go last."""
    return sorted(
        tiles,
        key=lambda t: (
            _joker_last(t),
            _COLOR_ORDER.get(t.color, len(_COLOR_ORDER)),
            t.number or 0,
            t.tile_id,
        ),
    )


def sort_tiles_by_number(tiles: Iterable[Tile]) -> List[Tile]:
    return sorted(
        tiles,
        key=lambda t: (
            _joker_last(t),
            t.number or 0,
            _COLOR_ORDER.get(t.color, len(_COLOR_ORDER)),
            t.tile_id,
        ),
    )
