from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, TypeVar

from .errors import PoolExhausted
from .rules import Ruleset
from .tiles import MAX_NUMBER, MIN_NUMBER, TILE_COLORS, Tile

T = TypeVar("T")


@dataclass(frozen=True)
class DrawResult:
    drawn: Tuple[Tile, ...]
    remaining: Tuple[Tile, ...]


def iter_full_pool(copies: int, num_jokers: int) -> Iterable[Tile]:
    for color in TILE_COLORS:
        for copy_index in range(copies):
            for number in range(MIN_NUMBER, MAX_NUMBER + 1):
                yield Tile.numbered(color, number, copy_index)
    for index in range(num_jokers):
        yield Tile.joker(index)


def create_pool(ruleset: Ruleset) -> Tuple[Tile, ...]:
    return tuple(iter_full_pool(ruleset.copies_per_tiletype, ruleset.num_jokers))


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> Tuple[T, ...]:
    """Fisher-Yates shuffle into a new tuple; ``items`` is left untouched."""
    rng = rng or random.Random()
    shuffled: List[T] = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return tuple(shuffled)


def draw(pool: Sequence[Tile], count: int = 1) -> DrawResult:
    if count < 0:
        raise ValueError("count must be non-negative")
    if count > len(pool):
        raise PoolExhausted(f"No tiles available: requested {count}, pool has {len(pool)}")
    return DrawResult(drawn=tuple(pool[:count]), remaining=tuple(pool[count:]))
