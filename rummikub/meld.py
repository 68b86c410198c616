from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .tiles import MAX_NUMBER, MIN_NUMBER, Tile

MIN_SET_SIZE = 3
MAX_GROUP_SIZE = 4


class MeldKind(str, Enum):
    RUN = "RUN"
    GROUP = "GROUP"


def _split_jokers(tiles: Sequence[Tile]) -> Tuple[List[Tile], List[Tile]]:
    jokers = [t for t in tiles if t.is_joker()]
    others = [t for t in tiles if not t.is_joker()]
    return jokers, others


def _run_start(tiles: Sequence[Tile]) -> int:
    # Spare jokers extend the run upward until 13, then downward.
    lowest = min(t.number for t in tiles if not t.is_joker())
    return min(lowest, MAX_NUMBER - len(tiles) + 1)


def check_run(tiles: Sequence[Tile], allow_joker_only: bool = False) -> Tuple[bool, str]:
    if len(tiles) < MIN_SET_SIZE:
        return False, "run too short"
    if len(tiles) > MAX_NUMBER:
        return False, "run too long"

    jokers, others = _split_jokers(tiles)
    if not others:
        if allow_joker_only:
            return True, ""
        return False, "joker-only run has no anchor number"

    if len({t.color for t in others}) != 1:
        return False, "run must have same color"
    numbers = sorted(t.number for t in others)
    if len(set(numbers)) != len(numbers):
        return False, "run must not duplicate number"
    low, high = numbers[0], numbers[-1]
    if low < MIN_NUMBER or high > MAX_NUMBER:
        return False, "run number out of range"
    span = high - low + 1
    if span > len(tiles):
        return False, "run must be consecutive"
    if span - len(others) > len(jokers):
        return False, "not enough jokers to fill the run"
    return True, ""


def check_group(tiles: Sequence[Tile], allow_joker_only: bool = False) -> Tuple[bool, str]:
    if not MIN_SET_SIZE <= len(tiles) <= MAX_GROUP_SIZE:
        return False, "group must have length 3 or 4"

    _, others = _split_jokers(tiles)
    if not others:
        if allow_joker_only:
            return True, ""
        return False, "joker-only group has no anchor number"

    if len({t.number for t in others}) != 1:
        return False, "group must share number"
    colors = [t.color for t in others]
    if len(set(colors)) != len(colors):
        return False, "group colors must be distinct"
    return True, ""


def is_valid_run(tiles: Sequence[Tile], allow_joker_only: bool = False) -> bool:
    return check_run(tiles, allow_joker_only)[0]


def is_valid_group(tiles: Sequence[Tile], allow_joker_only: bool = False) -> bool:
    return check_group(tiles, allow_joker_only)[0]


def is_valid_set(tiles: Sequence[Tile], allow_joker_only: bool = False) -> bool:
    return is_valid_run(tiles, allow_joker_only) or is_valid_group(tiles, allow_joker_only)


def check_set(tiles: Sequence[Tile], allow_joker_only: bool = False) -> Tuple[bool, str]:
    ok, run_reason = check_run(tiles, allow_joker_only)
    if ok:
        return True, ""
    ok, group_reason = check_group(tiles, allow_joker_only)
    if ok:
        return True, ""
    return False, f"{run_reason}; {group_reason}"


def classify(tiles: Sequence[Tile], allow_joker_only: bool = False) -> Optional[MeldKind]:
    """Runs win over groups when a set qualifies as both (e.g. ``5, J, J``)."""
    if is_valid_run(tiles, allow_joker_only):
        return MeldKind.RUN
    if is_valid_group(tiles, allow_joker_only):
        return MeldKind.GROUP
    return None


def tile_values(tiles: Sequence[Tile], allow_joker_only: bool = False) -> Dict[str, int]:
    """Implied value of every tile in the set, keyed by tile id.

    In a run each joker takes one of the missing numbers, lowest first, in the
    order the jokers appear. In a group every tile counts the group's number.
    Invalid and joker-only sets are worth nothing.
    """
    values = {t.tile_id: 0 for t in tiles}
    kind = classify(tiles, allow_joker_only)
    jokers, others = _split_jokers(tiles)
    if kind is None or not others:
        return values

    if kind == MeldKind.RUN:
        start = _run_start(tiles)
        taken = {t.number for t in others}
        missing = [n for n in range(start, start + len(tiles)) if n not in taken]
        for tile in others:
            values[tile.tile_id] = tile.number
        for joker, number in zip(jokers, missing):
            values[joker.tile_id] = number
        return values

    number = others[0].number
    for tile in tiles:
        values[tile.tile_id] = number
    return values


def calculate_set_value(tiles: Sequence[Tile], allow_joker_only: bool = False) -> int:
    kind = classify(tiles, allow_joker_only)
    _, others = _split_jokers(tiles)
    if kind is None or not others:
        return 0
    if kind == MeldKind.RUN:
        start = _run_start(tiles)
        return sum(range(start, start + len(tiles)))
    return others[0].number * len(tiles)


@dataclass(frozen=True)
class Meld:
    """A set of tiles lying on the table. May be incomplete mid-turn."""

    meld_id: str
    tiles: Tuple[Tile, ...] = ()

    def __len__(self) -> int:
        return len(self.tiles)

    def tile_ids(self) -> Tuple[str, ...]:
        return tuple(t.tile_id for t in self.tiles)

    def index_of(self, tile_id: str) -> int:
        for idx, tile in enumerate(self.tiles):
            if tile.tile_id == tile_id:
                return idx
        return -1

    def with_tiles(self, tiles: Sequence[Tile]) -> "Meld":
        return Meld(self.meld_id, tuple(tiles))

    def is_valid(self, allow_joker_only: bool = False) -> Tuple[bool, str]:
        return check_set(self.tiles, allow_joker_only)

    def kind(self, allow_joker_only: bool = False) -> Optional[MeldKind]:
        return classify(self.tiles, allow_joker_only)

    def value(self, allow_joker_only: bool = False) -> int:
        return calculate_set_value(self.tiles, allow_joker_only)
