from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from .meld import Meld
from .tiles import Tile


@dataclass(frozen=True)
class Table:
    """The shared board. Every update returns a new table sharing untouched melds."""

    melds: Tuple[Meld, ...] = ()

    def __len__(self) -> int:
        return len(self.melds)

    def index(self, meld_id: str) -> int:
        for idx, meld in enumerate(self.melds):
            if meld.meld_id == meld_id:
                return idx
        return -1

    def find(self, meld_id: str) -> Optional[Meld]:
        idx = self.index(meld_id)
        return None if idx < 0 else self.melds[idx]

    def locate_tile(self, tile_id: str) -> Optional[Meld]:
        for meld in self.melds:
            if meld.index_of(tile_id) >= 0:
                return meld
        return None

    def append(self, meld: Meld) -> "Table":
        return Table(self.melds + (meld,))

    def insert_after(self, meld_id: str, meld: Meld) -> "Table":
        idx = self.index(meld_id)
        if idx < 0:
            raise KeyError(meld_id)
        return Table(self.melds[: idx + 1] + (meld,) + self.melds[idx + 1 :])

    def replace(self, meld: Meld) -> "Table":
        """Swap in an updated meld; an emptied meld is dropped from the table."""
        idx = self.index(meld.meld_id)
        if idx < 0:
            raise KeyError(meld.meld_id)
        if not meld.tiles:
            return Table(self.melds[:idx] + self.melds[idx + 1 :])
        return Table(self.melds[:idx] + (meld,) + self.melds[idx + 1 :])

    def all_tiles(self) -> Iterable[Tile]:
        for meld in self.melds:
            yield from meld.tiles

    def tile_ids(self) -> Tuple[str, ...]:
        return tuple(t.tile_id for t in self.all_tiles())

    def is_valid(self, allow_joker_only: bool = False) -> Tuple[bool, str]:
        for meld in self.melds:
            ok, reason = meld.is_valid(allow_joker_only)
            if not ok:
                return False, f"invalid meld {meld.meld_id}: {reason}"
        return True, ""


def is_board_valid(table: Table, allow_joker_only: bool = False) -> bool:
    return table.is_valid(allow_joker_only)[0]
