from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

from .errors import InvalidSettings
from .tiles import MAX_NUMBER, TILE_COLORS

MIN_PLAYERS = 2
MAX_PLAYERS = 4
MIN_HAND_SIZE = 7
MAX_HAND_SIZE = 21


@dataclass(frozen=True)
class Ruleset:
    num_players: int = 2
    initial_hand_size: int = 14
    initial_meld_min_points: int = 30
    copies_per_tiletype: int = 2
    num_jokers: int = 2
    time_per_turn: Optional[int] = None
    # A set made only of jokers has no number to anchor it.
    joker_only_sets_valid: bool = False
    lowest_hand_wins_on_empty_pool: bool = False

    def deck_size(self) -> int:
        normal_tiles = len(TILE_COLORS) * MAX_NUMBER * self.copies_per_tiletype
        return normal_tiles + self.num_jokers

    def validate(self) -> "Ruleset":
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise InvalidSettings(f"num_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")
        if not MIN_HAND_SIZE <= self.initial_hand_size <= MAX_HAND_SIZE:
            raise InvalidSettings(f"initial_hand_size must be between {MIN_HAND_SIZE} and {MAX_HAND_SIZE}")
        if self.initial_meld_min_points < 0:
            raise InvalidSettings("initial_meld_min_points must be non-negative")
        if self.copies_per_tiletype < 1:
            raise InvalidSettings("copies_per_tiletype must be at least 1")
        if self.num_jokers < 0:
            raise InvalidSettings("num_jokers must be non-negative")
        if self.time_per_turn is not None and self.time_per_turn <= 0:
            raise InvalidSettings("time_per_turn must be positive or None")
        if self.num_players * self.initial_hand_size > self.deck_size():
            raise InvalidSettings(
                f"cannot deal {self.initial_hand_size} tiles to {self.num_players} players "
                f"from a pool of {self.deck_size()}"
            )
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Ruleset":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidSettings(f"unknown ruleset fields: {sorted(unknown)}")
        return cls(**data).validate()
