"""Rummikub rule engine: set validation and the turn state machine."""

from .engine import (
    TurnResult,
    can_end_turn,
    create_meld,
    draw_tile,
    end_turn,
    expire_turn,
    move_tile_on_board,
    pass_turn,
    place_tile_from_hand,
    reset_turn,
    return_tile_to_hand,
    sort_hand,
    split_meld,
)
from .errors import (
    CorruptSaveError,
    GameFinished,
    IllegalPass,
    IllegalReturn,
    InsufficientInitialMeld,
    InvalidBoard,
    InvalidPosition,
    InvalidSettings,
    NotFound,
    NotYourTurn,
    PoolExhausted,
    RummikubError,
    TurnError,
)
from .meld import Meld, MeldKind, calculate_set_value, is_valid_group, is_valid_run, is_valid_set
from .pool import create_pool, draw, shuffle
from .rules import Ruleset
from .serialize import deserialize, restore, serialize
from .state import GameState, GameStatus, Player, TurnSnapshot, initialize_game, new_game
from .table import Table, is_board_valid
from .tiles import Color, Tile

__all__ = [
    "Color",
    "Tile",
    "Ruleset",
    "Meld",
    "MeldKind",
    "Table",
    "GameState",
    "GameStatus",
    "Player",
    "TurnSnapshot",
    "TurnResult",
    "create_pool",
    "shuffle",
    "draw",
    "is_valid_run",
    "is_valid_group",
    "is_valid_set",
    "calculate_set_value",
    "is_board_valid",
    "new_game",
    "initialize_game",
    "draw_tile",
    "place_tile_from_hand",
    "move_tile_on_board",
    "return_tile_to_hand",
    "create_meld",
    "split_meld",
    "sort_hand",
    "reset_turn",
    "can_end_turn",
    "end_turn",
    "pass_turn",
    "expire_turn",
    "serialize",
    "deserialize",
    "restore",
    "RummikubError",
    "InvalidSettings",
    "CorruptSaveError",
    "TurnError",
    "PoolExhausted",
    "NotFound",
    "InvalidBoard",
    "InsufficientInitialMeld",
    "IllegalReturn",
    "NotYourTurn",
    "GameFinished",
    "InvalidPosition",
    "IllegalPass",
]
