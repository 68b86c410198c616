from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .errors import InvalidSettings
from .pool import create_pool, draw, shuffle
from .rules import Ruleset
from .table import Table
from .tiles import Tile

logger = logging.getLogger(__name__)


class GameStatus(str, Enum):
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass(frozen=True)
class Player:
    player_id: str
    name: str
    hand: Tuple[Tile, ...] = ()
    has_played_initial_meld: bool = False

    def with_hand(self, hand: Sequence[Tile]) -> "Player":
        return replace(self, hand=tuple(hand))


@dataclass(frozen=True)
class TurnSnapshot:
    """Table and acting player's hand as they were when the turn began."""

    table: Table
    hand: Tuple[Tile, ...]


@dataclass(frozen=True)
class GameState:
    game_id: str
    ruleset: Ruleset
    players: Tuple[Player, ...]
    current_player: int
    table: Table
    pool: Tuple[Tile, ...]
    turn_start: TurnSnapshot
    status: GameStatus = GameStatus.PLAYING
    winner: Optional[str] = None
    turn_number: int = 0
    next_meld_number: int = 1

    @property
    def active_player(self) -> Player:
        return self.players[self.current_player]

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED

    def player_by_id(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.player_id == player_id:
                return player
        return None

    def with_active_player(self, player: Player) -> "GameState":
        players = list(self.players)
        players[self.current_player] = player
        return replace(self, players=tuple(players))

    def snapshot(self) -> TurnSnapshot:
        return TurnSnapshot(table=self.table, hand=self.active_player.hand)


def _deal_initial_hands(
    pool: Tuple[Tile, ...], player_names: Sequence[str], ruleset: Ruleset
) -> Tuple[List[Player], Tuple[Tile, ...]]:
    players: List[Player] = []
    for idx, name in enumerate(player_names):
        result = draw(pool, ruleset.initial_hand_size)
        pool = result.remaining
        players.append(Player(player_id=f"player-{idx + 1}", name=name, hand=result.drawn))
    return players, pool


def new_game(
    player_names: Sequence[str],
    ruleset: Ruleset | None = None,
    rng_seed: Optional[int] = None,
    rng: random.Random | None = None,
) -> GameState:
    names = [str(name).strip() for name in player_names]
    if any(not name for name in names):
        raise InvalidSettings("player names must be non-empty")
    ruleset = ruleset or Ruleset(num_players=len(names))
    if len(names) != ruleset.num_players:
        raise InvalidSettings(f"expected {ruleset.num_players} player names, got {len(names)}")
    ruleset.validate()

    rng = rng or random.Random(rng_seed)
    pool = shuffle(create_pool(ruleset), rng)
    players, pool = _deal_initial_hands(pool, names, ruleset)
    table = Table()
    state = GameState(
        game_id=f"{rng.getrandbits(64):016x}",
        ruleset=ruleset,
        players=tuple(players),
        current_player=0,
        table=table,
        pool=pool,
        turn_start=TurnSnapshot(table=table, hand=players[0].hand),
    )
    logger.info("New game %s: %d players, %d tiles left in pool", state.game_id, len(players), len(pool))
    return state


initialize_game = new_game
