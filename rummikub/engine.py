"""Turn state machine.

Every command takes a :class:`GameState` and returns a :class:`TurnResult`.
Accepted commands carry a new state; rejected ones carry the state unchanged
(``end_turn`` instead rolls back to the turn-start snapshot) together with the
:class:`TurnError` that explains why.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import (
    GameFinished,
    IllegalPass,
    IllegalReturn,
    InsufficientInitialMeld,
    InvalidBoard,
    InvalidPosition,
    NotFound,
    NotYourTurn,
    PoolExhausted,
    TurnError,
)
from .meld import Meld, tile_values
from .pool import draw
from .state import GameState, GameStatus, Player
from .tiles import Tile, hand_value, sort_tiles, sort_tiles_by_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    state: GameState
    accepted: bool
    message: str
    error: Optional[TurnError] = None


_Action = Callable[..., Tuple[GameState, str]]


def _require_turn(state: GameState, player_id: Optional[str]) -> None:
    if state.is_finished:
        raise GameFinished()
    if player_id is not None and player_id != state.active_player.player_id:
        raise NotYourTurn(f"It is {state.active_player.name}'s turn")


def _execute(state: GameState, player_id: Optional[str], action: _Action, *args) -> TurnResult:
    try:
        _require_turn(state, player_id)
        new_state, message = action(state, *args)
    except TurnError as exc:
        logger.info("%s rejected for %s: %s", action.__name__.lstrip("_"), state.active_player.player_id, exc)
        return TurnResult(state, False, str(exc), exc)
    return TurnResult(new_state, True, message)


# --- board edits -------------------------------------------------------------


def _take_from_hand(hand: Sequence[Tile], tile_id: str) -> Tuple[Tile, Tuple[Tile, ...]]:
    for idx, tile in enumerate(hand):
        if tile.tile_id == tile_id:
            return tile, tuple(hand[:idx]) + tuple(hand[idx + 1 :])
    raise NotFound(f"Tile {tile_id} is not in hand")


def _find_meld(state: GameState, meld_id: str) -> Meld:
    meld = state.table.find(meld_id)
    if meld is None:
        raise NotFound(f"Set {meld_id} is not on the table")
    return meld


def _insert(tiles: Sequence[Tile], tile: Tile, position: Optional[int]) -> Tuple[Tile, ...]:
    if position is None:
        return tuple(tiles) + (tile,)
    if not 0 <= position <= len(tiles):
        raise InvalidPosition(f"Position {position} is outside 0..{len(tiles)}")
    return tuple(tiles[:position]) + (tile,) + tuple(tiles[position:])


def _new_meld(state: GameState, tiles: Sequence[Tile]) -> Tuple[Meld, GameState]:
    meld = Meld(f"meld-{state.next_meld_number}", tuple(tiles))
    return meld, replace(state, next_meld_number=state.next_meld_number + 1)


def _place(state: GameState, tile_id: str, meld_id: Optional[str], position: Optional[int]) -> Tuple[GameState, str]:
    player = state.active_player
    tile, hand = _take_from_hand(player.hand, tile_id)
    if meld_id is None:
        meld, state = _new_meld(state, [tile])
        table = state.table.append(meld)
    else:
        target = _find_meld(state, meld_id)
        meld = target.with_tiles(_insert(target.tiles, tile, position))
        table = state.table.replace(meld)
    state = replace(state.with_active_player(player.with_hand(hand)), table=table)
    logger.debug("%s placed %s on %s", player.player_id, tile_id, meld.meld_id)
    return state, f"Placed {tile} on {meld.meld_id}"


def _move(
    state: GameState, tile_id: str, from_meld_id: str, to_meld_id: str, position: Optional[int]
) -> Tuple[GameState, str]:
    source = _find_meld(state, from_meld_id)
    idx = source.index_of(tile_id)
    if idx < 0:
        raise NotFound(f"Tile {tile_id} is not in set {from_meld_id}")
    target = _find_meld(state, to_meld_id)
    tile = source.tiles[idx]
    rest = source.tiles[:idx] + source.tiles[idx + 1 :]

    if source.meld_id == target.meld_id:
        table = state.table.replace(source.with_tiles(_insert(rest, tile, position)))
    else:
        moved = target.with_tiles(_insert(target.tiles, tile, position))
        table = state.table.replace(moved).replace(source.with_tiles(rest))
    logger.debug("%s moved %s from %s to %s", state.active_player.player_id, tile_id, from_meld_id, to_meld_id)
    return replace(state, table=table), f"Moved {tile} to {to_meld_id}"


def _return_to_hand(state: GameState, tile_id: str, meld_id: str) -> Tuple[GameState, str]:
    if all(t.tile_id != tile_id for t in state.turn_start.hand):
        raise IllegalReturn("Can't return tiles that weren't yours this turn")
    meld = _find_meld(state, meld_id)
    idx = meld.index_of(tile_id)
    if idx < 0:
        raise NotFound(f"Tile {tile_id} is not in set {meld_id}")
    tile = meld.tiles[idx]
    table = state.table.replace(meld.with_tiles(meld.tiles[:idx] + meld.tiles[idx + 1 :]))
    player = state.active_player
    state = replace(state.with_active_player(player.with_hand(player.hand + (tile,))), table=table)
    return state, f"Returned {tile} to hand"


def _create_meld(state: GameState, tile_ids: Sequence[str]) -> Tuple[GameState, str]:
    if not tile_ids:
        raise NotFound("No tiles given for the new set")
    player = state.active_player
    hand = player.hand
    tiles: List[Tile] = []
    for tile_id in tile_ids:
        tile, hand = _take_from_hand(hand, tile_id)
        tiles.append(tile)
    meld, state = _new_meld(state, tiles)
    state = replace(state.with_active_player(player.with_hand(hand)), table=state.table.append(meld))
    return state, f"Created {meld.meld_id} with {len(tiles)} tiles"


def _split_meld(state: GameState, meld_id: str, position: int) -> Tuple[GameState, str]:
    meld = _find_meld(state, meld_id)
    if not 0 < position < len(meld):
        raise InvalidPosition(f"Cannot split {meld_id} at {position}")
    tail, state = _new_meld(state, meld.tiles[position:])
    table = state.table.replace(meld.with_tiles(meld.tiles[:position])).insert_after(meld_id, tail)
    return replace(state, table=table), f"Split {meld_id} into {meld_id} and {tail.meld_id}"


def _sort_hand(state: GameState, by_number: bool) -> Tuple[GameState, str]:
    player = state.active_player
    ordered = sort_tiles_by_number(player.hand) if by_number else sort_tiles(player.hand)
    return state.with_active_player(player.with_hand(ordered)), "Hand sorted"


def place_tile_from_hand(
    state: GameState,
    tile_id: str,
    meld_id: Optional[str] = None,
    position: Optional[int] = None,
    player_id: Optional[str] = None,
) -> TurnResult:
    return _execute(state, player_id, _place, tile_id, meld_id, position)


def move_tile_on_board(
    state: GameState,
    tile_id: str,
    from_meld_id: str,
    to_meld_id: str,
    position: Optional[int] = None,
    player_id: Optional[str] = None,
) -> TurnResult:
    return _execute(state, player_id, _move, tile_id, from_meld_id, to_meld_id, position)


def return_tile_to_hand(state: GameState, tile_id: str, meld_id: str, player_id: Optional[str] = None) -> TurnResult:
    return _execute(state, player_id, _return_to_hand, tile_id, meld_id)


def create_meld(state: GameState, tile_ids: Sequence[str], player_id: Optional[str] = None) -> TurnResult:
    return _execute(state, player_id, _create_meld, list(tile_ids))


def split_meld(state: GameState, meld_id: str, position: int, player_id: Optional[str] = None) -> TurnResult:
    return _execute(state, player_id, _split_meld, meld_id, position)


def sort_hand(state: GameState, by_number: bool = False, player_id: Optional[str] = None) -> TurnResult:
    return _execute(state, player_id, _sort_hand, by_number)


# --- turn queries ------------------------------------------------------------


def played_tile_ids(state: GameState) -> Tuple[str, ...]:
    """Ids that were in hand at turn start and are no longer there."""
    in_hand = {t.tile_id for t in state.active_player.hand}
    return tuple(t.tile_id for t in state.turn_start.hand if t.tile_id not in in_hand)


def played_value(state: GameState) -> int:
    played = set(played_tile_ids(state))
    allow = state.ruleset.joker_only_sets_valid
    total = 0
    for meld in state.table.melds:
        values = tile_values(meld.tiles, allow)
        total += sum(v for tile_id, v in values.items() if tile_id in played)
    return total


def can_end_turn(state: GameState) -> bool:
    if state.is_finished:
        return False
    ok, _ = state.table.is_valid(state.ruleset.joker_only_sets_valid)
    if not ok:
        return False
    return bool(played_tile_ids(state)) or state.table != state.turn_start.table


# --- commits -----------------------------------------------------------------


def _revert(state: GameState) -> GameState:
    player = state.active_player.with_hand(state.turn_start.hand)
    return replace(state.with_active_player(player), table=state.turn_start.table)


def _lowest_hand(players: Sequence[Player]) -> Player:
    return min(players, key=lambda p: hand_value(p.hand))


def _finish_or_advance(state: GameState, done: str) -> Tuple[GameState, str]:
    acting = state.active_player
    if not acting.hand:
        state = replace(state, status=GameStatus.FINISHED, winner=acting.player_id, turn_start=state.snapshot())
        logger.info("Game %s won by %s", state.game_id, acting.player_id)
        return state, f"{acting.name} wins!"

    if state.ruleset.lowest_hand_wins_on_empty_pool and not state.pool:
        winner = _lowest_hand(state.players)
        state = replace(state, status=GameStatus.FINISHED, winner=winner.player_id, turn_start=state.snapshot())
        logger.info("Game %s ended on empty pool, won by %s", state.game_id, winner.player_id)
        return state, f"Pool is empty. {winner.name} wins with {hand_value(winner.hand)} points in hand!"

    state = replace(
        state,
        current_player=(state.current_player + 1) % len(state.players),
        turn_number=state.turn_number + 1,
    )
    state = replace(state, turn_start=state.snapshot())
    return state, f"{done} {state.active_player.name}'s turn"


def _draw(state: GameState) -> Tuple[GameState, str]:
    if not state.pool:
        raise PoolExhausted("No more tiles in the pool!")
    state = _revert(state)
    result = draw(state.pool, 1)
    player = state.active_player
    state = replace(state.with_active_player(player.with_hand(player.hand + result.drawn)), pool=result.remaining)
    logger.info("%s drew a tile, %d left in pool", player.player_id, len(state.pool))
    return _finish_or_advance(state, "Drew a tile.")


def _pass(state: GameState) -> Tuple[GameState, str]:
    if state.pool:
        raise IllegalPass("Cannot pass while tiles remain in the pool; draw instead")
    logger.info("%s passed", state.active_player.player_id)
    return _finish_or_advance(_revert(state), "Passed.")


def _commit(state: GameState) -> Tuple[GameState, str]:
    ruleset = state.ruleset
    ok, reason = state.table.is_valid(ruleset.joker_only_sets_valid)
    if not ok:
        raise InvalidBoard(f"Invalid board! All sets must be valid runs or groups ({reason})")

    played = played_tile_ids(state)
    if not played and state.table == state.turn_start.table:
        raise IllegalPass("Nothing changed this turn: play tiles or draw")

    player = state.active_player
    if played and not player.has_played_initial_meld:
        value = played_value(state)
        if value < ruleset.initial_meld_min_points:
            raise InsufficientInitialMeld(ruleset.initial_meld_min_points, value)
        state = state.with_active_player(replace(player, has_played_initial_meld=True))

    logger.info("%s committed %d tiles, %d sets on table", player.player_id, len(played), len(state.table))
    return _finish_or_advance(state, "Turn ended.")


def draw_tile(state: GameState, player_id: Optional[str] = None) -> TurnResult:
    return _execute(state, player_id, _draw)


def pass_turn(state: GameState, player_id: Optional[str] = None) -> TurnResult:
    return _execute(state, player_id, _pass)


def reset_turn(state: GameState, player_id: Optional[str] = None) -> TurnResult:
    if player_id is not None and player_id != state.active_player.player_id:
        exc = NotYourTurn(f"It is {state.active_player.name}'s turn")
        return TurnResult(state, False, str(exc), exc)
    return TurnResult(_revert(state), True, "Turn reset. Try again!")


def end_turn(state: GameState, player_id: Optional[str] = None) -> TurnResult:
    try:
        _require_turn(state, player_id)
        new_state, message = _commit(state)
    except (InvalidBoard, InsufficientInitialMeld, IllegalPass) as exc:
        logger.info("end_turn rejected for %s: %s", state.active_player.player_id, exc)
        return TurnResult(_revert(state), False, str(exc), exc)
    except TurnError as exc:
        logger.info("end_turn rejected for %s: %s", state.active_player.player_id, exc)
        return TurnResult(state, False, str(exc), exc)
    return TurnResult(new_state, True, message)


def expire_turn(state: GameState) -> TurnResult:
    """Called by an external turn timer when the time budget runs out."""
    if can_end_turn(state):
        result = end_turn(state)
        if result.accepted:
            return result
        state = result.state
    if state.pool or state.is_finished:
        return draw_tile(state)
    return pass_turn(state)
