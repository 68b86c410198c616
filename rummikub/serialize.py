"""Plain-record (JSON compatible) form of a :class:`GameState`.

Where the record ends up is the caller's business; loading is strict and
fails closed through :func:`restore`.
"""

from __future__ import annotations

import json
import logging
import re
from collections import Counter
from typing import Any, Dict, List, Optional

from .errors import CorruptSaveError
from .meld import Meld
from .pool import create_pool
from .rules import Ruleset
from .state import GameState, GameStatus, Player, TurnSnapshot
from .table import Table
from .tiles import MAX_NUMBER, MIN_NUMBER, Color, Tile

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

_MELD_ID = re.compile(r"meld-(\d+)")


def _tile_to_dict(tile: Tile) -> Dict[str, Any]:
    return {"id": tile.tile_id, "color": tile.color.value, "number": tile.number}


def _table_to_list(table: Table) -> List[Dict[str, Any]]:
    return [{"id": meld.meld_id, "tiles": [_tile_to_dict(t) for t in meld.tiles]} for meld in table.melds]


def serialize(state: GameState) -> Dict[str, Any]:
    return {
        "version": FORMAT_VERSION,
        "game_id": state.game_id,
        "ruleset": state.ruleset.to_dict(),
        "players": [
            {
                "id": p.player_id,
                "name": p.name,
                "hand": [_tile_to_dict(t) for t in p.hand],
                "has_played_initial_meld": p.has_played_initial_meld,
            }
            for p in state.players
        ],
        "current_player": state.current_player,
        "table": _table_to_list(state.table),
        "pool": [_tile_to_dict(t) for t in state.pool],
        "turn_start": {
            "table": _table_to_list(state.turn_start.table),
            "hand": [_tile_to_dict(t) for t in state.turn_start.hand],
        },
        "status": state.status.value,
        "winner": state.winner,
        "turn_number": state.turn_number,
        "next_meld_number": state.next_meld_number,
    }


def _expect(value: Any, kind: type, what: str) -> Any:
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise CorruptSaveError(f"{what} must be {kind.__name__}")
    return value


def _tile_from_dict(data: Dict[str, Any]) -> Tile:
    tile_id = _expect(data["id"], str, "tile id")
    color = Color(data["color"])
    number = data["number"]
    if color == Color.JOKER:
        if number is not None:
            raise CorruptSaveError(f"joker {tile_id} cannot carry a number")
    else:
        _expect(number, int, "tile number")
        if not MIN_NUMBER <= number <= MAX_NUMBER:
            raise CorruptSaveError(f"tile {tile_id} has number {number}")
    return Tile(tile_id, color, number)


def _tiles_from_list(data: Any) -> tuple:
    return tuple(_tile_from_dict(t) for t in _expect(data, list, "tile list"))


def _table_from_list(data: Any) -> Table:
    melds = []
    for meld in _expect(data, list, "table"):
        tiles = _tiles_from_list(meld["tiles"])
        if not tiles:
            raise CorruptSaveError("empty set on the table")
        melds.append(Meld(_expect(meld["id"], str, "set id"), tiles))
    return Table(tuple(melds))


def _meld_number(meld_id: str) -> Optional[int]:
    match = _MELD_ID.fullmatch(meld_id)
    return int(match.group(1)) if match else None


def _check_tiles(state: GameState) -> None:
    expected = {t.tile_id: t for t in create_pool(state.ruleset)}
    snapshot = list(state.turn_start.table.all_tiles()) + list(state.turn_start.hand)
    for tile in list(_owned_tiles(state)) + snapshot:
        known = expected.get(tile.tile_id)
        if known is None or (known.color, known.number) != (tile.color, tile.number):
            raise CorruptSaveError(f"tile {tile.tile_id} is not part of this ruleset's pool")
    missing = set(expected) - {t.tile_id for t in _owned_tiles(state)}
    if missing:
        raise CorruptSaveError(f"{len(missing)} tiles are missing from the game")


def _check_meld_ids(table: Table, next_meld_number: int, where: str) -> None:
    meld_ids = [m.meld_id for m in table.melds]
    if len(set(meld_ids)) != len(meld_ids):
        raise CorruptSaveError(f"duplicate set ids on the {where}")
    for meld_id in meld_ids:
        number = _meld_number(meld_id)
        if number is not None and number >= next_meld_number:
            raise CorruptSaveError(f"set {meld_id} on the {where} is not below the next set number {next_meld_number}")


def _owned_tiles(state: GameState) -> List[Tile]:
    owned = list(state.pool)
    owned += [t for p in state.players for t in p.hand]
    owned += list(state.table.all_tiles())
    return owned


def _check_consistency(state: GameState) -> None:
    owned = [t.tile_id for t in _owned_tiles(state)]
    duplicates = [tile_id for tile_id, count in Counter(owned).items() if count > 1]
    if duplicates:
        raise CorruptSaveError(f"tiles in more than one place: {sorted(duplicates)[:5]}")
    _check_tiles(state)

    in_turn = set(state.table.tile_ids()) | {t.tile_id for t in state.active_player.hand}
    at_start = set(state.turn_start.table.tile_ids()) | {t.tile_id for t in state.turn_start.hand}
    if in_turn != at_start:
        raise CorruptSaveError("turn-start snapshot does not match the table and active hand")

    _check_meld_ids(state.table, state.next_meld_number, "table")
    _check_meld_ids(state.turn_start.table, state.next_meld_number, "turn-start table")

    if state.is_finished != (state.winner is not None):
        raise CorruptSaveError("winner must be set exactly when the game is finished")
    if state.winner is not None and state.player_by_id(state.winner) is None:
        raise CorruptSaveError(f"unknown winner {state.winner}")


def deserialize(record: Dict[str, Any]) -> GameState:
    try:
        _expect(record, dict, "record")
        if record.get("version") != FORMAT_VERSION:
            raise CorruptSaveError(f"unsupported save version {record.get('version')!r}")
        ruleset = Ruleset.from_dict(_expect(record["ruleset"], dict, "ruleset"))
        players = tuple(
            Player(
                player_id=_expect(p["id"], str, "player id"),
                name=_expect(p["name"], str, "player name"),
                hand=_tiles_from_list(p["hand"]),
                has_played_initial_meld=_expect(p["has_played_initial_meld"], bool, "initial meld flag"),
            )
            for p in _expect(record["players"], list, "players")
        )
        if len(players) != ruleset.num_players:
            raise CorruptSaveError("player count does not match the ruleset")
        current = _expect(record["current_player"], int, "current player")
        if not 0 <= current < len(players):
            raise CorruptSaveError(f"current player {current} out of range")
        turn_start = _expect(record["turn_start"], dict, "turn start")
        winner = record["winner"]
        if winner is not None:
            _expect(winner, str, "winner")
        state = GameState(
            game_id=_expect(record["game_id"], str, "game id"),
            ruleset=ruleset,
            players=players,
            current_player=current,
            table=_table_from_list(record["table"]),
            pool=_tiles_from_list(record["pool"]),
            turn_start=TurnSnapshot(
                table=_table_from_list(turn_start["table"]),
                hand=_tiles_from_list(turn_start["hand"]),
            ),
            status=GameStatus(record["status"]),
            winner=winner,
            turn_number=_expect(record["turn_number"], int, "turn number"),
            next_meld_number=_expect(record["next_meld_number"], int, "next set number"),
        )
        _check_consistency(state)
    except CorruptSaveError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise CorruptSaveError(f"malformed game record: {exc!r}") from exc
    return state


def restore(record: Any, fallback: Optional[GameState] = None) -> Optional[GameState]:
    """Load a record, or keep ``fallback`` if the record is unusable."""
    try:
        return deserialize(record)
    except CorruptSaveError as exc:
        logger.warning("Ignoring saved game: %s", exc)
        return fallback


def dumps(state: GameState) -> str:
    return json.dumps(serialize(state), sort_keys=True)


def loads(text: str) -> GameState:
    try:
        record = json.loads(text)
    except ValueError as exc:
        raise CorruptSaveError(f"saved game is not valid JSON: {exc}") from exc
    return deserialize(record)
