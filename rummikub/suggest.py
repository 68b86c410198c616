"""Greedy move suggestion.

Builds candidate sets from a hand, keeps only the ones the validation engine
accepts, and plays them through the regular command API.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .engine import TurnResult, create_meld, draw_tile, end_turn, pass_turn, reset_turn
from .meld import MAX_GROUP_SIZE, MIN_SET_SIZE, calculate_set_value, is_valid_set
from .state import GameState
from .tiles import MAX_NUMBER, MIN_NUMBER, TILE_COLORS, Color, Tile

logger = logging.getLogger(__name__)

Candidate = Tuple[Tile, ...]


def _by_color_and_number(hand: Iterable[Tile]) -> Dict[Color, Dict[int, Tile]]:
    index: Dict[Color, Dict[int, Tile]] = defaultdict(dict)
    for tile in hand:
        if not tile.is_joker():
            index[tile.color].setdefault(tile.number, tile)
    return index


def _run_candidates(hand: Sequence[Tile]) -> Iterable[Candidate]:
    jokers = [t for t in hand if t.is_joker()]
    for color, numbers in _by_color_and_number(hand).items():
        for start in range(MIN_NUMBER, MAX_NUMBER - MIN_SET_SIZE + 2):
            for end in range(start + MIN_SET_SIZE - 1, MAX_NUMBER + 1):
                wanted = range(start, end + 1)
                missing = [n for n in wanted if n not in numbers]
                if len(missing) > len(jokers) or len(missing) == len(wanted):
                    continue
                spare = iter(jokers)
                yield tuple(numbers[n] if n in numbers else next(spare) for n in wanted)


def _group_candidates(hand: Sequence[Tile]) -> Iterable[Candidate]:
    jokers = [t for t in hand if t.is_joker()]
    by_number: Dict[int, Dict[Color, Tile]] = defaultdict(dict)
    for tile in hand:
        if not tile.is_joker():
            by_number[tile.number].setdefault(tile.color, tile)
    for number, colors in by_number.items():
        available = [colors[c] for c in TILE_COLORS if c in colors]
        for size in range(MIN_SET_SIZE, MAX_GROUP_SIZE + 1):
            for real in range(min(size, len(available)), 0, -1):
                if size - real > len(jokers):
                    break
                for combo in combinations(available, real):
                    yield tuple(combo) + tuple(jokers[: size - real])


def _rank(candidate: Candidate) -> Tuple[int, int, int]:
    jokers = sum(1 for t in candidate if t.is_joker())
    return (len(candidate), calculate_set_value(candidate), -jokers)


def candidate_sets(hand: Sequence[Tile]) -> List[Candidate]:
    """All valid sets that can be laid down from ``hand`` alone, best first."""
    seen = set()
    found: List[Candidate] = []
    for candidate in list(_run_candidates(hand)) + list(_group_candidates(hand)):
        key = tuple(sorted(t.tile_id for t in candidate))
        if key in seen or not is_valid_set(candidate):
            continue
        seen.add(key)
        found.append(candidate)
    found.sort(key=_rank, reverse=True)
    return found


def suggest_melds(hand: Sequence[Tile], min_total: int = 0) -> List[Candidate]:
    """Greedily pick disjoint sets from ``hand``; empty if they miss ``min_total``."""
    remaining = list(hand)
    chosen: List[Candidate] = []
    while True:
        candidates = candidate_sets(remaining)
        if not candidates:
            break
        best = candidates[0]
        chosen.append(best)
        used = {t.tile_id for t in best}
        remaining = [t for t in remaining if t.tile_id not in used]
    if not chosen or sum(calculate_set_value(c) for c in chosen) < min_total:
        return []
    return chosen


def suggest_run(hand: Sequence[Tile]) -> Optional[Candidate]:
    runs = [c for c in _run_candidates(hand) if is_valid_set(c)]
    if not runs:
        return None
    return max(runs, key=_rank)


def play_suggestion(state: GameState) -> TurnResult:
    """Lay down whatever the greedy search finds, otherwise draw or pass."""
    player = state.active_player
    required = 0 if player.has_played_initial_meld else state.ruleset.initial_meld_min_points
    melds = suggest_melds(player.hand, required)
    working = state
    for meld in melds:
        result = create_meld(working, [t.tile_id for t in meld])
        if not result.accepted:
            break
        working = result.state
    else:
        if melds:
            result = end_turn(working)
            if result.accepted:
                return result
            logger.debug("Suggested play for %s rejected: %s", player.player_id, result.message)

    state = reset_turn(working).state
    if state.pool:
        return draw_tile(state)
    return pass_turn(state)
