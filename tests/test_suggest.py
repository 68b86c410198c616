import pathlib
import sys
from dataclasses import replace

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummikub.meld import calculate_set_value, is_valid_set
from rummikub.rules import Ruleset
from rummikub.state import GameStatus, new_game
from rummikub.suggest import _by_color_and_number, candidate_sets, play_suggestion, suggest_melds, suggest_run
from rummikub.tiles import Color, Tile

RED, BLUE, ORANGE, BLACK = Color.RED, Color.BLUE, Color.ORANGE, Color.BLACK


def t(color, number, copy_index=0):
    return Tile.numbered(color, number, copy_index)


def _state_with_hand(hand, **rules):
    state = new_game(["Ann", "Bob"], ruleset=Ruleset(**rules), rng_seed=7)
    state = state.with_active_player(state.players[0].with_hand(hand))
    return replace(state, turn_start=state.snapshot())


def test_suggest_run_finds_longest_run():
    hand = [t(RED, 3), t(BLUE, 9), t(RED, 4), t(RED, 5), t(RED, 6), t(BLACK, 1)]
    run = suggest_run(hand)
    assert run is not None
    assert [tile.number for tile in run] == [3, 4, 5, 6]


def test_suggest_run_bridges_gap_with_joker():
    hand = [t(BLUE, 7), t(BLUE, 9), Tile.joker(0)]
    run = suggest_run(hand)
    assert run is not None
    assert is_valid_set(run)
    assert len(run) == 3


def test_hand_index_is_keyed_by_color():
    index = _by_color_and_number([t(RED, 3), t(RED, 3, 1), t(BLUE, 9), Tile.joker(0)])
    assert set(index) == {RED, BLUE}
    assert index[RED][3].tile_id == "red-3-0"


def test_no_run_in_scattered_hand():
    assert suggest_run([t(RED, 1), t(BLUE, 2), t(BLACK, 3)]) is None


def test_every_candidate_is_valid():
    state = new_game(["Ann", "Bob"], rng_seed=12)
    for player in state.players:
        for candidate in candidate_sets(player.hand):
            assert is_valid_set(candidate)
            assert len({tile.tile_id for tile in candidate}) == len(candidate)


def test_suggest_melds_respects_threshold():
    hand = [t(RED, 1), t(RED, 2), t(RED, 3), t(BLUE, 12)]
    assert suggest_melds(hand, min_total=30) == []
    melds = suggest_melds(hand, min_total=0)
    assert [sorted(tile.number for tile in m) for m in melds] == [[1, 2, 3]]


def test_suggest_melds_combines_disjoint_sets():
    hand = [t(RED, 10), t(BLUE, 10), t(BLACK, 10), t(ORANGE, 2), t(ORANGE, 3), t(ORANGE, 4)]
    melds = suggest_melds(hand, min_total=30)
    assert sum(calculate_set_value(m) for m in melds) == 39
    used = [tile.tile_id for m in melds for tile in m]
    assert len(used) == len(set(used)) == 6


def test_play_suggestion_commits_initial_meld():
    state = _state_with_hand([t(RED, 10), t(RED, 11), t(RED, 12), t(BLUE, 1)])

    result = play_suggestion(state)

    assert result.accepted, result.message
    assert len(result.state.table) == 1
    assert result.state.players[0].has_played_initial_meld
    assert [tile.tile_id for tile in result.state.players[0].hand] == ["blue-1-0"]


def test_play_suggestion_draws_when_threshold_not_met():
    state = _state_with_hand([t(RED, 1), t(RED, 2), t(RED, 3), t(BLUE, 1)])

    result = play_suggestion(state)

    assert result.accepted
    assert len(result.state.table) == 0
    assert len(result.state.players[0].hand) == 5
    assert result.state.current_player == 1


def test_play_suggestion_can_win():
    state = _state_with_hand([t(RED, 10), t(RED, 11), t(RED, 12)])

    result = play_suggestion(state)

    assert result.state.status == GameStatus.FINISHED
    assert result.state.winner == "player-1"
