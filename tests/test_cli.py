import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummikub.cli import main, run_game
from rummikub.rules import Ruleset


def _all_tile_ids(state):
    ids = [t.tile_id for t in state.pool]
    ids += [t.tile_id for p in state.players for t in p.hand]
    ids += list(state.table.tile_ids())
    return ids


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_self_play_conserves_tiles(seed):
    rules = Ruleset(num_players=3)
    state = run_game(["A", "B", "C"], ruleset=rules, seed=seed, max_turns=200)

    ids = _all_tile_ids(state)
    assert len(ids) == len(set(ids)) == rules.deck_size()
    assert state.table.is_valid()[0]
    assert state.turn_start.table == state.table


def test_self_play_with_lowest_hand_policy_finishes():
    rules = Ruleset(lowest_hand_wins_on_empty_pool=True)
    state = run_game(["A", "B"], ruleset=rules, seed=5, max_turns=1000)
    assert state.is_finished
    assert state.winner in {p.player_id for p in state.players}


def test_main_prints_summary(capsys):
    main(["--seed", "3", "--players", "2", "--max-turns", "50"])
    out = capsys.readouterr().out
    assert "Game finished after" in out
    assert "Pool left:" in out


def test_main_rejects_bad_settings():
    with pytest.raises(SystemExit):
        main(["--hand-size", "3"])
