import itertools
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummikub.meld import (
    Meld,
    MeldKind,
    calculate_set_value,
    check_run,
    classify,
    is_valid_group,
    is_valid_run,
    is_valid_set,
    tile_values,
)
from rummikub.tiles import Color, Tile

RED, BLUE, ORANGE, BLACK = Color.RED, Color.BLUE, Color.ORANGE, Color.BLACK


def t(color, number, copy_index=0):
    return Tile.numbered(color, number, copy_index)


J0 = Tile.joker(0)
J1 = Tile.joker(1)


def test_plain_run():
    tiles = [t(RED, 5), t(RED, 6), t(RED, 7)]
    assert is_valid_run(tiles)
    assert calculate_set_value(tiles) == 18


def test_run_with_trailing_joker():
    tiles = [t(RED, 5), t(RED, 6), J0]
    assert is_valid_run(tiles)
    assert calculate_set_value(tiles) == 18


def test_joker_fills_gap():
    tiles = [t(RED, 5), J0, t(RED, 7)]
    assert is_valid_run(tiles)
    assert calculate_set_value(tiles) == 18
    assert tile_values(tiles)[J0.tile_id] == 6


def test_run_never_goes_past_13():
    tiles = [t(BLUE, 12), t(BLUE, 13), J0]
    assert is_valid_run(tiles)
    assert calculate_set_value(tiles) == 11 + 12 + 13
    assert tile_values(tiles)[J0.tile_id] == 11


def test_run_rejections():
    assert not is_valid_run([t(RED, 5), t(RED, 6)])
    assert not is_valid_run([t(RED, 5), t(BLUE, 6), t(RED, 7)])
    assert not is_valid_run([t(RED, 5), t(RED, 5, 1), t(RED, 6)])
    assert not is_valid_run([t(RED, 5), t(RED, 7), t(RED, 8)])
    assert not is_valid_run([t(RED, 13), t(RED, 1), t(RED, 2)])
    assert not is_valid_run([t(RED, 2), J0, J1, t(RED, 6)])
    assert check_run([t(RED, 5), t(BLUE, 6), t(RED, 7)]) == (False, "run must have same color")


def test_run_of_all_thirteen():
    tiles = [t(BLACK, n) for n in range(1, 14)]
    assert is_valid_run(tiles)
    assert calculate_set_value(tiles) == sum(range(1, 14))
    assert not is_valid_run(tiles + [J0])


def test_group_of_three_and_four():
    tiles = [t(RED, 5), t(BLUE, 5), t(BLACK, 5)]
    assert is_valid_group(tiles)
    assert calculate_set_value(tiles) == 15

    tiles.append(t(ORANGE, 5))
    assert is_valid_group(tiles)
    assert calculate_set_value(tiles) == 20

    for fifth in (J0, t(RED, 5, 1), t(RED, 6)):
        assert not is_valid_group(tiles + [fifth])
        assert not is_valid_set(tiles + [fifth])
        assert calculate_set_value(tiles + [fifth]) == 0


def test_group_with_joker_counts_group_number():
    tiles = [t(RED, 9), J0, t(BLUE, 9)]
    assert is_valid_group(tiles)
    assert calculate_set_value(tiles) == 27
    assert tile_values(tiles) == {tiles[0].tile_id: 9, J0.tile_id: 9, tiles[2].tile_id: 9}


def test_group_rejections():
    assert not is_valid_group([t(RED, 5), t(RED, 5, 1), t(BLUE, 5)])
    assert not is_valid_group([t(RED, 5), t(BLUE, 6), t(BLACK, 5)])
    assert not is_valid_group([t(RED, 5), t(BLUE, 5)])


def test_joker_only_sets_follow_policy_flag():
    jokers = [Tile.joker(i) for i in range(3)]
    assert not is_valid_run(jokers)
    assert not is_valid_group(jokers)
    assert not is_valid_set(jokers)
    assert is_valid_run(jokers, allow_joker_only=True)
    assert is_valid_group(jokers, allow_joker_only=True)
    assert calculate_set_value(jokers, allow_joker_only=True) == 0


def test_ambiguous_set_scores_as_run():
    tiles = [t(ORANGE, 5), J0, J1]
    assert classify(tiles) == MeldKind.RUN
    assert calculate_set_value(tiles) == 5 + 6 + 7


def test_invalid_set_is_worth_nothing():
    tiles = [t(RED, 1), t(BLUE, 7), t(BLACK, 11)]
    assert classify(tiles) is None
    assert calculate_set_value(tiles) == 0


@pytest.mark.parametrize(
    "tiles",
    [
        [t(RED, 5), J0, t(RED, 7), t(RED, 8)],
        [t(BLUE, 11), t(BLUE, 12), J0, J1],
        [t(RED, 4), t(BLUE, 4), J0, t(ORANGE, 4)],
    ],
)
def test_value_ignores_order(tiles):
    expected = calculate_set_value(tiles)
    assert expected > 0
    for perm in itertools.permutations(tiles):
        assert calculate_set_value(list(perm)) == expected
        assert sum(tile_values(list(perm)).values()) == expected


def test_valid_sets_satisfy_structural_properties():
    tiles = [t(color, n, copy_index) for color in (RED, BLUE, ORANGE, BLACK) for n in range(1, 6) for copy_index in (0, 1)]
    runs = groups = 0
    for combo in itertools.combinations(tiles, 3):
        if is_valid_run(combo):
            numbers = sorted(tile.number for tile in combo)
            assert len(set(numbers)) == len(numbers)
            assert numbers[-1] - numbers[0] + 1 == len(combo)
            runs += 1
        if is_valid_group(combo):
            assert len({tile.number for tile in combo}) == 1
            assert len({tile.color for tile in combo}) == len(combo)
            groups += 1
    assert runs > 0
    assert groups > 0


def test_meld_record_reports_reason():
    meld = Meld("meld-1", (t(RED, 1), t(RED, 2)))
    ok, reason = meld.is_valid()
    assert not ok
    assert "too short" in reason
    assert meld.kind() is None

    meld = meld.with_tiles(meld.tiles + (t(RED, 3),))
    assert meld.is_valid() == (True, "")
    assert meld.kind() == MeldKind.RUN
    assert meld.value() == 6
    assert meld.index_of("red-3-0") == 2
    assert meld.index_of("red-4-0") == -1
