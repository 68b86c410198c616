from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .errors import InvalidSettings
from .rules import Ruleset
from .state import GameState, new_game
from .suggest import play_suggestion
from .tiles import hand_value

logger = logging.getLogger(__name__)


def run_game(
    player_names: List[str],
    ruleset: Ruleset | None = None,
    seed: Optional[int] = None,
    max_turns: int = 500,
) -> GameState:
    state = new_game(player_names, ruleset=ruleset, rng_seed=seed)
    for _ in range(max_turns):
        if state.is_finished:
            break
        result = play_suggestion(state)
        if not result.accepted:
            logger.warning("Bot move rejected: %s", result.message)
            break
        logger.debug(result.message)
        state = result.state
    return state


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Run a Rummikub self-play simulation.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible pool order.")
    parser.add_argument("--players", type=int, default=2, choices=(2, 3, 4), help="Number of players.")
    parser.add_argument("--hand-size", type=int, default=14, help="Tiles dealt to each player.")
    parser.add_argument("--min-meld", type=int, default=30, help="Minimum initial meld value.")
    parser.add_argument("--jokers", type=int, default=2, help="Number of jokers in the pool.")
    parser.add_argument("--max-turns", type=int, default=500, help="Stop after this many turns.")
    parser.add_argument(
        "--lowest-hand-wins",
        action="store_true",
        help="End the game when the pool runs out; lowest hand value wins.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every move.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    rules = Ruleset(
        num_players=args.players,
        initial_hand_size=args.hand_size,
        initial_meld_min_points=args.min_meld,
        num_jokers=args.jokers,
        lowest_hand_wins_on_empty_pool=args.lowest_hand_wins,
    )
    names = [f"Bot {i + 1}" for i in range(args.players)]
    try:
        state = run_game(names, ruleset=rules, seed=args.seed, max_turns=args.max_turns)
    except InvalidSettings as exc:
        parser.error(str(exc))

    print(f"Game finished after {state.turn_number} turns")
    if state.winner is not None:
        print(f"Winner: {state.player_by_id(state.winner).name}")
    else:
        print("No winner (turn limit reached)")
    print("Hand sizes:", [len(p.hand) for p in state.players])
    print("Hand values:", [hand_value(p.hand) for p in state.players])
    print("Table sets:", len(state.table))
    print("Pool left:", len(state.pool))


if __name__ == "__main__":
    main()
