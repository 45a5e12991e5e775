"""Headless driver for the match-three rules engine.

Starts a seeded game, prints the board, and plays the first available swap a
few times so the event stream can be watched in the log.
"""
import argparse
import logging
import random

from match3.config import configure
from match3.constants import GRID_ROWS, GRID_COLS, TILE_TYPE_COUNT
from match3.events.bus import (EventBus, EVENT_BOARD_RESET, EVENT_CASCADE_COMPLETE, EVENT_MATCH_CLEARED,
                               EVENT_TILE_SWAP_INVALID)
from match3.game import Match3Game


def _print_board(grid):
    for row in grid:
        print(" ".join(str(v) for v in row))
    print()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Play a few match-three moves headlessly.")
    parser.add_argument("--rows", type=int, default=GRID_ROWS)
    parser.add_argument("--cols", type=int, default=GRID_COLS)
    parser.add_argument("--types", type=int, default=TILE_TYPE_COUNT)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--moves", type=int, default=3)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    event_bus = EventBus()
    event_bus.subscribe(EVENT_MATCH_CLEARED, lambda sender, **kw: print(f"cleared {len(kw['positions'])} tiles at depth {kw['depth']}"))
    event_bus.subscribe(EVENT_CASCADE_COMPLETE, lambda sender, **kw: print(f"cascade settled after {kw['depth']} step(s)"))
    event_bus.subscribe(EVENT_TILE_SWAP_INVALID, lambda sender, **kw: print(f"swap rejected: {kw['reason'].value}"))
    event_bus.subscribe(EVENT_BOARD_RESET, lambda sender, **kw: print(f"board reset ({kw['reason']})"))

    config = configure(args.rows, args.cols, args.types, reshuffle_on_stalemate=True)
    game = Match3Game(config, event_bus=event_bus, rng=random.Random(args.seed))
    _print_board(game.new_game())

    for _ in range(args.moves):
        swaps = game.valid_swaps()
        if not swaps:
            print("no moves left")
            break
        src, dst = swaps[0]
        print(f"swap {src} <-> {dst}")
        game.request_swap(src, dst)
        _print_board(game.board_state())


if __name__ == "__main__":
    main()
