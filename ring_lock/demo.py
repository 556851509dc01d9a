"""Simple command line demo for the ring lock logic."""

import argparse
import logging
from typing import List, Optional, Sequence

from .game import Command, PuzzleLoader, RotationController, default_puzzle_root

MOVE_CODES = {
    "L": Command.ROTATE_LEFT,
    "R": Command.ROTATE_RIGHT,
    "I": Command.JUMP_IN,
    "O": Command.JUMP_OUT,
}


def parse_moves(moves: str) -> List[Command]:
    """Turn a move string such as ``"IRRO"`` into commands."""

    commands = []
    for code in moves.replace(" ", "").upper():
        if code not in MOVE_CODES:
            raise ValueError(f"Unknown move code: {code}")
        commands.append(MOVE_CODES[code])
    return commands


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ring Lock text demo")
    parser.add_argument("--puzzle", default="invinco_lock")
    parser.add_argument(
        "--moves",
        default="",
        help="Moves to play: L/R rotate the focused ring, I/O jump in/out.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    loader = PuzzleLoader(default_puzzle_root())
    controller = RotationController(loader.load(args.puzzle))
    for command in parse_moves(args.moves):
        controller.dispatch(command)

    state = controller.state
    metadata = state.puzzle.metadata
    print("=== Ring Lock Demo ===")
    print(f"Puzzle: {metadata['name']} ({metadata['slots']} slots, {metadata['rings']} rings)")
    print(f"Rotations: {list(state.rotations)}  focused ring: {state.focused_ring}")
    print("Receptors:")
    for slot, lit in state.receptors.items():
        print(f"  {slot}: {'lit' if lit else 'dark'}")
    print(f"Solved: {state.solved}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
