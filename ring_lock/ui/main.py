"""Interactive pygame front-end for the ring lock puzzle."""

from __future__ import annotations

import argparse
import logging
import os
from array import array
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import pygame

from ..game import PuzzleLoader, RotationController, Transition, default_puzzle_root
from . import layout
from .toolkit import RingLockUI

PUZZLE_ENV_VAR = "RING_LOCK_PUZZLE_ROOT"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UIDirectories:
    """Bundle with resolved directories required by the UI."""

    puzzle_root: Path


def _read_directory(env_var: str, fallback: Path) -> Path:
    value = os.environ.get(env_var)
    if value:
        return Path(value).expanduser()
    return fallback


def resolve_directories(check_exists: bool = True) -> UIDirectories:
    """Resolve UI directories using environment variables.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if the resolved puzzle
        directory does not exist on disk.
    """

    puzzle_root = _read_directory(PUZZLE_ENV_VAR, default_puzzle_root())

    if check_exists and not puzzle_root.exists():
        raise FileNotFoundError(
            f"Required puzzle directory does not exist: {puzzle_root}"
        )

    return UIDirectories(puzzle_root=puzzle_root)


def _build_tone(frequency: float, duration: float, volume: float = 0.25):
    """Synthesize a short square-wave cue, or ``None`` when audio is unavailable."""

    settings = pygame.mixer.get_init()
    if settings is None:
        return None
    rate, size, channels = settings
    if abs(size) != 16:
        return None
    amplitude = int(volume * 32767)
    half_period = max(1, int(rate / frequency / 2))
    samples = array("h")
    for index in range(int(rate * duration)):
        value = amplitude if (index // half_period) % 2 == 0 else -amplitude
        samples.extend([value] * channels)
    return pygame.mixer.Sound(buffer=samples.tobytes())


class RingLockApp:
    """Pygame driven application for the ring lock."""

    def __init__(
        self,
        *,
        directories: Optional[UIDirectories] = None,
        puzzle_name: Optional[str] = None,
    ) -> None:
        pygame.init()
        pygame.display.set_caption("Ring Lock")
        self.clock = pygame.time.Clock()

        self.directories = directories or resolve_directories()
        self.loader = PuzzleLoader(self.directories.puzzle_root)
        self.puzzle_names: List[str] = self.loader.available()
        if not self.puzzle_names:
            raise RuntimeError("No puzzles available to load.")
        self.puzzle_index = (
            self.puzzle_names.index(puzzle_name) if puzzle_name in self.puzzle_names else 0
        )

        self.rotate_sound = None
        self.jump_sound = None
        self.solved_sound = None
        try:
            pygame.mixer.init()
        except pygame.error as exc:
            logger.warning("Audio disabled: %s", exc)
        else:
            self.rotate_sound = _build_tone(330.0, 0.05)
            self.jump_sound = _build_tone(520.0, 0.08)
            self.solved_sound = _build_tone(780.0, 0.4)

        self.controller: Optional[RotationController] = None
        self.ui: Optional[RingLockUI] = None
        self.load_puzzle(self.puzzle_names[self.puzzle_index])

    def load_puzzle(self, name: str) -> None:
        config = self.loader.load(name)
        self.controller = RotationController(config)
        self.controller.subscribe(self.on_transition)
        geometry = layout.compute_geometry(
            self.controller.puzzle.ring_count, self.controller.puzzle.slot_count
        )
        self.screen = pygame.display.set_mode(geometry.window)
        self.ui = RingLockUI(self.controller, surface=pygame.Surface(geometry.window))
        pygame.display.set_caption(f"Ring Lock - {config.name or name}")

    def cycle_puzzle(self, direction: int) -> None:
        self.puzzle_index = (self.puzzle_index + direction) % len(self.puzzle_names)
        self.load_puzzle(self.puzzle_names[self.puzzle_index])

    def on_transition(self, transition: Transition) -> None:
        if transition.rotated and self.rotate_sound is not None:
            self.rotate_sound.play()
        if transition.focus_changed and self.jump_sound is not None:
            self.jump_sound.play()
        if transition.became_solved:
            logger.info("Lock opened")
            if self.solved_sound is not None:
                self.solved_sound.play()

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------
    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.QUIT:
            raise SystemExit
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                raise SystemExit
            if event.key == pygame.K_r:
                self.controller.reset()
                return
            if event.key == pygame.K_n:
                self.cycle_puzzle(1)
                return
            if event.key == pygame.K_p:
                self.cycle_puzzle(-1)
                return
        self.ui.process_events([event])

    def draw(self) -> None:
        surface = self.ui.render()
        self.screen.blit(surface, (0, 0))
        pygame.display.flip()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        while True:
            for event in pygame.event.get():
                try:
                    self.handle_event(event)
                except SystemExit:
                    pygame.quit()
                    return
            self.draw()
            self.clock.tick(60)


def run(puzzle_name: Optional[str] = None) -> None:
    """Entry point helper that instantiates and runs the UI."""

    app = RingLockApp(puzzle_name=puzzle_name)
    app.run()


def bootstrap_directories() -> UIDirectories:
    """Return resolved directories and print a short bootstrap message."""

    directories = resolve_directories()
    message = (
        "Ring Lock UI bootstrap\n"
        f"  puzzles: {directories.puzzle_root}\n"
        f"Set {PUZZLE_ENV_VAR} to point to a custom puzzle directory if needed."
    )
    print(message)
    return directories


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ring Lock UI launcher")
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print resolved resource directories and exit without launching the UI.",
    )
    parser.add_argument(
        "--list-puzzles",
        action="store_true",
        help="List the puzzles found in the puzzle directory and exit.",
    )
    parser.add_argument("--puzzle", help="Name of the puzzle to open first.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    directories = bootstrap_directories()
    if args.info:
        return 0
    if args.list_puzzles:
        print("Available puzzles:")
        for name in PuzzleLoader(directories.puzzle_root).available():
            print(f"  {name}")
        return 0
    run(args.puzzle)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    raise SystemExit(main())
