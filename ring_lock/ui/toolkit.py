"""Minimal pygame based UI helpers for headless testing.

This module keeps the rendering deterministic so it can be exercised in
automated tests using the SDL ``dummy`` video driver.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, List, Optional, Tuple

from ..game import Command, ItemKind, RotationController, Transition
from . import layout


# Pygame is optional for the library but required for the UI helpers.  The
# import is performed lazily in ``ensure_pygame`` so test environments can
# control the SDL configuration (e.g. select the ``dummy`` video driver).
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


def key_bindings() -> Dict[int, Command]:
    """Arrow keys and WASD mapped onto the four puzzle commands."""

    pygame = ensure_pygame()
    return {
        pygame.K_UP: Command.JUMP_IN,
        pygame.K_w: Command.JUMP_IN,
        pygame.K_DOWN: Command.JUMP_OUT,
        pygame.K_s: Command.JUMP_OUT,
        pygame.K_LEFT: Command.ROTATE_LEFT,
        pygame.K_a: Command.ROTATE_LEFT,
        pygame.K_RIGHT: Command.ROTATE_RIGHT,
        pygame.K_d: Command.ROTATE_RIGHT,
    }


class RingLockUI:
    """Very small pygame driven UI wrapper used for automated tests."""

    def __init__(
        self,
        controller: RotationController,
        *,
        surface=None,
        use_display: bool = False,
    ) -> None:
        pygame = ensure_pygame()
        self.controller = controller
        puzzle = controller.puzzle
        self.geometry = layout.compute_geometry(puzzle.ring_count, puzzle.slot_count)
        self.surface = surface or pygame.Surface(self.geometry.window)
        self.screen = None
        if use_display:
            self.screen = pygame.display.set_mode(self.geometry.window)
        self.bindings = key_bindings()
        # Fonts are initialised with the default pygame font to keep rendering
        # deterministic across environments.
        self.font = pygame.font.Font(pygame.font.get_default_font(), 16)

    # ------------------------------------------------------------------
    # Input handling
    def command_for_event(self, event: object) -> Optional[Command]:
        pygame = ensure_pygame()
        if getattr(event, "type", None) != pygame.KEYDOWN:
            return None
        return self.bindings.get(getattr(event, "key", None))

    def process_events(self, events: Iterable[object]) -> List[Transition]:
        transitions: List[Transition] = []
        for event in events:
            command = self.command_for_event(event)
            if command is not None:
                transitions.append(self.controller.dispatch(command))
        return transitions

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        pygame = ensure_pygame()
        self.surface.fill(layout.BACKGROUND_COLOR)
        for layer in layout.DRAW_ORDER:
            getattr(self, f"_draw_{layer}")()
        if self.screen:
            self.screen.blit(self.surface, (0, 0))
            pygame.display.flip()
        return self.surface

    def _draw_rings(self) -> None:
        pygame = ensure_pygame()
        focused = self.controller.state.focused_ring
        for index, radius in enumerate(self.geometry.ring_radii):
            color = layout.FOCUSED_RING_COLOR if index == focused else layout.RING_COLOR
            pygame.draw.circle(self.surface, color, self.geometry.center, radius, 2)

    def _draw_beams(self) -> None:
        pygame = ensure_pygame()
        state = self.controller.state
        for ring_index, ends in enumerate(state.beam_ends):
            for slot, end in ends.items():
                start, stop = self.geometry.beam_endpoints(
                    ring_index, state.rotated_slot(ring_index, slot), end
                )
                pygame.draw.line(self.surface, layout.BEAM_COLOR, start, stop, layout.BEAM_WIDTH)

    def _draw_items(self) -> None:
        pygame = ensure_pygame()
        state = self.controller.state
        ring_count = state.puzzle.ring_count
        for ring_index, ring in enumerate(state.puzzle.rings):
            radius = self.geometry.ring_radii[ring_index]
            for slot, kind in ring.items.items():
                position = self.geometry.slot_to_point(radius, state.rotated_slot(ring_index, slot))
                if kind is ItemKind.LASER:
                    end = state.beam_ends[ring_index][slot]
                    color = (
                        layout.LASER_LIT_COLOR
                        if end.reaches_boundary(ring_count)
                        else layout.LASER_BLOCKED_COLOR
                    )
                else:
                    color = layout.BLOCKER_COLOR
                pygame.draw.circle(self.surface, color, position, layout.ITEM_RADIUS)

    def _draw_receptors(self) -> None:
        pygame = ensure_pygame()
        inner = self.geometry.boundary_radius
        outer = inner + layout.RECEPTOR_LENGTH
        for slot, lit in self.controller.state.receptors.items():
            color = layout.RECEPTOR_LIT_COLOR if lit else layout.RECEPTOR_UNLIT_COLOR
            start = self.geometry.slot_to_point(inner, slot)
            end = self.geometry.slot_to_point(outer, slot)
            pygame.draw.line(self.surface, color, start, end, 10)

    def _draw_status(self) -> None:
        state = self.controller.state
        if state.solved:
            text = "Unlocked!"
        else:
            lit = sum(1 for value in state.receptors.values() if value)
            text = f"Ring {state.focused_ring}  -  {lit}/{len(state.receptors)} receptors lit"
        self._draw_text(text, (self.geometry.center[0], self.geometry.window[1] - layout.STATUS_HEIGHT // 2))

    def _draw_text(self, text: str, center: Tuple[int, int]) -> None:
        label = self.font.render(text, True, layout.TEXT_COLOR)
        rect = label.get_rect()
        rect.center = center
        self.surface.blit(label, rect)


__all__ = ["RingLockUI", "ensure_pygame", "key_bindings"]
