"""Layout constants and geometry helpers for the ring lock UI."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from ..game import LaserBeamEnd

# Ring metrics
INNER_RADIUS: int = 100
RING_SPACING: int = 50
ITEM_RADIUS: int = 16
RECEPTOR_GAP: int = 36
RECEPTOR_LENGTH: int = 48
BOARD_OUTER_PADDING: int = 32

# Status panel metrics
STATUS_HEIGHT: int = 72

# Colors expressed as RGB tuples
BACKGROUND_COLOR: Tuple[int, int, int] = (12, 14, 26)
RING_COLOR: Tuple[int, int, int] = (110, 110, 120)
FOCUSED_RING_COLOR: Tuple[int, int, int] = (255, 210, 64)
LASER_LIT_COLOR: Tuple[int, int, int] = (60, 200, 90)
LASER_BLOCKED_COLOR: Tuple[int, int, int] = (220, 60, 60)
BLOCKER_COLOR: Tuple[int, int, int] = (128, 128, 128)
BEAM_COLOR: Tuple[int, int, int] = (255, 200, 40)
RECEPTOR_LIT_COLOR: Tuple[int, int, int] = (140, 255, 180)
RECEPTOR_UNLIT_COLOR: Tuple[int, int, int] = (70, 40, 50)
TEXT_COLOR: Tuple[int, int, int] = (232, 236, 244)

BEAM_WIDTH: int = 4

# Rendering order for composed scenes
DRAW_ORDER = ("rings", "beams", "items", "receptors", "status")


@dataclass(frozen=True)
class RingGeometry:
    """Pixel geometry of the concentric rings."""

    center: Tuple[int, int]
    ring_radii: Tuple[int, ...]
    boundary_radius: int
    slot_count: int
    window: Tuple[int, int]

    @property
    def slot_angle(self) -> float:
        return 2 * math.pi / self.slot_count

    def slot_to_point(self, radius: float, slot: float) -> Tuple[int, int]:
        """Pixel position of ``slot`` at ``radius``; slot 0 points left, slots run clockwise."""

        angle = math.pi + slot * self.slot_angle
        x = self.center[0] + radius * math.cos(angle)
        y = self.center[1] + radius * math.sin(angle)
        return int(round(x)), int(round(y))

    def beam_endpoints(
        self, laser_ring: int, slot: int, end: LaserBeamEnd
    ) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """Start and stop pixels of a beam fired from ``slot`` on ``laser_ring``."""

        start = self.slot_to_point(self.ring_radii[laser_ring], slot)
        if end.terminating_ring >= len(self.ring_radii):
            stop = self.slot_to_point(self.boundary_radius, slot + self.slot_count // 2)
        elif end.blocked_on_near_side:
            stop = self.slot_to_point(self.ring_radii[end.terminating_ring], slot)
        else:
            stop = self.slot_to_point(
                self.ring_radii[end.terminating_ring], slot + self.slot_count // 2
            )
        return start, stop


def compute_geometry(ring_count: int, slot_count: int) -> RingGeometry:
    """Compute ring radii and window size for a puzzle."""

    ring_radii = tuple(INNER_RADIUS + index * RING_SPACING for index in range(ring_count))
    boundary_radius = ring_radii[-1] + RECEPTOR_GAP
    outer = boundary_radius + RECEPTOR_LENGTH + BOARD_OUTER_PADDING

    window_width = outer * 2
    window_height = outer * 2 + STATUS_HEIGHT

    return RingGeometry(
        center=(outer, outer),
        ring_radii=ring_radii,
        boundary_radius=boundary_radius,
        slot_count=slot_count,
        window=(window_width, window_height),
    )
