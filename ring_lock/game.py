"""Core puzzle logic for the rotating ring lock."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)


logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a puzzle definition cannot be turned into a valid puzzle."""


class ItemKind(Enum):
    """Items that can be mounted on a ring slot."""

    LASER = "laser"
    BLOCKER = "blocker"

    @staticmethod
    def from_name(name: Union[str, "ItemKind"]) -> "ItemKind":
        if isinstance(name, ItemKind):
            return name
        try:
            return ItemKind[str(name).upper()]
        except KeyError as exc:
            raise ConfigurationError(f"Unknown item kind: {name}") from exc


class Command(Enum):
    """Player commands understood by the rotation controller."""

    ROTATE_LEFT = "rotate_left"
    ROTATE_RIGHT = "rotate_right"
    JUMP_IN = "jump_in"
    JUMP_OUT = "jump_out"

    @property
    def is_rotation(self) -> bool:
        return self in (Command.ROTATE_LEFT, Command.ROTATE_RIGHT)


ROTATION_STEPS = {Command.ROTATE_LEFT: -1, Command.ROTATE_RIGHT: 1}


def rotate_slot(slot: int, offset: int, slot_count: int) -> int:
    return ((slot + offset) % slot_count + slot_count) % slot_count


def opposite_slot(slot: int, slot_count: int) -> int:
    return rotate_slot(slot, slot_count // 2, slot_count)


@dataclass(frozen=True)
class LaserBeamEnd:
    """Where a single laser beam stops.

    ``terminating_ring`` equals the ring count when nothing blocks the beam
    and it reaches the outer boundary.
    """

    terminating_ring: int
    blocked_on_near_side: bool = False

    def reaches_boundary(self, ring_count: int) -> bool:
        return self.terminating_ring == ring_count


@dataclass(frozen=True)
class RingLayout:
    """Static item placement of one ring, keyed by unrotated slot."""

    items: Mapping[int, ItemKind] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {slot: ItemKind.from_name(kind) for slot, kind in self.items.items()}
        object.__setattr__(self, "items", MappingProxyType(dict(sorted(frozen.items()))))

    def __iter__(self) -> Iterator[int]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def get(self, slot: int) -> Optional[ItemKind]:
        return self.items.get(slot)

    def lasers(self) -> List[int]:
        return [slot for slot, kind in self.items.items() if kind is ItemKind.LASER]

    def blockers(self) -> List[int]:
        return [slot for slot, kind in self.items.items() if kind is ItemKind.BLOCKER]


@dataclass(frozen=True)
class Puzzle:
    """Validated, immutable puzzle definition."""

    slot_count: int
    rings: Tuple[RingLayout, ...]
    receptor_slots: Tuple[int, ...]
    name: str = ""

    @property
    def ring_count(self) -> int:
        return len(self.rings)

    def rotate(self, slot: int, offset: int) -> int:
        return rotate_slot(slot, offset, self.slot_count)

    def opposite(self, slot: int) -> int:
        return opposite_slot(slot, self.slot_count)

    @property
    def metadata(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "slots": self.slot_count,
            "rings": self.ring_count,
            "lasers": sum(len(ring.lasers()) for ring in self.rings),
            "blockers": sum(len(ring.blockers()) for ring in self.rings),
            "receptors": len(self.receptor_slots),
        }


@dataclass
class PuzzleConfig:
    """Unvalidated puzzle definition as written by a level designer."""

    slot_count: int
    ring_layouts: List[Mapping[int, Union[ItemKind, str]]]
    receptor_slots: List[int]
    initial_rotations: Optional[List[int]] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "PuzzleConfig":
        try:
            layouts = [
                {_slot_key(slot): kind for slot, kind in dict(layout).items()}
                for layout in data["ring_layouts"]  # type: ignore[union-attr]
            ]
            rotations = data.get("initial_rotations")
            return cls(
                slot_count=data["slot_count"],  # type: ignore[arg-type]
                ring_layouts=layouts,
                receptor_slots=list(data["receptor_slots"]),  # type: ignore[call-overload]
                initial_rotations=(
                    list(rotations)  # type: ignore[call-overload]
                    if rotations is not None
                    else None
                ),
                name=str(data.get("name", "")),
            )
        except KeyError as exc:
            raise ConfigurationError(f"Missing puzzle field: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed puzzle definition: {exc}") from exc


def _slot_key(slot: object) -> object:
    """JSON object keys arrive as strings; anything else is validated later."""

    if isinstance(slot, str):
        try:
            return int(slot.strip())
        except ValueError as exc:
            raise ConfigurationError(f"Slot key must be an integer, got {slot!r}") from exc
    return slot


def _check_slot(slot: int, slot_count: int, what: str) -> int:
    if isinstance(slot, bool) or not isinstance(slot, int):
        raise ConfigurationError(f"{what} must be an integer, got {slot!r}")
    if not 0 <= slot < slot_count:
        raise ConfigurationError(f"{what} {slot} outside [0, {slot_count})")
    return slot


def build_puzzle(config: PuzzleConfig) -> Puzzle:
    slot_count = config.slot_count
    if isinstance(slot_count, bool) or not isinstance(slot_count, int):
        raise ConfigurationError(f"Slot count must be an integer, got {slot_count!r}")
    if slot_count <= 0 or slot_count % 2:
        raise ConfigurationError(f"Slot count must be positive and even, got {slot_count}")
    if not config.ring_layouts:
        raise ConfigurationError("A puzzle needs at least one ring")

    rings = []
    for index, layout in enumerate(config.ring_layouts):
        for slot in layout:
            _check_slot(slot, slot_count, f"Ring {index} slot")
        rings.append(RingLayout(layout))

    receptors = sorted(
        {_check_slot(slot, slot_count, "Receptor slot") for slot in config.receptor_slots}
    )
    return Puzzle(
        slot_count=slot_count,
        rings=tuple(rings),
        receptor_slots=tuple(receptors),
        name=config.name,
    )


BeamEnds = Tuple[Mapping[int, LaserBeamEnd], ...]


@dataclass(frozen=True)
class DerivedView:
    """Everything a front-end needs to draw the current puzzle."""

    beam_ends: BeamEnds
    receptors: Mapping[int, bool]
    solved: bool


@dataclass(frozen=True)
class PuzzleState:
    """Immutable snapshot of one puzzle session.

    ``beam_ends`` and ``receptors`` are derived from ``puzzle`` and
    ``rotations`` and are carried along so focus changes can reuse them.
    """

    puzzle: Puzzle
    rotations: Tuple[int, ...]
    focused_ring: int
    beam_ends: BeamEnds
    receptors: Mapping[int, bool]
    solved: bool = False

    def normalised_rotations(self) -> Tuple[int, ...]:
        return tuple(value % self.puzzle.slot_count for value in self.rotations)

    def rotated_slot(self, ring_index: int, slot: int) -> int:
        return self.puzzle.rotate(slot, self.rotations[ring_index])


def resolve_beam(
    puzzle: Puzzle,
    rotations: Sequence[int],
    laser_ring: int,
    laser_slot: int,
) -> LaserBeamEnd:
    """Find where the beam of the laser at rotated ``laser_slot`` stops."""

    blocked_on_near_side = False
    blocking_ring = puzzle.ring_count

    for ring_index, ring in enumerate(puzzle.rings):
        if ring_index == laser_ring:
            continue
        rotation = rotations[ring_index]
        for slot in ring:
            rotated = puzzle.rotate(slot, rotation)
            # Rings with a lower index than the laser sit between it and the center.
            if ring_index < laser_ring and rotated == laser_slot:
                blocked_on_near_side = True
                blocking_ring = ring_index
            if (
                not blocked_on_near_side
                and ring_index < blocking_ring
                and puzzle.opposite(rotated) == laser_slot
            ):
                blocking_ring = ring_index

    return LaserBeamEnd(blocking_ring, blocked_on_near_side)


def resolve_all_beams(puzzle: Puzzle, rotations: Sequence[int]) -> BeamEnds:
    resolved = []
    for ring_index, ring in enumerate(puzzle.rings):
        ends = {
            slot: resolve_beam(
                puzzle,
                rotations,
                ring_index,
                puzzle.rotate(slot, rotations[ring_index]),
            )
            for slot in ring.lasers()
        }
        resolved.append(MappingProxyType(ends))
    return tuple(resolved)


def iter_laser_beams(
    puzzle: Puzzle, rotations: Sequence[int], beam_ends: BeamEnds
) -> Iterator[Tuple[int, LaserBeamEnd]]:
    """Yield ``(rotated_slot, beam_end)`` for every laser on every ring."""

    for ring_index, ends in enumerate(beam_ends):
        for slot, end in ends.items():
            yield puzzle.rotate(slot, rotations[ring_index]), end


def evaluate_receptors(
    beams: Iterable[Tuple[int, LaserBeamEnd]],
    receptor_slots: Iterable[int],
    slot_count: int,
    ring_count: int,
) -> Dict[int, bool]:
    """Map every receptor slot to whether an unobstructed beam lands on it."""

    lit_sources = {
        slot for slot, end in beams if end.reaches_boundary(ring_count)
    }
    return {
        receptor: opposite_slot(receptor, slot_count) in lit_sources
        for receptor in receptor_slots
    }


def is_solved(receptors: Mapping[int, bool]) -> bool:
    return all(receptors.values())


def _derive(
    puzzle: Puzzle, rotations: Tuple[int, ...]
) -> Tuple[BeamEnds, Mapping[int, bool], bool]:
    beam_ends = resolve_all_beams(puzzle, rotations)
    receptors = evaluate_receptors(
        iter_laser_beams(puzzle, rotations, beam_ends),
        puzzle.receptor_slots,
        puzzle.slot_count,
        puzzle.ring_count,
    )
    logger.debug("Re-derived beams for rotations %s: %s", rotations, receptors)
    return beam_ends, MappingProxyType(receptors), is_solved(receptors)


def initialize(config: Union[PuzzleConfig, Mapping[str, object]]) -> PuzzleState:
    """Validate ``config`` and create the opening state of a session."""

    if not isinstance(config, PuzzleConfig):
        config = PuzzleConfig.from_dict(config)
    puzzle = build_puzzle(config)

    if config.initial_rotations is None:
        rotations = (0,) * puzzle.ring_count
    else:
        if len(config.initial_rotations) != puzzle.ring_count:
            raise ConfigurationError(
                f"Expected {puzzle.ring_count} initial rotations, "
                f"got {len(config.initial_rotations)}"
            )
        for value in config.initial_rotations:
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"Rotation must be an integer, got {value!r}")
        rotations = tuple(config.initial_rotations)

    beam_ends, receptors, solved = _derive(puzzle, rotations)
    return PuzzleState(
        puzzle=puzzle,
        rotations=rotations,
        focused_ring=puzzle.ring_count - 1,
        beam_ends=beam_ends,
        receptors=receptors,
        solved=solved,
    )


def apply_command(state: PuzzleState, command: Command) -> PuzzleState:
    """Return the state that follows ``command``; ``state`` is left untouched."""

    if state.solved:
        logger.debug("Puzzle solved, ignoring %s", command.name)
        return state

    if command.is_rotation:
        rotations = list(state.rotations)
        rotations[state.focused_ring] += ROTATION_STEPS[command]
        rotations = tuple(rotations)
        beam_ends, receptors, solved = _derive(state.puzzle, rotations)
        if solved:
            logger.info("Puzzle %r solved with rotations %s", state.puzzle.name, rotations)
        return replace(
            state,
            rotations=rotations,
            beam_ends=beam_ends,
            receptors=receptors,
            solved=solved,
        )

    if command is Command.JUMP_IN:
        focus = max(state.focused_ring - 1, 0)
    else:
        focus = min(state.focused_ring + 1, state.puzzle.ring_count - 1)
    if focus == state.focused_ring:
        return state
    # Rotations are untouched, so the derived beams carry over as-is.
    logger.debug("Focus moved to ring %d, reusing beam ends", focus)
    return replace(state, focused_ring=focus)


def derive_view(state: PuzzleState) -> DerivedView:
    return DerivedView(
        beam_ends=state.beam_ends,
        receptors=state.receptors,
        solved=state.solved,
    )


@dataclass(frozen=True)
class Transition:
    """Record of one dispatched command, handed to observers."""

    command: Command
    previous: PuzzleState
    current: PuzzleState

    @property
    def ignored(self) -> bool:
        return self.current is self.previous

    @property
    def rotated(self) -> bool:
        return self.current.rotations != self.previous.rotations

    @property
    def focus_changed(self) -> bool:
        return self.current.focused_ring != self.previous.focused_ring

    @property
    def became_solved(self) -> bool:
        return self.current.solved and not self.previous.solved


Observer = Callable[[Transition], None]


class RotationController:
    """Stateful session wrapper that front-ends drive with commands."""

    def __init__(self, config: Union[PuzzleConfig, Mapping[str, object]]):
        if not isinstance(config, PuzzleConfig):
            config = PuzzleConfig.from_dict(config)
        self.config = config
        self.observers: List[Observer] = []
        self.reset()

    def reset(self) -> None:
        self.state = initialize(self.config)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self.observers.append(observer)

        def unsubscribe() -> None:
            if observer in self.observers:
                self.observers.remove(observer)

        return unsubscribe

    @property
    def puzzle(self) -> Puzzle:
        return self.state.puzzle

    @property
    def view(self) -> DerivedView:
        return derive_view(self.state)

    @property
    def solved(self) -> bool:
        return self.state.solved

    def dispatch(self, command: Command) -> Transition:
        previous = self.state
        self.state = apply_command(previous, command)
        transition = Transition(command=command, previous=previous, current=self.state)
        for observer in list(self.observers):
            observer(transition)
        return transition

    def rotate_left(self) -> Transition:
        return self.dispatch(Command.ROTATE_LEFT)

    def rotate_right(self) -> Transition:
        return self.dispatch(Command.ROTATE_RIGHT)

    def jump_in(self) -> Transition:
        return self.dispatch(Command.JUMP_IN)

    def jump_out(self) -> Transition:
        return self.dispatch(Command.JUMP_OUT)


class PuzzleLoader:
    """Load puzzle definitions stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def available(self) -> List[str]:
        return sorted(path.stem for path in self.root.glob("*.json"))

    def load(self, name: str) -> PuzzleConfig:
        path = self.root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{path} is not valid JSON: {exc}") from exc
        config = self._parse_puzzle(data)
        logger.info("Loaded puzzle %r from %s", config.name, path)
        return config

    def _parse_puzzle(self, data: Dict) -> PuzzleConfig:
        try:
            layouts: List[Dict[int, ItemKind]] = []
            for ring in data["rings"]:
                layout: Dict[int, ItemKind] = {}
                for item in ring:
                    slot = _slot_key(item["slot"])
                    if slot in layout:
                        raise ConfigurationError(f"Slot {slot} used twice on one ring")
                    layout[slot] = ItemKind.from_name(item.get("type", "blocker"))
                layouts.append(layout)
            rotations = data.get("initial_rotations")
            return PuzzleConfig(
                slot_count=data["slot_count"],
                ring_layouts=layouts,
                receptor_slots=list(data.get("receptors", [])),
                initial_rotations=(
                    list(rotations) if rotations is not None else None
                ),
                name=data.get("name", ""),
            )
        except ConfigurationError:
            raise
        except KeyError as exc:
            raise ConfigurationError(f"Missing puzzle field: {exc.args[0]}") from exc
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"Malformed puzzle definition: {exc}") from exc


def default_puzzle_root() -> Path:
    return Path(__file__).resolve().parent / "puzzles"
