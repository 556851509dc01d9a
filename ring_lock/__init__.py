"""Ring Lock package."""

from .game import (
    Command,
    ConfigurationError,
    PuzzleLoader,
    PuzzleState,
    RotationController,
    apply_command,
    derive_view,
    initialize,
)
from .ui import RingLockUI

__all__ = [
    "Command",
    "ConfigurationError",
    "PuzzleLoader",
    "PuzzleState",
    "RotationController",
    "RingLockUI",
    "apply_command",
    "derive_view",
    "initialize",
]
