"""User interface package for the ring lock."""

from .main import (
    PUZZLE_ENV_VAR,
    RingLockApp,
    UIDirectories,
    bootstrap_directories,
    main,
    resolve_directories,
    run,
)
from .toolkit import RingLockUI

__all__ = [
    "PUZZLE_ENV_VAR",
    "UIDirectories",
    "RingLockApp",
    "RingLockUI",
    "bootstrap_directories",
    "main",
    "resolve_directories",
    "run",
]
