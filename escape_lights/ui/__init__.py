"""User interface package for the escape room."""

from .main import (
    INSTRUCTIONS,
    LEVEL_ENV_VAR,
    EscapeGameApp,
    UIDirectories,
    main,
    resolve_directories,
    run,
    run_text_session,
)
from .toolkit import EscapeGameUI

__all__ = [
    "INSTRUCTIONS",
    "LEVEL_ENV_VAR",
    "UIDirectories",
    "EscapeGameApp",
    "EscapeGameUI",
    "main",
    "resolve_directories",
    "run",
    "run_text_session",
]
