"""Remote-console client for administering game servers over RCON."""

from .actions import ConsoleActions
from .commands import Command
from .config import Credentials, SessionReuse, Settings, load_settings
from .errors import (
    CommandError,
    CommandErrorKind,
    ConfigurationError,
    ConsoleConnectionError,
    ConsoleError,
    InvalidArgumentError,
)
from .schemas import ActionResult
from .session import SessionManager, SessionScope

__all__ = [
    "ActionResult",
    "Command",
    "CommandError",
    "CommandErrorKind",
    "ConfigurationError",
    "ConsoleActions",
    "ConsoleConnectionError",
    "ConsoleError",
    "Credentials",
    "InvalidArgumentError",
    "SessionManager",
    "SessionReuse",
    "SessionScope",
    "Settings",
    "load_settings",
]
