"""Error taxonomy for the remote-console client."""

from __future__ import annotations

from enum import Enum


class ConsoleError(Exception):
    """Base class for every error raised by mc-console."""


class ConfigurationError(ConsoleError):
    """Raised when credentials or tunables are missing or malformed. Never retried."""


class ConsoleConnectionError(ConsoleError, ConnectionError):
    """Raised when the transport or authentication handshake fails."""


class InvalidArgumentError(ConsoleError, ValueError):
    """Raised when a typed command argument cannot be formatted safely."""


class CommandErrorKind(str, Enum):
    """Failure categories for a command sent through a session."""

    TIMEOUT = "timeout"
    TRANSPORT = "transport"
    RETRY_EXHAUSTED = "retry_exhausted"


class CommandError(ConsoleError):
    """A command could not be delivered or answered."""

    def __init__(
        self,
        kind: CommandErrorKind,
        operation: str,
        detail: str,
        *,
        first_error: BaseException | None = None,
    ) -> None:
        super().__init__(f"{operation}: {kind.value}: {detail}")
        self.kind = kind
        self.operation = operation
        self.detail = detail
        self.first_error = first_error
