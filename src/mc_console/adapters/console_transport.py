"""Boundary for remote-console transport integrations."""

from typing import Protocol


class ConsoleSession(Protocol):
    """One authenticated connection to a game server console."""

    def send(self, command: str) -> str:
        """Send a command and return the server's raw text response."""

    def close(self) -> None:
        """Release the underlying connection."""


class ConsoleTransport(Protocol):
    """Factory for authenticated console sessions."""

    def connect(self, host: str, port: int, password: str, timeout: float) -> ConsoleSession:
        """Open and authenticate a session, raising on handshake failure."""
