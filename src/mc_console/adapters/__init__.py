"""Console transport adapters (e.g., Source RCON)."""

from .console_transport import ConsoleSession, ConsoleTransport
from .rcon_transport import RconSession, RconTransport

__all__ = [
    "ConsoleSession",
    "ConsoleTransport",
    "RconSession",
    "RconTransport",
]
