"""Source RCON transport backed by the ``rcon`` library.

Byte-level framing, request ids and authentication packets are handled by
``rcon.source.Client``; this module only maps its lifecycle and failures onto
the console session boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from rcon.exceptions import WrongPassword
from rcon.source import Client

from mc_console.adapters.console_transport import ConsoleSession
from mc_console.errors import ConsoleConnectionError


@dataclass(slots=True)
class RconSession(ConsoleSession):
    """Authenticated ``rcon`` client wrapped as a console session."""

    client: Client
    encoding: str = "utf-8"

    def send(self, command: str) -> str:
        response = self.client.run(command, encoding=self.encoding)
        return "" if response is None else str(response)

    def close(self) -> None:
        self.client.close()


@dataclass(slots=True)
class RconTransport:
    """Opens Source RCON sessions (Minecraft, Valve and compatible servers)."""

    encoding: str = "utf-8"

    def connect(self, host: str, port: int, password: str, timeout: float) -> RconSession:
        client = Client(host, port, timeout=timeout, passwd=password)
        try:
            client.connect(login=True)
        except WrongPassword:
            client.close()
            raise ConsoleConnectionError(f"RCON authentication rejected by {host}:{port}") from None
        except OSError as exc:
            client.close()
            raise ConsoleConnectionError(
                f"Unable to reach RCON at {host}:{port}: {type(exc).__name__}"
            ) from exc
        except Exception as exc:  # noqa: BLE001 - rcon raises its own non-OSError errors mid-handshake.
            client.close()
            raise ConsoleConnectionError(
                f"RCON handshake with {host}:{port} failed: {type(exc).__name__}"
            ) from exc
        return RconSession(client=client, encoding=self.encoding)
