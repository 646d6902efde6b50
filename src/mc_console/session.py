"""Session lifecycle and retry policy for the remote console.

A :class:`SessionManager` owns at most one authenticated transport session.
Commands are serialized through it, raced against a timeout and retried once
on a fresh session after any failure. Whether the session outlives a call is
decided by :class:`~mc_console.config.SessionReuse`.
"""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator, Callable

from mc_console import commands
from mc_console.adapters import ConsoleSession, ConsoleTransport
from mc_console.commands import Command, GameMode, TimePreset, Weather, WhitelistAction
from mc_console.config import Credentials, SessionReuse, Settings
from mc_console.errors import (
    CommandError,
    CommandErrorKind,
    ConfigurationError,
    ConsoleConnectionError,
)


class SessionManager:
    """Serializes commands over one reusable, freshness-checked console session."""

    def __init__(
        self,
        transport: ConsoleTransport,
        credentials: Credentials,
        *,
        reuse: SessionReuse = SessionReuse.FRESHNESS,
        freshness_window_seconds: float = 15.0,
        command_timeout_seconds: float = 5.0,
        connect_timeout_seconds: float = 5.0,
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        if not isinstance(credentials, Credentials):
            raise ConfigurationError("SessionManager requires validated Credentials")
        self._transport = transport
        self._credentials = credentials
        self._reuse = SessionReuse(reuse)
        self._freshness_window_seconds = freshness_window_seconds
        self._command_timeout_seconds = command_timeout_seconds
        self._connect_timeout_seconds = connect_timeout_seconds
        self._clock = clock
        self._logger = logger or logging.getLogger("mc_console.session")

        self._session: ConsoleSession | None = None
        self._last_used: float = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, transport: ConsoleTransport, **kwargs) -> SessionManager:
        return cls(
            transport,
            settings.credentials,
            reuse=settings.session_reuse,
            freshness_window_seconds=settings.freshness_window_seconds,
            command_timeout_seconds=settings.command_timeout_seconds,
            connect_timeout_seconds=settings.connect_timeout_seconds,
            **kwargs,
        )

    @property
    def reuse(self) -> SessionReuse:
        return self._reuse

    @property
    def has_session(self) -> bool:
        return self._session is not None

    async def ensure_session(self) -> None:
        """Open a session if none exists or the current one has gone stale."""
        async with self._lock:
            await self._ensure()

    async def close_session(self) -> None:
        """Close the current session, if any. Safe to call repeatedly."""
        async with self._lock:
            self._close()

    async def execute(self, command: Command) -> str:
        """Send ``command`` and return the raw response, retrying once on failure."""
        async with self._lock:
            try:
                return await self._execute(command)
            except asyncio.CancelledError:
                self._close()
                raise
            finally:
                if self._reuse is SessionReuse.NONE:
                    self._close()

    async def _execute(self, command: Command) -> str:
        try:
            await self._ensure()
            response = await self._send_with_timeout(command)
        except ConfigurationError:
            raise
        except Exception as exc:  # noqa: BLE001 - every delivery failure gets one retry.
            first_error = self._as_command_error(exc, command)
            self._logger.warning(
                "command_failed",
                extra={"operation": command.operation, "attempt": 1, "error_kind": _kind_of(first_error)},
            )
            self._close()
            response = await self._retry(command, first_error)

        self._last_used = self._clock()
        self._logger.debug("command_succeeded", extra={"operation": command.operation})
        return response

    async def _retry(self, command: Command, first_error: Exception) -> str:
        try:
            await self._ensure()
            # Bounded only by the transport's own socket timeout.
            return await asyncio.to_thread(self._session.send, command.text)
        except ConfigurationError:
            raise
        except Exception as exc:  # noqa: BLE001
            self._close()
            self._logger.error(
                "command_retry_exhausted",
                extra={"operation": command.operation, "attempt": 2, "error": type(exc).__name__},
            )
            raise CommandError(
                CommandErrorKind.RETRY_EXHAUSTED,
                command.operation,
                f"failed after one retry: {type(exc).__name__}",
                first_error=first_error,
            ) from exc

    async def _ensure(self) -> None:
        if self._session is not None:
            idle = self._clock() - self._last_used
            if idle <= self._freshness_window_seconds:
                return
            self._logger.info("session_stale", extra={"idle_seconds": round(idle, 3)})
            self._close()

        host, port = self._credentials.host, self._credentials.port
        handshake = _Handshake(
            partial(self._transport.connect, host, port, self._credentials.password, self._connect_timeout_seconds),
            self._logger,
        )
        try:
            session = await asyncio.wait_for(
                asyncio.to_thread(handshake.run),
                timeout=self._connect_timeout_seconds,
            )
        except asyncio.CancelledError:
            handshake.abandon()
            raise
        except asyncio.TimeoutError:
            handshake.abandon()
            self._logger.warning("session_connect_timeout", extra={"host": host, "port": port})
            raise ConsoleConnectionError(
                f"RCON handshake with {host}:{port} timed out after {self._connect_timeout_seconds}s"
            ) from None
        except ConsoleConnectionError:
            self._logger.warning("session_connect_failed", extra={"host": host, "port": port})
            raise
        except Exception as exc:  # noqa: BLE001 - transports may raise anything on handshake.
            self._logger.warning(
                "session_connect_failed", extra={"host": host, "port": port, "error": type(exc).__name__}
            )
            raise ConsoleConnectionError(f"RCON handshake with {host}:{port} failed: {type(exc).__name__}") from exc

        self._session = session
        self._last_used = self._clock()
        self._logger.info("session_opened", extra={"host": host, "port": port})

    async def _send_with_timeout(self, command: Command) -> str:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._session.send, command.text),
                timeout=self._command_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._logger.warning("command_timeout", extra={"operation": command.operation})
            raise CommandError(
                CommandErrorKind.TIMEOUT,
                command.operation,
                f"timed out after {self._command_timeout_seconds}s",
            ) from None

    def _close(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            _close_quietly(session, self._logger, "session_closed")

    @staticmethod
    def _as_command_error(exc: Exception, command: Command) -> Exception:
        if isinstance(exc, (CommandError, ConsoleConnectionError)):
            return exc
        error = CommandError(CommandErrorKind.TRANSPORT, command.operation, type(exc).__name__)
        error.__cause__ = exc
        return error

    # Convenience wrappers, one per console operation.

    async def broadcast(self, message: str) -> str:
        return await self.execute(commands.broadcast(message))

    async def say(self, message: str) -> str:
        return await self.execute(commands.say(message))

    async def kick(self, player: str, reason: str | None = None) -> str:
        return await self.execute(commands.kick(player, reason))

    async def ban(self, player: str, reason: str | None = None) -> str:
        return await self.execute(commands.ban(player, reason))

    async def ban_ip(self, address: str, reason: str | None = None) -> str:
        return await self.execute(commands.ban_ip(address, reason))

    async def pardon(self, player: str) -> str:
        return await self.execute(commands.pardon(player))

    async def pardon_ip(self, address: str) -> str:
        return await self.execute(commands.pardon_ip(address))

    async def op(self, player: str) -> str:
        return await self.execute(commands.op(player))

    async def deop(self, player: str) -> str:
        return await self.execute(commands.deop(player))

    async def teleport(self, target: str, destination: str) -> str:
        return await self.execute(commands.teleport(target, destination))

    async def give(self, player: str, item: str, amount: int | None = None) -> str:
        return await self.execute(commands.give(player, item, amount))

    async def set_weather(self, weather: Weather | str) -> str:
        return await self.execute(commands.set_weather(weather))

    async def set_time(self, setting: TimePreset | str | int) -> str:
        return await self.execute(commands.set_time(setting))

    async def set_game_mode(self, player: str, mode: GameMode | str) -> str:
        return await self.execute(commands.set_game_mode(player, mode))

    async def set_whitelist(self, action: WhitelistAction | str, player: str | None = None) -> str:
        return await self.execute(commands.set_whitelist(action, player))

    async def list_players(self) -> str:
        return await self.execute(commands.list_players())

    async def execute_raw(self, command: str) -> str:
        return await self.execute(commands.raw(command))


def _close_quietly(session: ConsoleSession, logger: logging.Logger, event: str) -> None:
    try:
        session.close()
    except Exception:  # noqa: BLE001 - teardown must not mask the original failure.
        logger.exception("session_close_failed")
    else:
        logger.info(event)


class _Handshake:
    """One connect attempt whose session goes to the waiter, or is closed if the waiter gave up.

    The worker thread keeps running after ``asyncio.wait_for`` times out or is
    cancelled, so a late session is closed on that thread rather than left open.
    """

    def __init__(self, connect: Callable[[], ConsoleSession], logger: logging.Logger) -> None:
        self._connect = connect
        self._logger = logger
        self._lock = threading.Lock()
        self._abandoned = False
        self._delivered: ConsoleSession | None = None

    def run(self) -> ConsoleSession:
        session = self._connect()
        with self._lock:
            if not self._abandoned:
                self._delivered = session
                return session
        _close_quietly(session, self._logger, "late_session_closed")
        return session

    def abandon(self) -> None:
        """Give up on the attempt; a session already handed over is closed here."""
        with self._lock:
            self._abandoned = True
            session, self._delivered = self._delivered, None
        if session is not None:
            _close_quietly(session, self._logger, "late_session_closed")


def _kind_of(error: Exception) -> str:
    if isinstance(error, CommandError):
        return error.kind.value
    return "connection"


class SessionScope:
    """Hands out session managers according to the configured reuse policy.

    With ``SessionReuse.NONE`` every :meth:`acquire` builds a fresh manager and
    closes it on exit, so concurrent calls never share a connection. With
    ``SessionReuse.FRESHNESS`` one manager lives as long as the scope and its
    session is reused while it is fresh.
    """

    def __init__(self, factory: Callable[[], SessionManager], reuse: SessionReuse) -> None:
        self._factory = factory
        self._reuse = SessionReuse(reuse)
        self._shared: SessionManager | None = None

    @classmethod
    def from_settings(cls, settings: Settings, transport: ConsoleTransport) -> SessionScope:
        return cls(lambda: SessionManager.from_settings(settings, transport), settings.session_reuse)

    @property
    def reuse(self) -> SessionReuse:
        return self._reuse

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[SessionManager]:
        if self._reuse is SessionReuse.NONE:
            manager = self._factory()
            try:
                yield manager
            finally:
                await manager.close_session()
            return

        if self._shared is None:
            self._shared = self._factory()
        yield self._shared

    async def aclose(self) -> None:
        if self._shared is not None:
            await self._shared.close_session()
            self._shared = None
