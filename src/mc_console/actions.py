"""Caller-facing console actions.

Each action validates a typed argument record, runs the matching console
command through a scoped :class:`~mc_console.session.SessionManager` and
collapses the outcome into an :class:`~mc_console.schemas.ActionResult`.
Failures never propagate: they are logged with the operation name and reported
with a short operator-safe message.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar

from pydantic import BaseModel, ValidationError

from mc_console import commands
from mc_console.commands import Command
from mc_console.errors import ConsoleError, InvalidArgumentError
from mc_console.history import CommandHistoryStore, CommandOutcome, CommandRecord, InMemoryHistoryStore
from mc_console.schemas import (
    ActionResult,
    AddressAction,
    AddressTarget,
    ChangeGamemode,
    ChangeTime,
    ChangeWeather,
    GiveItem,
    ManageWhitelist,
    PlayerAction,
    PlayerTarget,
    RawCommand,
    SendMessage,
    Teleport,
)
from mc_console.session import SessionScope

ArgsT = TypeVar("ArgsT", bound=BaseModel)
ActionInput = BaseModel | Mapping[str, Any]

RESTART_SUCCESS_MESSAGE = "Server restart initiated successfully"
RESTART_FAILURE_MESSAGE = "Failed to restart the server. Please try again later."


class ConsoleActions:
    """Operation surface consumed by dashboards, CLIs and other front ends."""

    def __init__(
        self,
        scope: SessionScope,
        *,
        history_store: CommandHistoryStore | None = None,
        restart_delay_seconds: float = 10.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._scope = scope
        self._history_store = history_store or InMemoryHistoryStore()
        self._restart_delay_seconds = restart_delay_seconds
        self._sleep = sleep
        self._logger = logger or logging.getLogger("mc_console.actions")

    @property
    def scope(self) -> SessionScope:
        return self._scope

    def list_recent_history(self, limit: int = 20) -> list[CommandRecord]:
        return self._history_store.list_recent(limit)

    async def send_message(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "broadcast", "Failed to send message", SendMessage, data, lambda a: commands.broadcast(a.message)
        )

    async def get_online_players(self) -> ActionResult:
        return await self._perform("list", "Failed to get player list", None, None, lambda _: commands.list_players())

    async def kick_player(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "kick", "Failed to kick player", PlayerAction, data, lambda a: commands.kick(a.player, a.reason)
        )

    async def ban_player(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "ban", "Failed to ban player", PlayerAction, data, lambda a: commands.ban(a.player, a.reason)
        )

    async def ban_ip(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "ban_ip", "Failed to ban IP address", AddressAction, data, lambda a: commands.ban_ip(a.address, a.reason)
        )

    async def pardon_player(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "pardon", "Failed to pardon player", PlayerTarget, data, lambda a: commands.pardon(a.player)
        )

    async def pardon_ip(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "pardon_ip", "Failed to pardon IP address", AddressTarget, data, lambda a: commands.pardon_ip(a.address)
        )

    async def op_player(self, data: ActionInput) -> ActionResult:
        return await self._perform("op", "Failed to op player", PlayerTarget, data, lambda a: commands.op(a.player))

    async def deop_player(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "deop", "Failed to deop player", PlayerTarget, data, lambda a: commands.deop(a.player)
        )

    async def give_item(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "give", "Failed to give item", GiveItem, data, lambda a: commands.give(a.player, a.item, a.amount)
        )

    async def teleport_player(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "teleport",
            "Failed to teleport player",
            Teleport,
            data,
            lambda a: commands.teleport(a.target, a.destination),
        )

    async def change_gamemode(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "gamemode",
            "Failed to change gamemode",
            ChangeGamemode,
            data,
            lambda a: commands.set_game_mode(a.player, a.mode),
        )

    async def change_weather(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "weather", "Failed to change weather", ChangeWeather, data, lambda a: commands.set_weather(a.weather)
        )

    async def change_time(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "time", "Failed to change time", ChangeTime, data, lambda a: commands.set_time(a.setting)
        )

    async def manage_whitelist(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "whitelist",
            "Failed to manage whitelist",
            ManageWhitelist,
            data,
            lambda a: commands.set_whitelist(a.action, a.player),
        )

    async def execute_raw_command(self, data: ActionInput) -> ActionResult:
        return await self._perform(
            "raw", "Failed to execute command", RawCommand, data, lambda a: commands.raw(a.command)
        )

    async def restart_server(self) -> ActionResult:
        """Warn players, wait for the restart delay, then issue ``restart``."""
        warning = commands.say(
            f"Server will restart in {self._restart_delay_seconds:g} seconds. Please prepare for disconnection."
        )
        restart = commands.raw("restart")
        try:
            async with self._scope.acquire() as manager:
                await manager.execute(warning)
                await self._sleep(self._restart_delay_seconds)
                response = await manager.execute(restart)
        except Exception as exc:  # noqa: BLE001 - boundary converts every failure.
            self._log_failure("restart", exc)
            self._record("restart", restart, CommandOutcome.FAILED, error=RESTART_FAILURE_MESSAGE)
            return ActionResult.failure(RESTART_FAILURE_MESSAGE)

        self._record("restart", restart, CommandOutcome.SUCCEEDED, response=response)
        return ActionResult.ok(RESTART_SUCCESS_MESSAGE)

    async def _perform(
        self,
        operation: str,
        failure_message: str,
        schema: type[ArgsT] | None,
        data: ActionInput | None,
        build: Callable[[ArgsT | None], Command],
    ) -> ActionResult:
        command: Command | None = None
        try:
            args = schema.model_validate(data) if schema is not None else None
            command = build(args)
            async with self._scope.acquire() as manager:
                response = await manager.execute(command)
        except (ValidationError, InvalidArgumentError) as exc:
            self._logger.warning(
                "action_rejected",
                extra={"operation": operation, "error": _validation_summary(exc)},
            )
            self._record(operation, command, CommandOutcome.FAILED, error=failure_message)
            return ActionResult.failure(failure_message)
        except Exception as exc:  # noqa: BLE001 - boundary converts every failure.
            self._log_failure(operation, exc)
            self._record(operation, command, CommandOutcome.FAILED, error=failure_message)
            return ActionResult.failure(failure_message)

        self._record(operation, command, CommandOutcome.SUCCEEDED, response=response)
        return ActionResult.ok(response)

    def _log_failure(self, operation: str, exc: Exception) -> None:
        if isinstance(exc, ConsoleError):
            self._logger.error("action_failed", extra={"operation": operation, "error": str(exc)})
        else:
            self._logger.exception("action_failed_unexpectedly", extra={"operation": operation})

    def _record(
        self,
        operation: str,
        command: Command | None,
        outcome: CommandOutcome,
        *,
        response: str | None = None,
        error: str | None = None,
    ) -> None:
        record = CommandRecord(
            operation=operation,
            command=command.text if command is not None else None,
            outcome=outcome,
            response=response,
            error=error,
        )
        try:
            self._history_store.append(record)
        except OSError:
            self._logger.exception("history_append_failed", extra={"operation": operation})


def _validation_summary(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'input'}: {error['msg']}" for error in exc.errors()
        )
    return str(exc)
