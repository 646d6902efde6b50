"""CLI entrypoint for mc-console."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

import typer
from rich import print

from mc_console.actions import ConsoleActions
from mc_console.adapters import ConsoleTransport, RconTransport
from mc_console.commands import GameMode, WhitelistAction, Weather
from mc_console.config import Settings, load_settings
from mc_console.errors import ConfigurationError
from mc_console.history import JsonlHistoryStore
from mc_console.schemas import ActionResult
from mc_console.session import SessionScope
from mc_console.telemetry import configure_logging

app = typer.Typer(help="Send administrative commands to a game server over RCON")


def _build_transport() -> ConsoleTransport:
    return RconTransport()


def _load_settings() -> Settings:
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        print({"error": str(exc)})
        raise typer.Exit(code=1)
    configure_logging(settings.log_level)
    return settings


def _build_actions(settings: Settings) -> ConsoleActions:
    scope = SessionScope.from_settings(settings, _build_transport())
    history = JsonlHistoryStore(settings.history_path) if settings.history_path else None
    return ConsoleActions(scope, history_store=history, restart_delay_seconds=settings.restart_delay_seconds)


def _run_action(invoke: Callable[[ConsoleActions], Awaitable[ActionResult]]) -> None:
    actions = _build_actions(_load_settings())

    async def _run() -> ActionResult:
        try:
            return await invoke(actions)
        finally:
            await actions.scope.aclose()

    result = asyncio.run(_run())
    print(result.to_dict())
    if not result.success:
        raise typer.Exit(code=1)


@app.command()
def status() -> None:
    """Show the effective connection settings (the password is never shown)."""
    settings = _load_settings()
    print(
        {
            "host": settings.host,
            "port": settings.port,
            "session_reuse": settings.session_reuse.value,
            "freshness_window_seconds": settings.freshness_window_seconds,
            "command_timeout_seconds": settings.command_timeout_seconds,
            "connect_timeout_seconds": settings.connect_timeout_seconds,
            "history_path": settings.history_path,
        }
    )


@app.command()
def broadcast(message: str) -> None:
    """Show a chat message to every player (tellraw)."""
    _run_action(lambda actions: actions.send_message({"message": message}))


@app.command("list")
def list_players() -> None:
    """List online players."""
    _run_action(lambda actions: actions.get_online_players())


@app.command()
def kick(player: str, reason: str = typer.Option(None, help="Reason shown to the player")) -> None:
    _run_action(lambda actions: actions.kick_player({"player": player, "reason": reason}))


@app.command()
def ban(player: str, reason: str = typer.Option(None, help="Reason shown to the player")) -> None:
    _run_action(lambda actions: actions.ban_player({"player": player, "reason": reason}))


@app.command("ban-ip")
def ban_ip(address: str, reason: str = typer.Option(None, help="Reason recorded with the ban")) -> None:
    _run_action(lambda actions: actions.ban_ip({"address": address, "reason": reason}))


@app.command()
def pardon(player: str) -> None:
    _run_action(lambda actions: actions.pardon_player({"player": player}))


@app.command("pardon-ip")
def pardon_ip(address: str) -> None:
    _run_action(lambda actions: actions.pardon_ip({"address": address}))


@app.command()
def op(player: str) -> None:
    _run_action(lambda actions: actions.op_player({"player": player}))


@app.command()
def deop(player: str) -> None:
    _run_action(lambda actions: actions.deop_player({"player": player}))


@app.command()
def give(player: str, item: str, amount: int = typer.Option(None, help="Stack size, omitted when not given")) -> None:
    _run_action(lambda actions: actions.give_item({"player": player, "item": item, "amount": amount}))


@app.command("tp")
def teleport(
    target: str,
    destination: str = typer.Argument(..., help="Player, selector or quoted 'x y z' coordinates"),
) -> None:
    _run_action(lambda actions: actions.teleport_player({"target": target, "destination": destination}))


@app.command()
def gamemode(mode: GameMode, player: str) -> None:
    _run_action(lambda actions: actions.change_gamemode({"player": player, "mode": mode}))


@app.command()
def weather(kind: Weather) -> None:
    _run_action(lambda actions: actions.change_weather({"weather": kind}))


@app.command()
def time(setting: str = typer.Argument(..., help="day, night or a tick count")) -> None:
    value: str | int = int(setting) if setting.isdigit() else setting
    _run_action(lambda actions: actions.change_time({"setting": value}))


@app.command()
def whitelist(action: WhitelistAction, player: str = typer.Argument(None)) -> None:
    _run_action(lambda actions: actions.manage_whitelist({"action": action, "player": player}))


@app.command()
def raw(command: str) -> None:
    """Send a console command verbatim."""
    _run_action(lambda actions: actions.execute_raw_command({"command": command}))


@app.command()
def restart() -> None:
    """Warn players, wait, then restart the server."""
    _run_action(lambda actions: actions.restart_server())


@app.command()
def history(
    history_file: str = typer.Option(None, envvar="RCON_HISTORY_PATH", help="JSONL command history file"),
    limit: int = typer.Option(20, help="How many entries to show"),
) -> None:
    """Show recently executed console operations."""
    if not history_file:
        raise typer.BadParameter("Provide --history-file or set RCON_HISTORY_PATH")

    records = JsonlHistoryStore(history_file).list_recent(limit)
    print(
        [
            {
                "id": record.id,
                "submitted_at": record.submitted_at.isoformat(),
                "operation": record.operation,
                "command": record.command,
                "outcome": record.outcome.value,
                "response": record.response,
                "error": record.error,
            }
            for record in records
        ]
    )


if __name__ == "__main__":
    app()
