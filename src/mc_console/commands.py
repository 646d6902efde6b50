"""Typed console operations rendered into protocol command strings.

Every builder validates its arguments before formatting so that a value can
never smuggle an extra token or a second command into the console line.
Single-token arguments (player names, item ids, addresses) are rejected when
malformed; the broadcast message is JSON-escaped because it travels inside a
quoted string literal.
"""

from __future__ import annotations

import ipaddress
import json
import re
from dataclasses import dataclass
from enum import Enum

from mc_console.errors import InvalidArgumentError

_PLAYER_RE = re.compile(r"[A-Za-z0-9_]{1,16}")
_SELECTOR_RE = re.compile(r"@[aeprs]")
_ITEM_RE = re.compile(r"(?:[a-z0-9_.-]+:)?[a-z0-9_./-]+")
_COORDINATE_RE = re.compile(r"(?:[~^](?:-?\d+(?:\.\d+)?)?|-?\d+(?:\.\d+)?)")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


class Weather(str, Enum):
    CLEAR = "clear"
    RAIN = "rain"
    THUNDER = "thunder"


class TimePreset(str, Enum):
    DAY = "day"
    NIGHT = "night"


class GameMode(str, Enum):
    SURVIVAL = "survival"
    CREATIVE = "creative"
    ADVENTURE = "adventure"
    SPECTATOR = "spectator"


class WhitelistAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    LIST = "list"
    ON = "on"
    OFF = "off"
    RELOAD = "reload"


_WHITELIST_NEEDS_PLAYER = frozenset({WhitelistAction.ADD, WhitelistAction.REMOVE})


@dataclass(frozen=True, slots=True)
class Command:
    """Canonical command line directed at the remote console."""

    operation: str
    text: str

    def __str__(self) -> str:
        return self.text


def _player(value: str, field: str = "player") -> str:
    if not isinstance(value, str) or not (_PLAYER_RE.fullmatch(value) or _SELECTOR_RE.fullmatch(value)):
        raise InvalidArgumentError(f"{field} must be a player name or target selector, got {value!r}")
    return value


def _free_text(value: str | None, field: str) -> str | None:
    """Return stripped text, or None when blank. Control characters are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{field} must be text")
    if _CONTROL_RE.search(value):
        raise InvalidArgumentError(f"{field} must not contain control characters")
    value = value.strip()
    return value or None


def _address(value: str) -> str:
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        raise InvalidArgumentError(f"address must be an IPv4 or IPv6 address, got {value!r}") from None


def _enum(enum_type: type[Enum], value, field: str):
    try:
        return enum_type(value)
    except ValueError:
        allowed = "|".join(member.value for member in enum_type)
        raise InvalidArgumentError(f"{field} must be one of {allowed}, got {value!r}") from None


def _with_optional(base: str, optional: str | int | None) -> str:
    return base if optional is None else f"{base} {optional}"


def broadcast(message: str) -> Command:
    if not isinstance(message, str) or not message.strip():
        raise InvalidArgumentError("message is required")
    literal = json.dumps(message, ensure_ascii=False)
    return Command("broadcast", f"tellraw @a {literal}")


def say(message: str) -> Command:
    text = _free_text(message, "message")
    if text is None:
        raise InvalidArgumentError("message is required")
    return Command("say", f"say {text}")


def kick(player: str, reason: str | None = None) -> Command:
    return Command("kick", _with_optional(f"kick {_player(player)}", _free_text(reason, "reason")))


def ban(player: str, reason: str | None = None) -> Command:
    return Command("ban", _with_optional(f"ban {_player(player)}", _free_text(reason, "reason")))


def ban_ip(address: str, reason: str | None = None) -> Command:
    return Command("ban_ip", _with_optional(f"ban-ip {_address(address)}", _free_text(reason, "reason")))


def pardon(player: str) -> Command:
    return Command("pardon", f"pardon {_player(player)}")


def pardon_ip(address: str) -> Command:
    return Command("pardon_ip", f"pardon-ip {_address(address)}")


def op(player: str) -> Command:
    return Command("op", f"op {_player(player)}")


def deop(player: str) -> Command:
    return Command("deop", f"deop {_player(player)}")


def teleport(target: str, destination: str) -> Command:
    target = _player(target, "target")
    coordinates = destination.split(" ") if isinstance(destination, str) else []
    if len(coordinates) == 3 and all(_COORDINATE_RE.fullmatch(part) for part in coordinates):
        return Command("teleport", f"tp {target} {destination}")
    return Command("teleport", f"tp {target} {_player(destination, 'destination')}")


def give(player: str, item: str, amount: int | None = None) -> Command:
    if not isinstance(item, str) or not _ITEM_RE.fullmatch(item):
        raise InvalidArgumentError(f"item must be an item id such as minecraft:diamond, got {item!r}")
    if amount is not None and (isinstance(amount, bool) or not isinstance(amount, int) or amount < 1):
        raise InvalidArgumentError(f"amount must be a positive integer, got {amount!r}")
    return Command("give", _with_optional(f"give {_player(player)} {item}", amount))


def set_weather(weather: Weather | str) -> Command:
    return Command("weather", f"weather {_enum(Weather, weather, 'weather').value}")


def set_time(setting: TimePreset | str | int) -> Command:
    if isinstance(setting, int) and not isinstance(setting, bool):
        if setting < 0:
            raise InvalidArgumentError(f"time must be non-negative, got {setting}")
        return Command("time", f"time set {setting}")
    return Command("time", f"time set {_enum(TimePreset, setting, 'time').value}")


def set_game_mode(player: str, mode: GameMode | str) -> Command:
    return Command("gamemode", f"gamemode {_enum(GameMode, mode, 'mode').value} {_player(player)}")


def set_whitelist(action: WhitelistAction | str, player: str | None = None) -> Command:
    action = _enum(WhitelistAction, action, "action")
    if action in _WHITELIST_NEEDS_PLAYER:
        if player is None:
            raise InvalidArgumentError(f"whitelist {action.value} requires a player")
        return Command("whitelist", f"whitelist {action.value} {_player(player)}")
    if player is not None:
        raise InvalidArgumentError(f"whitelist {action.value} does not take a player")
    return Command("whitelist", f"whitelist {action.value}")


def list_players() -> Command:
    return Command("list", "list")


def raw(command: str) -> Command:
    if not isinstance(command, str) or not command.strip():
        raise InvalidArgumentError("command is required")
    return Command("raw", command)
