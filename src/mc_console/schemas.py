"""Typed argument records accepted by console actions, plus the action result shape."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, NonNegativeInt, PositiveInt

from mc_console.commands import GameMode, TimePreset, Weather, WhitelistAction


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalText = Annotated[str | None, BeforeValidator(_blank_to_none)]


class _Arguments(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)


class SendMessage(_Arguments):
    message: str = Field(min_length=1, max_length=100)


class PlayerAction(_Arguments):
    player: str = Field(min_length=1)
    reason: OptionalText = None


class PlayerTarget(_Arguments):
    player: str = Field(min_length=1)


class AddressAction(_Arguments):
    address: str = Field(min_length=1)
    reason: OptionalText = None


class AddressTarget(_Arguments):
    address: str = Field(min_length=1)


class GiveItem(_Arguments):
    player: str = Field(min_length=1)
    item: str = Field(min_length=1)
    amount: PositiveInt | None = None


class Teleport(_Arguments):
    target: str = Field(min_length=1)
    destination: str = Field(min_length=1)


class ChangeGamemode(_Arguments):
    player: str = Field(min_length=1)
    mode: GameMode


class ChangeWeather(_Arguments):
    weather: Weather


class ChangeTime(_Arguments):
    setting: TimePreset | NonNegativeInt


class ManageWhitelist(_Arguments):
    action: WhitelistAction
    player: OptionalText = None


class RawCommand(BaseModel):
    # Passed through verbatim, so whitespace is not normalized here.
    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(min_length=1)


class ActionResult(BaseModel):
    """Outcome of one console action: ``{success, message}`` or ``{success, error}``."""

    success: bool
    message: str | None = None
    error: str | None = None

    @classmethod
    def ok(cls, message: str) -> ActionResult:
        return cls(success=True, message=message)

    @classmethod
    def failure(cls, error: str) -> ActionResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
