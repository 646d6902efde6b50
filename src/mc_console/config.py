"""Runtime configuration for mc-console."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pydantic import Field, PositiveFloat, SecretStr, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mc_console.errors import ConfigurationError


class SessionReuse(str, Enum):
    """How long an authenticated session may outlive the call that opened it."""

    NONE = "none"
    FRESHNESS = "freshness"


@dataclass(frozen=True, slots=True)
class Credentials:
    """Address and shared secret of the remote console."""

    host: str
    port: int
    password: str = field(repr=False)

    def __post_init__(self) -> None:
        if not self.host or not self.host.strip():
            raise ConfigurationError("RCON host is required")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 < self.port <= 65535:
            raise ConfigurationError("RCON port must be an integer between 1 and 65535")
        if not self.password:
            raise ConfigurationError("RCON password is required")


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="RCON_", env_file=".env", extra="ignore")

    host: str = Field(min_length=1, description="Hostname or address of the game server console.")
    port: int = Field(gt=0, le=65535, description="RCON port of the game server.")
    password: SecretStr = Field(description="Shared RCON secret.")
    command_timeout_seconds: PositiveFloat = 5.0
    connect_timeout_seconds: PositiveFloat = 5.0
    freshness_window_seconds: PositiveFloat = 15.0
    session_reuse: SessionReuse = SessionReuse.FRESHNESS
    restart_delay_seconds: float = Field(default=10.0, ge=0)
    history_path: str | None = None
    log_level: str = "INFO"

    @field_validator("host")
    @classmethod
    def host_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("RCON host is required")
        return value

    @field_validator("password")
    @classmethod
    def password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("RCON password is required")
        return value

    @property
    def credentials(self) -> Credentials:
        return Credentials(host=self.host, port=self.port, password=self.password.get_secret_value())


def load_settings(**overrides) -> Settings:
    """Build and validate settings eagerly, raising ``ConfigurationError`` on failure."""
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        # Only field locations and messages; input values could contain the secret.
        problems = "; ".join(
            f"RCON_{'.'.join(str(part) for part in error['loc']).upper()}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(f"Invalid RCON configuration: {problems}") from None
