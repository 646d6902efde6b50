from __future__ import annotations

import threading
from typing import Any, Callable

import pytest


class FakeSession:
    def __init__(self, transport: FakeTransport) -> None:
        self._transport = transport
        self.sent: list[str] = []
        self.closed = False

    def send(self, command: str) -> str:
        self.sent.append(command)
        self._transport.sent.append(command)
        behaviour: Any = self._transport.responses.pop(0) if self._transport.responses else "ok"
        with self._transport.lock:
            self._transport.in_flight += 1
            self._transport.max_in_flight = max(self._transport.max_in_flight, self._transport.in_flight)
        try:
            if isinstance(behaviour, BaseException):
                raise behaviour
            if callable(behaviour):
                return behaviour(command)
            return behaviour
        finally:
            with self._transport.lock:
                self._transport.in_flight -= 1

    def close(self) -> None:
        self.closed = True
        if self._transport.close_error is not None:
            raise self._transport.close_error


class FakeTransport:
    """Scriptable transport: ``responses`` feed sends, ``connect_errors`` feed handshakes."""

    def __init__(self) -> None:
        self.responses: list[str | BaseException | Callable[[str], str]] = []
        self.connect_errors: list[BaseException | None] = []
        self.close_error: BaseException | None = None
        self.sessions: list[FakeSession] = []
        self.sent: list[str] = []
        self.connect_calls: list[tuple[str, int, str, float]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.lock = threading.Lock()

    @property
    def connects(self) -> int:
        return len(self.connect_calls)

    @property
    def open_sessions(self) -> list[FakeSession]:
        return [session for session in self.sessions if not session.closed]

    def connect(self, host: str, port: int, password: str, timeout: float) -> FakeSession:
        self.connect_calls.append((host, port, password, timeout))
        error = self.connect_errors.pop(0) if self.connect_errors else None
        if error is not None:
            raise error
        session = FakeSession(self)
        self.sessions.append(session)
        return session


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()
