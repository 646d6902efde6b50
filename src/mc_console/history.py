"""Audit trail of console operations issued through mc-console."""

from __future__ import annotations

import json
from collections import deque
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Protocol
from uuid import uuid4


class CommandOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(slots=True)
class CommandRecord:
    """One executed (or attempted) console operation."""

    operation: str
    command: str | None
    outcome: CommandOutcome
    response: str | None = None
    error: str | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_json(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["outcome"] = self.outcome.value
        payload["submitted_at"] = self.submitted_at.isoformat()
        return payload

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> CommandRecord:
        return cls(
            id=payload["id"],
            operation=payload["operation"],
            command=payload.get("command"),
            outcome=CommandOutcome(payload["outcome"]),
            response=payload.get("response"),
            error=payload.get("error"),
            submitted_at=datetime.fromisoformat(payload["submitted_at"]),
        )


class CommandHistoryStore(Protocol):
    """Persistence contract for storing command history."""

    def append(self, record: CommandRecord) -> None:
        """Persist a finished record."""

    def list_recent(self, limit: int) -> list[CommandRecord]:
        """Return up to ``limit`` newest records, newest first."""


class InMemoryHistoryStore:
    """Keeps the newest ``max_records`` records for the life of the process."""

    def __init__(self, max_records: int = 500) -> None:
        self._records: deque[CommandRecord] = deque(maxlen=max_records)

    def append(self, record: CommandRecord) -> None:
        self._records.append(record)

    def list_recent(self, limit: int) -> list[CommandRecord]:
        if limit <= 0:
            return []
        return list(reversed(self._records))[:limit]


class JsonlHistoryStore:
    """Append-only JSON-lines log; one record per line, oldest first."""

    def __init__(self, file_path: str | Path) -> None:
        self._path = Path(file_path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: CommandRecord) -> None:
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record.to_json()) + "\n")

    def list_recent(self, limit: int) -> list[CommandRecord]:
        if limit <= 0 or not self._path.exists():
            return []

        # Only the last ``limit`` lines are kept while streaming, and only those are parsed.
        with self._path.open("r", encoding="utf-8") as handle:
            tail = deque((line for line in handle if line.strip()), maxlen=limit)

        return [CommandRecord.from_json(json.loads(line)) for line in reversed(tail)]
