from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import json
import os


@dataclass
class SessionEvent:
    ts: str
    kind: str
    ok: bool
    data: Dict[str, Any]
    error: Optional[str] = None


class SessionLogger:
    """In-memory log of the operations run against a network.

    One event per load, mutation or query, tagged with the error code when the
    operation failed. Can be dumped to a JSON file when the session ends.
    """

    def __init__(self, max_events: int = 5000):
        self.max_events = max_events
        self.events: List[SessionEvent] = []

    @classmethod
    def from_env(cls) -> "SessionLogger":
        raw = os.getenv("NETROUTE_MAX_EVENTS", "")
        try:
            max_events = int(raw) if raw else 5000
        except ValueError:
            max_events = 5000
        return cls(max_events=max(1, max_events))

    def _now(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def add(self, kind: str, ok: bool = True, error: Optional[str] = None, **data: Any) -> None:
        ev = SessionEvent(ts=self._now(), kind=str(kind), ok=bool(ok), data=dict(data), error=error)
        self.events.append(ev)
        if len(self.events) > self.max_events:
            # keep the newest events
            self.events = self.events[-self.max_events :]

    def failures(self) -> List[SessionEvent]:
        return [e for e in self.events if not e.ok]

    def clear(self) -> None:
        self.events.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "schema": "netroute-session-log/v1",
            "eventCount": len(self.events),
            "failureCount": len(self.failures()),
            "events": [asdict(e) for e in self.events],
        }

    def save_json(self, path: str) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
