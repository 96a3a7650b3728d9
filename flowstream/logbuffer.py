from __future__ import annotations

import threading
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

LOG_SIZE = 200


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    text: str
    tx_id: Optional[str] = Field(None, alias="txId")

    def as_public(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class LogBuffer:
    """Most recent stream log lines, oldest first, capped at ``capacity``."""

    def __init__(self, capacity: int = LOG_SIZE) -> None:
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen or 0

    def append(self, text: str, tx_id: Optional[str] = None) -> LogEntry:
        entry = LogEntry(text=text, tx_id=tx_id)
        with self._lock:
            self._entries.append(entry)
        return entry

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
