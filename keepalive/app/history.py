"""Bounded, newest-first log of keep-alive runs."""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import HistoryBackingUnavailable
from .store import KVStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "history"
LAST_RUN_KEY = "last_run"
DEFAULT_LIMIT = 20

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class RunRecord:
    timestamp: str
    status: str
    messages: Tuple[str, ...] = ()

    @classmethod
    def from_result(cls, success: bool, messages, timestamp: Optional[str] = None) -> "RunRecord":
        return cls(
            timestamp=timestamp or now_iso(),
            status=STATUS_SUCCESS if success else STATUS_ERROR,
            messages=tuple(messages),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"timestamp": self.timestamp, "status": self.status, "messages": list(self.messages)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RunRecord":
        status = data["status"]
        if status not in (STATUS_SUCCESS, STATUS_ERROR):
            raise ValueError(f"unknown status {status!r}")
        messages = data.get("messages") or []
        if not isinstance(messages, list):
            raise ValueError("messages must be a list")
        return cls(timestamp=str(data["timestamp"]), status=status, messages=tuple(str(m) for m in messages))


class AppendOutcome(str, Enum):
    OK = "ok"
    DEGRADED_NOOP = "degraded_noop"


class HistoryStore:
    """Reads and writes the run log through an injected key-value store.

    ``kv=None`` means no backing store is bound: appends are no-ops and the
    log always reads as empty.

    There is no compare-and-swap on the history key. Two appends running at
    the same time may each read the old list, and the later write wins.
    """

    def __init__(self, kv: Optional[KVStore], limit: int = DEFAULT_LIMIT):
        if limit < 1:
            raise ValueError("limit must be >= 1")
        self.kv = kv
        self.limit = limit

    @classmethod
    def open(cls, kv: Optional[KVStore], limit: int) -> "HistoryStore":
        """Build from configuration, clamping a non-positive limit to 1."""
        if limit < 1:
            logger.warning(f"History limit {limit} is below 1, keeping 1 entry")
            limit = 1
        return cls(kv, limit=limit)

    @property
    def configured(self) -> bool:
        return self.kv is not None

    def _decode(self, raw: Optional[str]) -> List[RunRecord]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"History is not valid JSON, starting fresh: {e}")
            return []
        if not isinstance(data, list):
            logger.warning("History is not a JSON array, starting fresh")
            return []
        records = []
        for item in data:
            try:
                records.append(RunRecord.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed history entry: {e}")
        return records

    def append(self, record: RunRecord) -> AppendOutcome:
        if self.kv is None:
            logger.debug("No history backing store bound; skipping append")
            return AppendOutcome.DEGRADED_NOOP

        try:
            history = self._decode(self.kv.get(HISTORY_KEY))
            history.insert(0, record)
            del history[self.limit:]
            self.kv.put(HISTORY_KEY, json.dumps([r.to_dict() for r in history], ensure_ascii=False))
            self.kv.put(LAST_RUN_KEY, now_iso())
        except Exception as e:
            err = e if isinstance(e, HistoryBackingUnavailable) else HistoryBackingUnavailable(str(e))
            logger.warning(f"History save failed ({err.category}): {err}")
            return AppendOutcome.DEGRADED_NOOP

        return AppendOutcome.OK

    def list(self) -> List[RunRecord]:
        if self.kv is None:
            return []
        try:
            raw = self.kv.get(HISTORY_KEY)
        except Exception as e:
            logger.warning(f"History read failed: {e}")
            return []
        return self._decode(raw)[: self.limit]

    def last_run(self) -> Optional[str]:
        if self.kv is None:
            return None
        try:
            return self.kv.get(LAST_RUN_KEY)
        except Exception as e:
            logger.warning(f"Last run marker read failed: {e}")
            return None
