"""Key-value backends for the run history.

Two keys are used: ``history`` (JSON array) and ``last_run`` (ISO timestamp).
Backends only deal in strings; serialisation belongs to the history store.
"""

import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from .config import Settings
from .errors import HistoryBackingUnavailable

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KVStore:
    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryKV(KVStore):
    """Process-local store (tests/dev)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value


class FileKV(KVStore):
    """One UTF-8 file per key inside ``base_dir``.

    Writes go to a temp file in the same directory and are moved into place
    with ``os.replace``, so a reader never sees a half-written value.
    """

    def __init__(self, base_dir):
        self._base = Path(base_dir)

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid key: {key!r}")
        return self._base / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        p = self._path(key)
        try:
            return p.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise HistoryBackingUnavailable(f"read {p}: {e}") from e

    def put(self, key: str, value: str) -> None:
        p = self._path(key)
        try:
            self._base.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._base, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp, p)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise HistoryBackingUnavailable(f"write {p}: {e}") from e


def open_kv(cfg: Settings) -> Optional[KVStore]:
    """Backing store from configuration, or None when history is not bound."""
    if not cfg.KV_DIR:
        logger.info("KA_KV_DIR not set; run history will not be persisted")
        return None
    logger.info(f"Run history stored under {cfg.KV_DIR}")
    return FileKV(cfg.KV_DIR)
