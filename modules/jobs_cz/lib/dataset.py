from __future__ import annotations

import json
import os
import threading
from collections.abc import Iterable, Mapping
from typing import Any


class JsonlDataset:
    """
    Append-only output sink: one JSON object per line.

    push_data() is safe to call from several worker threads; each batch is
    serialized first, then appended with a single O_APPEND write.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()

    def push_data(self, items: Mapping[str, Any] | Iterable[Mapping[str, Any]]) -> int:
        """Append one item or a batch; returns how many rows were written."""
        rows = [items] if isinstance(items, Mapping) else list(items)
        if not rows:
            return 0
        # Serialize first so a bad row fails before any file op.
        data = "".join(json.dumps(dict(r), ensure_ascii=False, separators=(",", ":")) + "\n" for r in rows)
        payload = data.encode("utf-8")

        with self._lock:
            _ensure_dir(self.path)
            fd = os.open(self.path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o644)
            try:
                os.write(fd, payload)
            finally:
                os.close(fd)
        return len(rows)

    def read_all(self) -> list[dict[str, Any]]:
        """All rows written so far (empty if the file does not exist)."""
        if not os.path.exists(self.path):
            return []
        out: list[dict[str, Any]] = []
        with open(self.path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    out.append(json.loads(line))
        return out


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(os.path.abspath(path)) or "."
    os.makedirs(d, exist_ok=True)
