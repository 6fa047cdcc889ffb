# service/logging_utils.py
from __future__ import annotations

import contextlib
import datetime as _dt
import glob
import json
import os
import socket
from collections.abc import Iterable, Iterator
from typing import Any

# ---- Configuration (env-driven, read at write time) -------------------------
#
#   LOG_DIR                 base directory for logs (default ./storage/logs)
#   ACTIVITY_LOG_PREFIX     activity file prefix (default "activity")
#   ERROR_LOG_PREFIX        error file prefix (default "error")
#   ACTIVITY_LOG_MAX_BYTES  size-based rotation threshold; <=0 disables it
#
# Date-based rotation is always on via YYYY-MM-DD filenames.

_DEFAULT_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "cookie",
    "set-cookie",
}

# Host + process metadata (fixed per-process)
_HOSTNAME = socket.gethostname()
_PID = os.getpid()


# ---- Public API --------------------------------------------------------------


def write_activity_log(record: dict[str, Any]) -> None:
    """
    Persist a single structured activity record (JSON-safe).

    May raise on unrecoverable I/O/serialization errors.
    Never mutates the passed-in dict.
    """
    _write_jsonl(_log_path_for_today(os.getenv("ACTIVITY_LOG_PREFIX", "activity")), record)


def write_error_log(record: dict[str, Any]) -> None:
    """Persist a single structured error record (JSON-safe), parallel to activity log."""
    _write_jsonl(_log_path_for_today(os.getenv("ERROR_LOG_PREFIX", "error")), record)


def get_activity_log_path() -> str:
    """Return the current day's activity log path (<prefix>-YYYY-MM-DD.jsonl)."""
    return _log_path_for_today(os.getenv("ACTIVITY_LOG_PREFIX", "activity"))


def iter_log_records(prefix: str | None = None, log_dir: str | None = None) -> Iterator[tuple[str, dict[str, Any]]]:
    """
    Yield (file_name, record) for every JSON line in <log_dir>/<prefix>-*.jsonl,
    size-rotated siblings included, oldest file first. Unparseable lines are skipped.
    """
    prefix = prefix or os.getenv("ACTIVITY_LOG_PREFIX", "activity")
    base = log_dir or _log_dir()
    for path in sorted(glob.glob(os.path.join(base, f"{prefix}-*.jsonl*"))):
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(record, dict):
                    yield os.path.basename(path), record


def redact(record: dict[str, Any], keys: set[str] | None = None) -> dict[str, Any]:
    """
    Produce a redacted deep copy of `record` by scrubbing values whose KEYS
    contain any of the substrings in `keys` (case-insensitive). Does not mutate input.
    """
    return _redact_deep(record, keys or _DEFAULT_REDACT_KEYS)


# ---- Internal helpers --------------------------------------------------------


def _log_dir() -> str:
    return os.getenv("LOG_DIR", "./storage/logs")


def _max_bytes() -> int:
    try:
        return int(os.getenv("ACTIVITY_LOG_MAX_BYTES", "0"))
    except ValueError:
        return 0


def _log_path_for_today(prefix: str) -> str:
    today = _dt.date.today().isoformat()  # YYYY-MM-DD
    return os.path.join(_log_dir(), f"{prefix}-{today}.jsonl")


def _ensure_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def _rotate_file_if_needed(path: str) -> None:
    """
    Rotate current file if size exceeds ACTIVITY_LOG_MAX_BYTES. Date rotation is
    inherent via filename per day; this only handles size-based rotation.
    """
    limit = _max_bytes()
    if limit <= 0:
        return
    try:
        if os.path.getsize(path) < limit:
            return
    except FileNotFoundError:
        return
    ts = _dt.datetime.now().strftime("%Y%m%d-%H%M%S")
    with contextlib.suppress(FileNotFoundError):
        os.replace(path, f"{path}.{ts}")


def _key_matches(name: str, patterns: Iterable[str]) -> bool:
    n = name.lower()
    return any(pat in n for pat in patterns)


def _redact_deep(value: Any, patterns: Iterable[str]) -> Any:
    """
    Deep-copy and redact dict/list structures. Keys that match patterns have their
    values replaced with "***REDACTED***".
    """
    if isinstance(value, dict):
        out: dict[str, Any] = {}
        for k, v in value.items():
            if isinstance(k, str) and _key_matches(k, patterns):
                out[k] = "***REDACTED***"
            else:
                out[k] = _redact_deep(v, patterns)
        return out
    if isinstance(value, list):
        return [_redact_deep(v, patterns) for v in value]
    if isinstance(value, tuple):
        return tuple(_redact_deep(v, patterns) for v in value)
    return value


def _with_metadata(record: dict[str, Any]) -> dict[str, Any]:
    out = dict(record)
    out.setdefault("ts", _dt.datetime.now(_dt.timezone.utc).isoformat().replace("+00:00", "Z"))
    out["_meta"] = {"host": _HOSTNAME, "pid": _PID}
    return out


def _write_jsonl(path: str, record: dict[str, Any]) -> None:
    """
    Core writer:
      - makes a deep redacted copy and adds ts/host/pid
      - rotates by size (optional)
      - appends a single line (POSIX O_APPEND)
      - retries once on transient OSError
    """
    payload = _with_metadata(_redact_deep(record, _DEFAULT_REDACT_KEYS))
    # Serialize first so any serialization errors happen before file ops.
    data = (json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str) + "\n").encode("utf-8")

    flags = os.O_CREAT | os.O_APPEND | os.O_WRONLY

    def _append_once() -> None:
        fd = os.open(path, flags, 0o644)
        try:
            os.write(fd, data)
        finally:
            os.close(fd)

    _ensure_dir(path)
    _rotate_file_if_needed(path)
    try:
        _append_once()
    except OSError:
        _ensure_dir(path)
        _append_once()
