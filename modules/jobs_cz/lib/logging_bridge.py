from __future__ import annotations

import copy
import logging
from typing import Any

from service import logging_utils as _backend

# Keys that should be redacted from structured logs
_REDACT_KEYS = {
    "password",
    "token",
    "apikey",
    "api_key",
    "secret",
    "authorization",
    "auth",
    "bearer",
    "proxy_url",
    "proxyurls",
}


def _redact_record(record: dict[str, Any]) -> dict[str, Any]:
    """
    Shallow-copy record and redact obvious secret-like fields at top level.
    Proxy URLs usually embed credentials, so they are treated as secrets.
    """
    redacted = copy.copy(record)
    for k in list(redacted.keys()):
        lk = str(k).lower()
        if lk in _REDACT_KEYS or lk.endswith("_secret"):
            redacted[k] = "***REDACTED***"
    return redacted


def activity(record: dict[str, Any]) -> None:
    """
    Write an activity record to the JSONL activity log.
    Falls back to stdlib logging as structured info if the write fails.
    """
    payload = _redact_record(record)
    try:
        _backend.write_activity_log(payload)
        return
    except Exception:
        logging.getLogger("jobs_cz.activity").debug("activity log write failed", exc_info=True)
    logging.getLogger("jobs_cz.activity").info(payload)


def error(record: dict[str, Any]) -> None:
    """
    Write an error record to the JSONL error log.
    Falls back to stdlib logging as structured error if the write fails.
    """
    payload = _redact_record(record)
    try:
        _backend.write_error_log(payload)
        return
    except Exception:
        logging.getLogger("jobs_cz.error").debug("error log write failed", exc_info=True)
    logging.getLogger("jobs_cz.error").error(payload)
