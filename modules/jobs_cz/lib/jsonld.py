"""
JSON-LD (schema.org JobPosting) extraction for detail pages.

The first JobPosting-typed entry in document order wins; later blocks are not
consulted. A block that fails to parse is skipped, never fatal.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterator
from typing import Any

from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

_JOB_POSTING_RE = re.compile(r"JobPosting", re.IGNORECASE)


def extract_from_jsonld(soup: BeautifulSoup) -> dict[str, str | None] | None:
    """
    Return a partial record built from the first JobPosting entry, or None.

    Keys: title, company, location, salary, date_posted, description_html, job_type.
    """
    for idx, script in enumerate(soup.select('script[type="application/ld+json"]')):
        raw = script.string if script.string is not None else script.get_text()
        try:
            parsed = json.loads(raw or "")
        except ValueError as e:
            log.debug("Skipping JSON-LD block %d: %s", idx, e)
            continue

        for entry in _iter_entries(parsed):
            if _is_job_posting(entry):
                return _map_entry(entry)
    return None


def _iter_entries(parsed: Any) -> Iterator[dict[str, Any]]:
    items = parsed if isinstance(parsed, list) else [parsed]
    for item in items:
        if not isinstance(item, dict):
            continue
        yield item
        graph = item.get("@graph")
        if isinstance(graph, list):
            yield from (g for g in graph if isinstance(g, dict))


def _is_job_posting(entry: dict[str, Any]) -> bool:
    t = entry.get("@type") or entry.get("type")
    if isinstance(t, list):
        return any(isinstance(x, str) and _JOB_POSTING_RE.search(x) for x in t)
    return isinstance(t, str) and bool(_JOB_POSTING_RE.search(t))


def _map_entry(e: dict[str, Any]) -> dict[str, str | None]:
    org = e.get("hiringOrganization")
    company = _text(org.get("name")) if isinstance(org, dict) else _text(org)

    return {
        "title": _text(e.get("title")) or _text(e.get("name")),
        "company": company,
        "date_posted": _text(e.get("datePosted")),
        "description_html": _text(e.get("description")),
        "location": _location(e.get("jobLocation")),
        "salary": _salary(e.get("baseSalary")),
        "job_type": _text(e.get("employmentType")),
    }


def _location(job_location: Any) -> str | None:
    if isinstance(job_location, list):
        job_location = next((x for x in job_location if isinstance(x, dict)), None)
    if not isinstance(job_location, dict):
        return None
    address = job_location.get("address")
    if isinstance(address, dict):
        return _text(address.get("addressLocality")) or _text(address.get("addressRegion"))
    return _text(address)


def _salary(base_salary: Any) -> str | None:
    """
    Three shapes:
      "30 000 Kč"                              -> as-is
      {"value": 35000} / {"value": {...}}      -> the value (nested QuantitativeValue resolved)
      {"minValue": 30000, "maxValue": 45000}   -> "30000 - 45000"
    """
    if base_salary is None:
        return None
    if not isinstance(base_salary, dict):
        return _text(base_salary)

    value = base_salary.get("value")
    if isinstance(value, dict):
        return _salary(value)
    if value not in (None, "", 0):
        return _text(value)

    lo, hi = base_salary.get("minValue"), base_salary.get("maxValue")
    if lo is not None and hi is not None:
        return f"{_num(lo)} - {_num(hi)}"
    return None


def _num(v: Any) -> str:
    if isinstance(v, float) and v.is_integer():
        return str(int(v))
    return str(v).strip()


def _text(v: Any) -> str | None:
    """Coerce a JSON scalar (or list of scalars) to a trimmed string; None when empty."""
    if v is None or isinstance(v, (dict, bool)):
        return None
    if isinstance(v, list):
        parts = [s for s in (_text(x) for x in v) if s]
        return ", ".join(parts) or None
    if isinstance(v, (int, float)):
        return _num(v)
    s = str(v).strip()
    return s or None
