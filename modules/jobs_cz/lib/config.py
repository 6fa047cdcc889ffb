from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .state import UNBOUNDED
from .utils import finite_number, truthy

DEFAULT_RESULTS_WANTED = 100
DEFAULT_MAX_PAGES = 999
DEFAULT_OUTPUT_PATH = "./storage/datasets/default.jsonl"


# -----------------------------
# Exceptions
# -----------------------------
class ConfigError(ValueError):
    """Raised when provided kwargs/env cannot form a valid Settings."""


# -----------------------------
# Models
# -----------------------------
@dataclass
class Settings:
    """
    Canonical configuration for one jobs.cz crawl.

    Search filters build the seed URL unless explicit seeds are given
    (start_urls > start_url > url). proxy_configuration is opaque here and
    handed to the HTTP client as-is.
    """

    # Search filters
    keyword: str = ""
    location: str = ""
    category: str = ""

    # Budget
    results_wanted: int = DEFAULT_RESULTS_WANTED
    max_pages: int = DEFAULT_MAX_PAGES

    # Behavior
    collect_details: bool = True
    dedupe: bool = True

    # Seed overrides
    start_urls: list[str] = field(default_factory=list)
    start_url: str | None = None
    url: str | None = None

    # Engine
    proxy_configuration: dict[str, Any] | None = None
    max_concurrency: int = 10
    max_request_retries: int = 3
    request_timeout: float = 30.0

    # Output sink
    output_path: str = DEFAULT_OUTPUT_PATH

    # ------------- convenience -------------
    def proxy_url(self) -> str | None:
        """First proxy URL from proxyConfiguration.proxyUrls, if any."""
        cfg = self.proxy_configuration or {}
        urls = cfg.get("proxyUrls") or cfg.get("proxy_urls") or []
        if isinstance(urls, str):
            urls = [urls]
        for u in urls:
            s = str(u or "").strip()
            if s:
                return s
        return None

    # ------------- constructors -------------
    @classmethod
    def from_env_and_kwargs(cls, kwargs: Mapping[str, Any] | None) -> Settings:
        """
        Build Settings from kwargs (platform-style input) with validation.

        Accepted keys (camelCase as in the actor input; snake_case aliases work too):

            keyword, location, category: str
            results_wanted: int = 100      # non-finite / non-numeric -> unbounded
            max_pages: int = 999           # non-finite -> 999
            collectDetails: bool = true    # false -> emit bare {url, _source} records
            startUrl / startUrls / url     # seed overrides
            proxyConfiguration: object     # passed through
            dedupe: bool = true

            max_concurrency: int = 10      (env JOBS_CZ_MAX_CONCURRENCY)
            max_request_retries: int = 3
            request_timeout: float = 30
            output_path: str               (env JOBS_CZ_OUTPUT_PATH)
        """
        kw = dict(kwargs or {})

        def pick(*names: str, default: Any = None) -> Any:
            for n in names:
                if n in kw and kw[n] is not None:
                    return kw[n]
            return default

        results_wanted = _budget_int(pick("results_wanted", "resultsWanted"), DEFAULT_RESULTS_WANTED, UNBOUNDED)
        max_pages = _budget_int(pick("max_pages", "maxPages"), DEFAULT_MAX_PAGES, DEFAULT_MAX_PAGES)

        proxy_configuration = pick("proxyConfiguration", "proxy_configuration")
        if proxy_configuration is not None and not isinstance(proxy_configuration, dict):
            raise ConfigError("'proxyConfiguration' must be an object.")

        settings = cls(
            keyword=str(pick("keyword", default="")).strip(),
            location=str(pick("location", default="")).strip(),
            category=str(pick("category", default="")).strip(),
            results_wanted=results_wanted,
            max_pages=max_pages,
            collect_details=truthy(pick("collectDetails", "collect_details", default=True)),
            dedupe=truthy(pick("dedupe", default=True)),
            start_urls=_parse_start_urls(pick("startUrls", "start_urls")),
            start_url=_opt_str(pick("startUrl", "start_url")),
            url=_opt_str(pick("url")),
            proxy_configuration=dict(proxy_configuration) if proxy_configuration else None,
            max_concurrency=_int_setting(
                pick("max_concurrency", "maxConcurrency", default=os.getenv("JOBS_CZ_MAX_CONCURRENCY") or 10),
                "max_concurrency",
            ),
            max_request_retries=_int_setting(
                pick("max_request_retries", "maxRequestRetries", default=3), "max_request_retries"
            ),
            request_timeout=_float_setting(pick("request_timeout", "requestTimeout", default=30.0), "request_timeout"),
            output_path=str(
                pick("output_path", "outputPath", default=os.getenv("JOBS_CZ_OUTPUT_PATH") or DEFAULT_OUTPUT_PATH)
            ).strip(),
        )
        _validate_settings(settings)
        return settings


# -----------------------------
# Helpers
# -----------------------------
def load_input(path: str) -> dict[str, Any]:
    """Read a JSON input file (one object)."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"input file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"input file is invalid JSON: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"input file must contain a JSON object: {path}")
    return data


def _budget_int(raw: Any, default: int, non_finite: int) -> int:
    if raw is None:
        return default
    n = finite_number(raw)
    if n is None:
        return non_finite
    return max(1, int(n))


def _int_setting(raw: Any, name: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"'{name}' must be an integer (got {raw!r}).") from e


def _float_setting(raw: Any, name: str) -> float:
    n = finite_number(raw)
    if n is None:
        raise ConfigError(f"'{name}' must be a number (got {raw!r}).")
    return n


def _opt_str(v: Any) -> str | None:
    s = str(v or "").strip()
    return s or None


def _parse_start_urls(value: Any) -> list[str]:
    """
    Accepts: ["https://...", ...] or [{"url": "https://..."}, ...] (request-list style).
    """
    if not value:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ConfigError("'startUrls' must be a list.")
    out: list[str] = []
    for i, item in enumerate(value):
        if isinstance(item, dict):
            u = str(item.get("url") or "").strip()
        elif isinstance(item, str):
            u = item.strip()
        else:
            raise ConfigError(f"startUrls[{i}] must be a string or an object with 'url'.")
        if u:
            out.append(u)
    return out


def _validate_settings(s: Settings) -> None:
    if s.max_concurrency <= 0:
        raise ConfigError("'max_concurrency' must be >= 1.")
    if s.max_request_retries < 0:
        raise ConfigError("'max_request_retries' must be >= 0.")
    if s.request_timeout <= 0:
        raise ConfigError("'request_timeout' must be > 0.")
    if not s.output_path:
        raise ConfigError("'output_path' cannot be empty.")
