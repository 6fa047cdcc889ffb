# tests/conftest.py
import os
import tempfile
import threading
import types
import warnings
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from bs4 import BeautifulSoup
from freezegun import freeze_time

from modules.jobs_cz.lib import config as jc_config

warnings.filterwarnings("error", category=DeprecationWarning)


# ---------------------------------------------------------------------
# Live tests are opt-in: use --live or RUN_LIVE_TESTS=1
# ---------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--live",
        action="store_true",
        default=False,
        help="Run tests marked as 'live' (network calls or external services).",
    )


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "live: marks tests that perform live network calls or hit external services (skipped by default).",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    run_live = config.getoption("--live") or os.getenv("RUN_LIVE_TESTS") == "1"
    if run_live:
        return
    skip_live = pytest.mark.skip(reason="live tests disabled (use --live or RUN_LIVE_TESTS=1)")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


# ---------------------------------------------------------------------
# Test-wide env defaults (autouse, function-scoped)
# ---------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _env_defaults(monkeypatch):
    # Write logs to a throwaway dir so real logs stay clean (per test)
    tmp_logs = tempfile.mkdtemp(prefix="jobs-cz-pytest-logs-")
    monkeypatch.setenv("LOG_DIR", tmp_logs)
    monkeypatch.setenv("ACTIVITY_LOG_PREFIX", "activity-test")
    monkeypatch.setenv("ERROR_LOG_PREFIX", "error-test")
    monkeypatch.delenv("JOBS_CZ_OUTPUT_PATH", raising=False)
    monkeypatch.delenv("JOBS_CZ_MAX_CONCURRENCY", raising=False)
    monkeypatch.delenv("JOBS_CZ_INPUT", raising=False)
    yield


@pytest.fixture
def frozen_utc():
    with freeze_time("2025-01-01T00:00:00Z"):
        yield


# ---------------------------------------------------------------------
# HTML builders
# ---------------------------------------------------------------------
def page(body: str, head: str = "") -> str:
    return f"<!DOCTYPE html><html><head><title>Jobs.cz</title>{head}</head><body>{body}</body></html>"


def soup_of(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def listing_html(job_ids, *, next_link: bool = True, disabled_next: bool = False) -> str:
    cards = "".join(
        f'<article class="SearchResultCard"><h2><a href="/rpd/{jid}/?searchId=abc&rps=233">Job {jid}</a></h2></article>'
        for jid in job_ids
    )
    pager = ""
    if next_link:
        pager = '<nav class="pagination"><a rel="next" href="?page=2">›</a></nav>'
    if disabled_next:
        pager = '<div class="pagination"><a href="?page=1">1</a><span class="disabled">›</span></div>'
    return page(f"<main>{cards}</main>{pager}")


def detail_html(job_id, *, title: str | None = None, company: str = "Acme s.r.o.") -> str:
    title = title or f"Python Developer {job_id}"
    body = (
        f"<h1>{title}</h1>"
        f'<div itemprop="hiringOrganization"><span itemprop="name">{company}</span></div>'
        '<div itemprop="jobLocation"><span itemprop="address">Praha</span></div>'
        '<div class="job-description"><p>'
        + "We are looking for an experienced developer to join our growing team. " * 3
        + "</p></div>"
    )
    return page(body)


@pytest.fixture
def html_builders():
    return types.SimpleNamespace(
        page=page, soup=soup_of, listing=listing_html, detail=detail_html, page_no=page_no_of
    )


# ---------------------------------------------------------------------
# Fakes for the crawl engine
# ---------------------------------------------------------------------
class FakeClient:
    """
    Stand-in for HttpClient: serves HTML from a routing function.
    route(url) returns HTML or None (-> 404 HTTPError).
    """

    def __init__(self, route):
        self._route = route
        self._lock = threading.Lock()
        self.fetched: list[str] = []

    def get_text(self, url: str) -> str:
        with self._lock:
            self.fetched.append(url)
        html = self._route(url)
        if html is None:
            raise requests.HTTPError(f"404 Client Error: Not Found for url: {url}")
        return html

    def close(self) -> None:
        pass


class MemoryDataset:
    def __init__(self):
        self._lock = threading.Lock()
        self.rows: list[dict] = []
        self.path = None

    def push_data(self, items):
        rows = [items] if isinstance(items, dict) else list(items)
        with self._lock:
            self.rows.extend(dict(r) for r in rows)
        return len(rows)


def page_no_of(url: str) -> int:
    q = parse_qs(urlsplit(url).query)
    return int(q.get("page", ["1"])[0])


@pytest.fixture
def fake_site():
    """
    A jobs.cz-shaped site: listing page N holds 8 distinct detail links and always
    offers a next page; every /rpd/<id>/ URL serves a detail page.
    """

    def route(url: str):
        path = urlsplit(url).path
        if path.startswith("/rpd/"):
            jid = path.strip("/").split("/")[1]
            return detail_html(jid)
        if path.startswith("/prace/"):
            n = page_no_of(url)
            ids = [n * 100 + i for i in range(8)]
            return listing_html(ids, next_link=True)
        return None

    return FakeClient(route)


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def memory_dataset():
    return MemoryDataset()


@pytest.fixture
def make_settings(tmp_path):
    def _make(**kwargs):
        kwargs.setdefault("output_path", str(tmp_path / "dataset.jsonl"))
        kwargs.setdefault("max_concurrency", 1)
        return jc_config.Settings.from_env_and_kwargs(kwargs)

    return _make
