"""
Crawl controller for jobs.cz.

Owns the run-scoped state (seen set + result budget), seeds LIST requests,
and routes each fetched page to the list or detail processor:

  LIST   -> detail links are admitted (dedupe + budget) and queued as DETAIL
            requests, or emitted directly as link records in link-only mode;
            the next LIST page is queued while budget and page ceiling allow
  DETAIL -> skipped once the budget is spent; otherwise extracted, a result
            slot is claimed atomically and the record is appended to the sink

A failure inside one DETAIL extraction drops that item only.
"""

from __future__ import annotations

import logging
import threading
import traceback

from . import logging_bridge
from .config import ConfigError, Settings
from .dataset import JsonlDataset
from .detail_page import process_detail_page
from .engine import CrawlContext, CrawlEngine, TextFetcher
from .http_client import HttpClient
from .list_page import process_list_page
from .models import DETAIL, LINK_SOURCE, LIST, CrawlRequest, RunSummary
from .state import RunState
from .urls import build_search_url

log = logging.getLogger(__name__)


def resolve_seed_urls(settings: Settings) -> list[str]:
    """
    Seeds in priority order: startUrls, then startUrl, then url; all explicit
    seeds are combined. Without any, the search URL is built from the filters.
    Raises ConfigError for a seed that is not an absolute http(s) URL.
    """
    seeds: list[str] = []
    if settings.start_urls:
        seeds.extend(settings.start_urls)
        log.info("Using %d custom start URL(s)", len(settings.start_urls))
    if settings.start_url:
        seeds.append(settings.start_url)
        log.info("Using custom start URL: %s", settings.start_url)
    if settings.url:
        seeds.append(settings.url)
        log.info("Using custom URL: %s", settings.url)
    if not seeds:
        seeds.append(build_search_url(settings.keyword, settings.location, settings.category))

    for s in seeds:
        if not s.lower().startswith(("http://", "https://")):
            raise ConfigError(f"Seed URL must be absolute http(s): {s!r}")
    return seeds


class CrawlController:
    def __init__(
        self,
        settings: Settings,
        *,
        dataset: JsonlDataset | None = None,
        client: TextFetcher | None = None,
    ) -> None:
        self.settings = settings
        self.state = RunState(settings.results_wanted, settings.max_pages, dedupe=settings.dedupe)
        self.dataset = dataset if dataset is not None else JsonlDataset(settings.output_path)

        self._owns_client = client is None
        self.client: TextFetcher = client or HttpClient(
            timeout=settings.request_timeout,
            max_retries=settings.max_request_retries,
            proxy_url=settings.proxy_url(),
            pool_size=settings.max_concurrency,
        )
        self.engine = CrawlEngine(self.handle, client=self.client, max_concurrency=settings.max_concurrency)

        self._failures_lock = threading.Lock()
        self.detail_failures = 0

    # --------------------------------------------------------------------- #
    #  Enqueue / emit
    # --------------------------------------------------------------------- #
    def enqueue_detail_links(self, links: list[str]) -> list[str]:
        """Admit links against the seen set and remaining budget, then queue DETAIL requests."""
        admitted = self.state.admit_links(links)
        if admitted:
            self.engine.add_requests(CrawlRequest(url=u, label=DETAIL) for u in admitted)
        return admitted

    def emit_link_records(self, links: list[str]) -> list[str]:
        """Link-only mode: each admitted link is itself a result."""
        admitted = self.state.admit_links(links, count_as_saved=True)
        if admitted:
            self.dataset.push_data([{"url": u, "_source": LINK_SOURCE} for u in admitted])
        return admitted

    # --------------------------------------------------------------------- #
    #  Request handler
    # --------------------------------------------------------------------- #
    def handle(self, ctx: CrawlContext) -> None:
        if ctx.request.label == LIST:
            self._handle_list(ctx)
        elif ctx.request.label == DETAIL:
            self._handle_detail(ctx)

    def _handle_list(self, ctx: CrawlContext) -> None:
        req = ctx.request
        on_links = self.enqueue_detail_links if self.settings.collect_details else self.emit_link_records
        result = process_list_page(ctx.soup, req.url, req.page_no, self.state, on_links=on_links)

        if result.should_paginate and result.next_url:
            log.info("Queueing next page %d: %s", req.page_no + 1, result.next_url)
            ctx.enqueue([CrawlRequest(url=result.next_url, label=LIST, page_no=req.page_no + 1)])

    def _handle_detail(self, ctx: CrawlContext) -> None:
        url = ctx.request.url
        if self.state.budget_reached():
            log.debug("Budget reached; skipping %s", url)
            return

        try:
            record = process_detail_page(ctx.soup, url, self.settings.category or None)
        except Exception as e:
            with self._failures_lock:
                self.detail_failures += 1
            log.exception("DETAIL %s failed: %s", url, e)
            logging_bridge.error({
                "component": "jobs_cz.controller",
                "op": "detail_failed",
                "url": url,
                "error": repr(e),
                "traceback": traceback.format_exc(),
            })
            return

        if not self.state.claim_result():
            log.debug("Budget reached after extraction; discarding %s", url)
            return

        self.dataset.push_data(record.to_dict())
        log.info(
            "Scraped job %d/%d: %s at %s",
            self.state.saved_count,
            self.state.results_wanted,
            record.title,
            record.company or "Unknown",
        )

    # --------------------------------------------------------------------- #
    #  Run
    # --------------------------------------------------------------------- #
    def run(self) -> RunSummary:
        try:
            seeds = resolve_seed_urls(self.settings)
            logging_bridge.activity({
                "component": "jobs_cz.controller",
                "op": "start",
                "seeds": seeds,
                "results_wanted": self.state.results_wanted,
                "max_pages": self.state.max_pages,
                "collect_details": self.settings.collect_details,
                "dedupe": self.settings.dedupe,
            })
            stats = self.engine.run(CrawlRequest(url=u, label=LIST, page_no=1) for u in seeds)
        finally:
            if self._owns_client and isinstance(self.client, HttpClient):
                self.client.close()

        summary = RunSummary(
            saved=self.state.saved_count,
            results_wanted=self.state.results_wanted,
            requests_finished=stats.requests_finished,
            requests_failed=stats.requests_failed,
            detail_failures=self.detail_failures,
            seeds=seeds,
            output_path=getattr(self.dataset, "path", None),
        )
        log.info("Finished. Saved %d items", summary.saved)
        logging_bridge.activity({
            "component": "jobs_cz.controller",
            "op": "summary",
            **summary.to_dict(),
            "requests_by_label": dict(stats.by_label),
            "seen_urls": self.state.seen_count(),
            "duration_us": stats.duration_us,
        })
        return summary
