"""
Crawl engine: a request queue drained by a bounded worker pool.

  - Fetch a URL (HttpClient owns retries/backoff/timeouts/proxy)
  - Parse it with BeautifulSoup and hand a CrawlContext to the handler
  - Handlers enqueue follow-up requests through the context

Every request is processed independently and may run concurrently with any
other; there is no ordering guarantee between LIST and DETAIL work. A failed
fetch or a handler exception fails that request only.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable, Iterable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Protocol

import requests
from bs4 import BeautifulSoup

from . import logging_bridge
from .models import CrawlRequest

log = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """The HTTP layer gave up on a request (after its own retries)."""


class TextFetcher(Protocol):
    def get_text(self, url: str) -> str: ...


@dataclass
class CrawlContext:
    request: CrawlRequest
    soup: BeautifulSoup
    engine: CrawlEngine

    def enqueue(self, reqs: Iterable[CrawlRequest]) -> None:
        self.engine.add_requests(reqs)


@dataclass
class EngineStats:
    requests_finished: int = 0
    requests_failed: int = 0
    by_label: dict[str, int] = field(default_factory=dict)
    duration_us: int = 0


Handler = Callable[[CrawlContext], None]


class CrawlEngine:
    def __init__(self, handler: Handler, *, client: TextFetcher, max_concurrency: int = 10) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._handler = handler
        self._client = client
        self.max_concurrency = max_concurrency
        self._queue: deque[CrawlRequest] = deque()
        self._lock = threading.Lock()
        self.stats = EngineStats()

    def add_requests(self, reqs: Iterable[CrawlRequest]) -> None:
        batch = list(reqs)
        if not batch:
            return
        with self._lock:
            self._queue.extend(batch)

    def pending(self) -> int:
        with self._lock:
            return len(self._queue)

    # --------------------------------------------------------------------- #
    def run(self, seeds: Iterable[CrawlRequest] = ()) -> EngineStats:
        """Process seeds and everything they enqueue; returns when the queue is drained."""
        t0 = time.perf_counter_ns()
        self.add_requests(seeds)

        with ThreadPoolExecutor(max_workers=self.max_concurrency, thread_name_prefix="crawl") as pool:
            in_flight: dict[Future[None], CrawlRequest] = {}
            while True:
                with self._lock:
                    while self._queue and len(in_flight) < self.max_concurrency:
                        req = self._queue.popleft()
                        in_flight[pool.submit(self._process, req)] = req
                if not in_flight:
                    break

                done, _ = wait(in_flight, return_when=FIRST_COMPLETED)
                for fut in done:
                    req = in_flight.pop(fut)
                    try:
                        fut.result()
                        self.stats.requests_finished += 1
                        self.stats.by_label[req.label] = self.stats.by_label.get(req.label, 0) + 1
                    except Exception as e:
                        self.stats.requests_failed += 1
                        log.error("%s %s failed: %r", req.label, req.url, e)
                        logging_bridge.error({
                            "component": "jobs_cz.engine",
                            "op": "request_failed",
                            "label": req.label,
                            "page_no": req.page_no,
                            "url": req.url,
                            "error": repr(e),
                        })

        self.stats.duration_us = int((time.perf_counter_ns() - t0) // 1000)
        return self.stats

    def _process(self, req: CrawlRequest) -> None:
        try:
            html = self._client.get_text(req.url)
        except requests.RequestException as e:
            raise FetchError(f"fetch failed for {req.url}: {e!r}") from e
        soup = BeautifulSoup(html, "html.parser")
        self._handler(CrawlContext(request=req, soup=soup, engine=self))
