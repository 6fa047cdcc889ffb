from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

LIST = "LIST"
DETAIL = "DETAIL"
LABELS = frozenset({LIST, DETAIL})

LINK_SOURCE = "jobs.cz"


@dataclass(frozen=True)
class CrawlRequest:
    """
    One unit of work for the crawl engine.
    Created by the controller (seeds) or the list-page processor (derived);
    consumed exactly once.
    """

    url: str
    label: str = LIST
    page_no: int = 1

    def __post_init__(self) -> None:
        if self.label not in LABELS:
            raise ValueError(f"Unknown request label {self.label!r}; expected one of {sorted(LABELS)}.")
        if self.page_no < 1:
            raise ValueError(f"page_no must be >= 1 (got {self.page_no}).")


@dataclass(frozen=True)
class JobRecord:
    """
    A single normalized job posting, emitted once per processed detail page.
    Every field except url may be None when the page did not yield it.
    """

    title: str | None = None
    company: str | None = None
    category: str | None = None
    location: str | None = None
    salary: str | None = None
    job_type: str | None = None
    date_posted: str | None = None
    description_html: str | None = None
    description_text: str | None = None
    url: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ListPageResult:
    """
    Outcome of processing one listing page.
    - links: canonical detail URLs in page order (unique)
    - should_paginate: whether a next LIST request should be queued
    - next_url: the next page URL when should_paginate is True
    """

    links: list[str] = field(default_factory=list)
    should_paginate: bool = False
    next_url: str | None = None


@dataclass
class RunSummary:
    saved: int = 0
    results_wanted: int = 0
    requests_finished: int = 0
    requests_failed: int = 0
    detail_failures: int = 0
    seeds: list[str] = field(default_factory=list)
    output_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
