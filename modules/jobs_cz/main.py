from __future__ import annotations

from typing import Any

from .lib.config import Settings
from .lib.controller import CrawlController
from .lib.logging_bridge import activity as log_activity


def run(**kwargs: Any) -> dict[str, Any]:
    """
    Entry point for the 'jobs_cz' module.

    Accepts kwargs (actor-style input), including:
      keyword / location / category: str = ""
      results_wanted: int = 100
      max_pages: int = 999
      collectDetails: bool = True
      startUrl / startUrls / url: seed overrides
      proxyConfiguration: dict | None
      dedupe: bool = True
      output_path: str = "./storage/datasets/default.jsonl"

    Returns:
      The run summary as a dict (saved, requests_finished, requests_failed, ...).

    Raises:
      ConfigError for invalid input or seeds; nothing is crawled in that case.
    """
    settings = Settings.from_env_and_kwargs(kwargs)

    log_activity({
        "component": "jobs_cz.main",
        "op": "configured",
        "keyword": settings.keyword,
        "location": settings.location,
        "category": settings.category,
        "output_path": settings.output_path,
        "flags": {
            "collect_details": settings.collect_details,
            "dedupe": settings.dedupe,
            "proxy": settings.proxy_url() is not None,
        },
    })

    summary = CrawlController(settings).run()
    return summary.to_dict()
