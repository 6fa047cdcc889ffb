# modules/jobs_cz/lib/__init__.py
from __future__ import annotations

# Re-export commonly-used types for convenience
from .config import ConfigError, Settings, load_input
from .controller import CrawlController, resolve_seed_urls
from .dataset import JsonlDataset
from .detail_page import process_detail_page
from .list_page import process_list_page
from .models import CrawlRequest, JobRecord, ListPageResult, RunSummary
from .state import RunState

__all__ = [
    "ConfigError",
    "CrawlController",
    "CrawlRequest",
    "JobRecord",
    "JsonlDataset",
    "ListPageResult",
    "RunState",
    "RunSummary",
    "Settings",
    "load_input",
    "process_detail_page",
    "process_list_page",
    "resolve_seed_urls",
]
