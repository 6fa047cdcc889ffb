from __future__ import annotations

import logging
import re
from collections.abc import Callable

from bs4 import BeautifulSoup

from .models import ListPageResult
from .state import RunState
from .urls import build_next_page_url, canonicalize_detail_url, is_detail_url, resolve_absolute

log = logging.getLogger(__name__)

# Text of a "next" control in the pager (arrow glyphs or the localized word)
_NEXT_TEXT_RE = re.compile(r"›|»|Další|Next", re.IGNORECASE)


def find_job_links(soup: BeautifulSoup, page_url: str) -> list[str]:
    """
    Canonical detail URLs linked from a listing page, unique, in page order.
    """
    links: dict[str, None] = {}
    for a in soup.find_all("a", href=True):
        abs_url = resolve_absolute(a.get("href"), page_url)
        if not abs_url or not is_detail_url(abs_url):
            continue
        links.setdefault(canonicalize_detail_url(abs_url), None)
    return list(links)


def has_next_page(soup: BeautifulSoup) -> bool:
    """
    A next page exists when there is a rel=next link or any page= link,
    unless the pager shows a disabled "next" control.
    """
    has_link = soup.select_one('a[rel="next"]') is not None or soup.select_one('a[href*="page="]') is not None
    if not has_link:
        return False
    for el in soup.select(".pagination .disabled"):
        if _NEXT_TEXT_RE.search(el.get_text(" ")):
            return False
    return True


def process_list_page(
    soup: BeautifulSoup,
    page_url: str,
    page_no: int,
    state: RunState,
    *,
    on_links: Callable[[list[str]], object] | None = None,
) -> ListPageResult:
    """
    Extract detail links, hand them to on_links (enqueue or emit), then decide on pagination.

    Paginates only if the budget is not spent, page_no is below max_pages, the
    page produced at least one link, and the DOM shows another page. The budget
    is read after on_links ran. A next URL that cannot be built stops
    pagination for this branch (logged, not raised).
    """
    links = find_job_links(soup, page_url)
    log.info("LIST page %d -> %d job links at %s", page_no, len(links), page_url)
    if on_links is not None:
        on_links(links)
    result = ListPageResult(links=links)

    if state.budget_reached():
        log.info("Reached target of %d results", state.results_wanted)
        return result
    if page_no >= state.max_pages:
        log.info("Reached maximum pages limit: %d", state.max_pages)
        return result
    if not links:
        log.info("No job links found on page %d", page_no)
        return result
    if not has_next_page(soup):
        log.info("No more pages available after page %d", page_no)
        return result

    next_url = build_next_page_url(page_url, page_no + 1)
    if not next_url:
        log.warning("Could not construct next page URL for page %d", page_no + 1)
        return result

    result.should_paginate = True
    result.next_url = next_url
    return result
