"""
URL helpers for jobs.cz: absolute resolution, detail-URL canonicalization,
search (seed) URL construction and pagination URLs.

None of these raise on malformed input; callers get None and decide.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

log = logging.getLogger(__name__)

BASE_URL = "https://www.jobs.cz"
SEARCH_PATH = "/prace/"

# Detail pages carry a numeric id segment, e.g. /rpd/2000123456/
DETAIL_PATH_RE = re.compile(r"/rpd/\d+", re.IGNORECASE)

PAGE_PARAM = "page"


def _is_absolute_http(url: str) -> bool:
    try:
        parts = urlsplit(url)
    except ValueError:
        return False
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def resolve_absolute(href: str | None, base_url: str = BASE_URL) -> str | None:
    """
    Resolve a possibly-relative href against base_url.
    Returns None for empty input, a non-absolute base, or anything urljoin rejects.
    """
    if not href or not str(href).strip():
        return None
    if not _is_absolute_http(base_url):
        return None
    try:
        resolved = urljoin(base_url, str(href).strip())
        urlsplit(resolved)  # surfaces bad IPv6 hosts etc.
    except ValueError:
        return None
    return resolved


def canonicalize_detail_url(url: str) -> str:
    """Strip query string and fragment; the result is the dedupe key and the enqueue target."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def is_detail_url(url: str | None) -> bool:
    if not url:
        return False
    try:
        path = urlsplit(url).path
    except ValueError:
        return False
    return bool(DETAIL_PATH_RE.search(path))


def build_search_url(keyword: str | None = None, location: str | None = None, category: str | None = None) -> str:
    """
    Build the seed listing URL from optional free-text filters.
    Empty filters are omitted; each value is percent-encoded into its own parameter.
    """
    params: list[tuple[str, str]] = []

    kw = str(keyword or "").strip()
    if kw:
        params.append(("q[]", kw))
        log.info('Searching for keyword: "%s"', kw)

    loc = str(location or "").strip()
    if loc:
        params.append(("locality[]", loc))
        log.info('Filtering by location: "%s"', loc)

    cat = str(category or "").strip()
    if cat:
        params.append(("category[]", cat))
        log.info('Filtering by category: "%s"', cat)

    url = f"{BASE_URL}{SEARCH_PATH}"
    if params:
        url = f"{url}?{urlencode(params)}"
    log.info("Built search URL: %s", url)
    return url


def build_next_page_url(current_url: str, next_page: int) -> str | None:
    """
    Set (or overwrite) the page parameter on current_url.
    Returns None when current_url cannot be parsed as an absolute URL; pagination stops there.
    """
    if not _is_absolute_http(current_url):
        log.warning("Failed to construct next page URL from %s: not an absolute http(s) URL", current_url)
        return None
    try:
        parts = urlsplit(current_url)
        query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != PAGE_PARAM]
    except ValueError as e:
        log.warning("Failed to construct next page URL from %s: %s", current_url, e)
        return None
    query.append((PAGE_PARAM, str(next_page)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))
