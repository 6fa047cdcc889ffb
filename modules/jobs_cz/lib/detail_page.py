from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from .heuristics import extract_description, extract_field
from .jsonld import extract_from_jsonld
from .labels import clean_label, clean_text
from .models import JobRecord

log = logging.getLogger(__name__)

# Fields filled from JSON-LD first, then from the heuristic chains
_CHAIN_FIELDS = ("title", "company", "location", "salary", "job_type", "date_posted")


def process_detail_page(
    soup: BeautifulSoup,
    request_url: str,
    configured_category: str | None = None,
) -> JobRecord:
    """
    Build a JobRecord for one detail page.

    JSON-LD values win field by field; heuristics only fill what JSON-LD left
    empty. An explicitly configured category wins over the page but still goes
    through clean_label. description_text is always derived from description_html.
    """
    data: dict[str, str | None] = dict(extract_from_jsonld(soup) or {})
    from_jsonld = sorted(k for k, v in data.items() if v)

    for field in _CHAIN_FIELDS:
        if not data.get(field):
            data[field] = extract_field(field, soup)

    if not data.get("description_html"):
        data["description_html"] = extract_description(soup)

    if (configured_category or "").strip():
        category = clean_label(configured_category)
    else:
        category = extract_field("category", soup)

    description_html = data.get("description_html")
    description_text = clean_text(description_html) or None

    log.debug("DETAIL %s: json-ld fields %s", request_url, from_jsonld)
    return JobRecord(
        title=data.get("title"),
        company=data.get("company"),
        category=category,
        location=data.get("location"),
        salary=data.get("salary"),
        job_type=data.get("job_type"),
        date_posted=data.get("date_posted"),
        description_html=description_html,
        description_text=description_text,
        url=request_url,
    )
