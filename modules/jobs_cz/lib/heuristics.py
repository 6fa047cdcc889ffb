"""
HTML fallback extraction for detail pages.

Each field has an ordered strategy chain (FIELD_STRATEGIES). A strategy is a
named pure function soup -> str | None; run_chain() returns the first non-empty
result and never retries a later candidate once one has produced text. Label
cleaning happens after the chain: a rejected label becomes None, it does not
advance the chain.

Description extraction works on a private copy of the document:
  A) strip non-content regions (header/nav/footer, dialogs, cookie banners)
  B) collect the blocks between the localized start/end section markers
  C) otherwise, fall back to content selectors, then the first large block
  D) sanitize to a small tag whitelist
"""

from __future__ import annotations

import copy
import re
from collections.abc import Callable
from dataclasses import dataclass

from bs4 import BeautifulSoup, Comment, Tag

from .labels import clean_label, normalize_job_type
from .utils import collapse_ws

# --------------------------------------------------------------------------- #
#  Localized vocabulary
# --------------------------------------------------------------------------- #
DESCRIPTION_START_RE = re.compile(r"Pracovní nabídka|Popis pozice|Job description", re.IGNORECASE)
DESCRIPTION_END_RE = re.compile(r"Informace o pozici|Position information", re.IGNORECASE)

EMPLOYMENT_FORM_RE = re.compile(r"Employment form|Typ pracovního poměru|Forma spolupráce", re.IGNORECASE)
POSITION_TYPE_RE = re.compile(r"(?:Position type|Typ pozice)\s*:?\s*", re.IGNORECASE)
EMPLOYMENT_KEYWORDS = ("full-time", "full time", "part-time", "part time", "contract", "plný úvazek", "zkrácený úvazek")
EMPLOYMENT_TEXT_MAX_LEN = 80

SALARY_RANGE_RE = re.compile(r"\d+\s*(?:000)?\s*(?:-|–|až)\s*\d+\s*(?:000)?\s*Kč", re.IGNORECASE)

PUBLISH_DATE_RE = re.compile(
    r"(?:Datum zveřejnění|Zveřejněno|Publikováno|Published|Posted)\s*:?\s*"
    r"(\d{1,2}\.\s?\d{1,2}\.\s?\d{4}|\d{4}-\d{2}-\d{2})",
    re.IGNORECASE,
)
LISTED_IN_RE = re.compile(r"Listed in|Zařazeno do", re.IGNORECASE)
_LISTED_IN_PREFIX_RE = re.compile(r".*(?:Listed in|Zařazeno do)\s*:?\s*", re.IGNORECASE | re.DOTALL)

# --------------------------------------------------------------------------- #
#  Description constants
# --------------------------------------------------------------------------- #
NON_CONTENT_SELECTORS = (
    "header",
    "nav",
    "footer",
    "dialog",
    '[role="dialog"]',
    '[id*="modal" i]',
    '[class*="modal" i]',
    '[id*="cookie" i]',
    '[class*="cookie" i]',
    ".Alert",
    ".JobDescriptionSendAdToEmailModal",
    ".TextField",
    ".TextArea",
)

DESCRIPTION_SELECTORS = (
    '[itemprop="description"]',
    ".job-description",
    '[class*="description"]',
    '[class*="job-detail"]',
    "article",
    ".content",
    "main",
)
SELECTOR_MIN_TEXT = 100
BLOCK_MIN_TEXT = 200
BLOCK_MIN_CHILDREN = 2

ALLOWED_TAGS = frozenset({"p", "br", "strong", "b", "i", "em", "ul", "ol", "li", "a", "h1", "h2", "h3", "h4"})
_NON_TEXT_TAGS = ("script", "style", "noscript", "iframe", "template")


# --------------------------------------------------------------------------- #
#  Strategy plumbing
# --------------------------------------------------------------------------- #
@dataclass(frozen=True)
class Strategy:
    name: str
    fn: Callable[[BeautifulSoup], str | None]

    def __call__(self, soup: BeautifulSoup) -> str | None:
        return self.fn(soup)


def _text_of(el: Tag | None) -> str | None:
    if el is None:
        return None
    return collapse_ws(el.get_text(" ")) or None


def _select_text(selector: str) -> Callable[[BeautifulSoup], str | None]:
    def _fn(soup: BeautifulSoup) -> str | None:
        return _text_of(soup.select_one(selector))

    return _fn


def _select_attr(selector: str, attr: str) -> Callable[[BeautifulSoup], str | None]:
    def _fn(soup: BeautifulSoup) -> str | None:
        el = soup.select_one(selector)
        if el is None:
            return None
        return collapse_ws(str(el.get(attr) or "")) or None

    return _fn


def _content_root(root: Tag) -> Tag:
    body = root.body if isinstance(root, BeautifulSoup) else None
    return body or root


def _innermost_matching(root: Tag, pattern: re.Pattern[str]) -> Tag | None:
    """
    First element (document order) whose whitespace-collapsed text matches pattern while none of its
    child elements' text does; i.e. the tightest element around the match.
    Searches the body when there is one, so <title> never counts.
    """
    root = _content_root(root)
    for el in root.find_all(True):
        if el.name in _NON_TEXT_TAGS:
            continue
        if not pattern.search(collapse_ws(el.get_text(" "))):
            continue
        if any(pattern.search(collapse_ws(child.get_text(" "))) for child in el.find_all(True, recursive=False)):
            continue
        return el
    return None


def run_chain(field: str, soup: BeautifulSoup) -> str | None:
    """Evaluate FIELD_STRATEGIES[field] in order; first non-empty result wins."""
    for strategy in FIELD_STRATEGIES[field]:
        value = strategy(soup)
        if value:
            return value
    return None


def extract_field(field: str, soup: BeautifulSoup) -> str | None:
    """run_chain() plus the field's label post-processing (if any)."""
    raw = run_chain(field, soup)
    post = POSTPROCESS.get(field)
    if raw is None or post is None:
        return raw
    return post(raw)


# --------------------------------------------------------------------------- #
#  Field strategies
# --------------------------------------------------------------------------- #
def _company_short_class_match(soup: BeautifulSoup) -> str | None:
    for el in soup.select('[class*="company"]'):
        raw = el.get_text().strip()
        if 0 < len(raw) < 100 and "\n" not in raw:
            return collapse_ws(raw)
    return None


def _salary_text_scan(soup: BeautifulSoup) -> str | None:
    return _text_of(_innermost_matching(soup, SALARY_RANGE_RE))


def _job_type_label_sibling(soup: BeautifulSoup) -> str | None:
    label = _innermost_matching(soup, EMPLOYMENT_FORM_RE)
    if label is None:
        return None
    return _text_of(label.find_next_sibling())


def _job_type_label_parent(soup: BeautifulSoup) -> str | None:
    label = _innermost_matching(soup, POSITION_TYPE_RE)
    if label is None:
        return None
    own = collapse_ws(POSITION_TYPE_RE.sub("", collapse_ws(label.get_text(" "))))
    if own:
        return own
    parent = label.parent
    if parent is None:
        return None
    return collapse_ws(POSITION_TYPE_RE.sub("", collapse_ws(parent.get_text(" ")))) or None


def _job_type_definition_list(soup: BeautifulSoup) -> str | None:
    for dt in soup.find_all("dt"):
        if EMPLOYMENT_FORM_RE.search(collapse_ws(dt.get_text(" "))):
            return _text_of(dt.find_next_sibling("dd"))
    return None


def _job_type_text_scan(soup: BeautifulSoup) -> str | None:
    for el in _content_root(soup).find_all(True):
        if el.name in _NON_TEXT_TAGS:
            continue
        text = collapse_ws(el.get_text(" "))
        if len(text) >= EMPLOYMENT_TEXT_MAX_LEN:
            continue
        lowered = text.lower()
        if any(k in lowered for k in EMPLOYMENT_KEYWORDS):
            return text
    return None


def _date_label_scan(soup: BeautifulSoup) -> str | None:
    m = PUBLISH_DATE_RE.search(collapse_ws(_content_root(soup).get_text(" ")))
    return m.group(1) if m else None


def _category_listed_in(soup: BeautifulSoup) -> str | None:
    el = _innermost_matching(soup, LISTED_IN_RE)
    if el is None:
        return None
    return collapse_ws(_LISTED_IN_PREFIX_RE.sub("", collapse_ws(el.get_text(" ")))) or None


FIELD_STRATEGIES: dict[str, tuple[Strategy, ...]] = {
    "title": (
        Strategy("h1", _select_text("h1")),
        Strategy("microdata_title", _select_text('[itemprop="title"]')),
        Strategy("header_h1", _select_text("header h1")),
    ),
    "company": (
        Strategy("microdata_org_name", _select_text('[itemprop="hiringOrganization"] [itemprop="name"]')),
        Strategy("microdata_org", _select_text('[itemprop="hiringOrganization"]')),
        Strategy("company_name_class", _select_text('[class*="company-name"]')),
        Strategy("company_profile_link", _select_text('a[href*="/spolecnosti/"]')),
        Strategy("company_class_short", _company_short_class_match),
    ),
    "location": (
        Strategy("microdata_address", _select_text('[itemprop="jobLocation"] [itemprop="address"]')),
        Strategy("microdata_location", _select_text('[itemprop="jobLocation"]')),
        Strategy("location_class", _select_text('[class*="location"]')),
        Strategy("map_link", _select_text('a[href*="mapy.cz"], a[href*="maps.google."], a[href*="google.com/maps"]')),
    ),
    "salary": (
        Strategy("microdata_salary", _select_text('[itemprop="baseSalary"]')),
        Strategy("salary_class", _select_text(".salary")),
        Strategy("salary_class_contains", _select_text('[class*="salary"]')),
        Strategy("salary_range_text", _salary_text_scan),
    ),
    "job_type": (
        Strategy("microdata_employment_type", _select_text('[itemprop="employmentType"]')),
        Strategy("employment_form_sibling", _job_type_label_sibling),
        Strategy("position_type_parent", _job_type_label_parent),
        Strategy("employment_form_dl", _job_type_definition_list),
        Strategy("employment_keyword_text", _job_type_text_scan),
    ),
    "date_posted": (
        Strategy("microdata_date_content", _select_attr('[itemprop="datePosted"]', "content")),
        Strategy("microdata_date_text", _select_text('[itemprop="datePosted"]')),
        Strategy("time_datetime", _select_attr("time[datetime]", "datetime")),
        Strategy("time_text", _select_text("time")),
        Strategy("publish_date_label", _date_label_scan),
    ),
    "category": (
        Strategy("microdata_occupational_category", _select_text('[itemprop="occupationalCategory"]')),
        Strategy("microdata_job_category", _select_text('[itemprop="jobCategory"]')),
        Strategy("microdata_industry", _select_text('[itemprop="industry"]')),
        Strategy("listed_in_text", _category_listed_in),
        Strategy("category_class", _select_text('[class*="category" i]')),
    ),
}

POSTPROCESS: dict[str, Callable[[str], str | None]] = {
    "company": clean_label,
    "location": clean_label,
    "category": clean_label,
    "job_type": normalize_job_type,
}


# --------------------------------------------------------------------------- #
#  Description
# --------------------------------------------------------------------------- #
def strip_non_content(soup: BeautifulSoup) -> BeautifulSoup:
    """Remove navigation/chrome regions in place and return the same soup."""
    for selector in NON_CONTENT_SELECTORS:
        for el in soup.select(selector):
            el.decompose()
    return soup


def _child_of(ancestor: Tag, node: Tag) -> Tag:
    """The ancestor-or-self of node whose parent is ancestor."""
    current = node
    while current.parent is not ancestor:
        current = current.parent
    return current


def _between_markers(soup: BeautifulSoup) -> str | None:
    start = _innermost_matching(soup, DESCRIPTION_START_RE)
    end = _innermost_matching(soup, DESCRIPTION_END_RE)
    if start is None or end is None or start is end:
        return None

    end_line = [end, *end.parents]
    lca = next((a for a in [start, *start.parents] if any(a is b for b in end_line)), None)
    if lca is None or lca is start or lca is end:
        return None

    start_block = _child_of(lca, start)
    end_block = _child_of(lca, end)

    parts: list[str] = []
    for sib in start_block.next_siblings:
        if sib is end_block:
            return "\n".join(parts).strip() or None
        if isinstance(sib, Tag):
            parts.append(str(sib))
    # end marker precedes start marker
    return None


def _by_selectors(soup: BeautifulSoup) -> str | None:
    for selector in DESCRIPTION_SELECTORS:
        el = soup.select_one(selector)
        if el is not None and len(el.get_text().strip()) > SELECTOR_MIN_TEXT:
            return el.decode_contents().strip()

    for el in _content_root(soup).find_all(True):
        if el.name in _NON_TEXT_TAGS:
            continue
        if len(el.get_text().strip()) > BLOCK_MIN_TEXT and len(el.find_all(True, recursive=False)) > BLOCK_MIN_CHILDREN:
            return el.decode_contents().strip()
    return None


def extract_description(soup: BeautifulSoup) -> str | None:
    """Sanitized description HTML for the page, or None. The given soup is not modified."""
    work = strip_non_content(copy.copy(soup))
    raw = _between_markers(work) or _by_selectors(work)
    return sanitize_description_html(raw)


def sanitize_description_html(html: str | None) -> str | None:
    """
    Keep only ALLOWED_TAGS: other elements are replaced by their children,
    script-like subtrees and comments are dropped. Running it on its own output is a no-op.
    """
    if not html or not html.strip():
        return None
    frag = BeautifulSoup(html, "html.parser")
    for el in frag.find_all(_NON_TEXT_TAGS):
        el.decompose()
    for c in frag.find_all(string=lambda s: isinstance(s, Comment)):
        c.extract()
    for el in frag.find_all(True):
        if (el.name or "").lower() not in ALLOWED_TAGS:
            el.unwrap()
    out = frag.decode().strip()
    return out or None
