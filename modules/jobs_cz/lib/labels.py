"""
Text sanitization for scraped UI labels and description text.

Heuristic selectors regularly land on navigation chrome, stylesheet text or a
bare class name instead of content; clean_label() is the gate every
heuristically scraped label passes through.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from .utils import collapse_ws

LABEL_MIN_LEN = 2
LABEL_MAX_LEN = 120

_CSS_PUNCT_RE = re.compile(r"[{};]")
# Selector-shaped: only selector characters, and either a selector marker (. # > _)
# or a class-name style chain of three or more hyphenated lowercase segments.
# Plain words ("Praha") and short hyphenations ("full-time") are not selectors.
_SELECTOR_CHARS_RE = re.compile(r"^[-_a-z0-9.#>]+$", re.IGNORECASE)
_SELECTOR_MARKER_RE = re.compile(r"[._#>]")
_CLASS_CHAIN_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+){2,}$")
_CHROME_RE = re.compile(
    r"\b(?:menu|navigation|nav|cookies?|privacy|terms|home|back to search)\b|jobs\.cz",
    re.IGNORECASE,
)

_JOB_TYPE_SPLIT_RE = re.compile(r"[,/|]")
_JOB_TYPE_ALLOWED_RE = re.compile(
    r"(full[- ]?time|part[- ]?time|intern|temporary|contract|freelance|brigáda|HPP|DPP|DPČ|remote|on[- ]site|hybrid)",
    re.IGNORECASE,
)

_NON_TEXT_TAGS = ("script", "style", "noscript", "iframe")


def clean_label(raw: str | None) -> str | None:
    """
    Collapse whitespace and reject anything that does not look like a content label:
    CSS punctuation, a bare selector-shaped token, navigation/chrome vocabulary,
    or a length outside [LABEL_MIN_LEN, LABEL_MAX_LEN].
    """
    t = collapse_ws(raw)
    if not t:
        return None
    if _CSS_PUNCT_RE.search(t):
        return None
    if _looks_like_selector(t):
        return None
    if _CHROME_RE.search(t):
        return None
    if len(t) < LABEL_MIN_LEN or len(t) > LABEL_MAX_LEN:
        return None
    return t


def _looks_like_selector(t: str) -> bool:
    if not _SELECTOR_CHARS_RE.match(t):
        return False
    return bool(_SELECTOR_MARKER_RE.search(t) or _CLASS_CHAIN_RE.match(t))


def normalize_job_type(raw: str | None) -> str | None:
    """
    Clean an employment-type label and keep only segments from the employment vocabulary.
    "Plný úvazek / HPP | Praha" -> "HPP"; falls back to the cleaned text if no segment matches.
    """
    jt = clean_label(raw)
    if not jt:
        return None
    parts = [p.strip() for p in _JOB_TYPE_SPLIT_RE.split(jt) if p.strip()]
    kept = [p for p in parts if _JOB_TYPE_ALLOWED_RE.search(p)]
    return ", ".join(kept) if kept else jt


def clean_text(html: str | None) -> str:
    """Plain text of an HTML fragment, without script/style/noscript/iframe content."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for el in soup.find_all(_NON_TEXT_TAGS):
        el.decompose()
    return collapse_ws(soup.get_text(" "))
