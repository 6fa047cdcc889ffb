# tests/test_jsonld.py
import json

from bs4 import BeautifulSoup

from modules.jobs_cz.lib.jsonld import extract_from_jsonld


def _doc(body: str = "", head: str = "") -> BeautifulSoup:
    return BeautifulSoup(f"<html><head>{head}</head><body>{body}</body></html>", "html.parser")


def _ld(obj) -> str:
    return f'<script type="application/ld+json">{json.dumps(obj, ensure_ascii=False)}</script>'


JOB = {
    "@context": "https://schema.org",
    "@type": "JobPosting",
    "title": "Python Developer",
    "hiringOrganization": {"@type": "Organization", "name": "Acme s.r.o."},
    "jobLocation": {"@type": "Place", "address": {"addressLocality": "Praha", "addressRegion": "Hlavní město Praha"}},
    "baseSalary": {"@type": "MonetaryAmount", "currency": "CZK", "minValue": 30000, "maxValue": 45000},
    "datePosted": "2025-01-15",
    "employmentType": ["FULL_TIME", "PART_TIME"],
    "description": "<p>Build things.</p>",
}


def test_maps_job_posting_fields():
    got = extract_from_jsonld(_doc("<h1>x</h1>", head=_ld(JOB)))
    assert got == {
        "title": "Python Developer",
        "company": "Acme s.r.o.",
        "date_posted": "2025-01-15",
        "description_html": "<p>Build things.</p>",
        "location": "Praha",
        "salary": "30000 - 45000",
        "job_type": "FULL_TIME, PART_TIME",
    }


def test_invalid_block_is_skipped_and_next_block_used():
    head = '<script type="application/ld+json">{ not json </script>' + _ld(JOB)
    got = extract_from_jsonld(_doc("", head=head))
    assert got is not None
    assert got["title"] == "Python Developer"


def test_no_job_posting_returns_none():
    head = _ld({"@type": "Organization", "name": "Acme"}) + _ld([{"@type": "BreadcrumbList"}])
    assert extract_from_jsonld(_doc("", head=head)) is None
    assert extract_from_jsonld(_doc("<p>no scripts</p>")) is None


def test_first_job_posting_in_document_order_wins():
    second = dict(JOB, title="Second")
    head = _ld([{"@type": "WebPage"}, dict(JOB, title="First")]) + _ld(second)
    assert extract_from_jsonld(_doc("", head=head))["title"] == "First"


def test_graph_and_list_type_are_recognized():
    entry = dict(JOB, **{"@type": ["Thing", "JobPosting"]})
    head = _ld({"@context": "https://schema.org", "@graph": [{"@type": "WebSite"}, entry]})
    assert extract_from_jsonld(_doc("", head=head))["company"] == "Acme s.r.o."


def test_salary_shapes():
    def salary_of(base):
        return extract_from_jsonld(_doc("", head=_ld(dict(JOB, baseSalary=base))))["salary"]

    assert salary_of("30 000 Kč") == "30 000 Kč"
    assert salary_of({"value": 35000}) == "35000"
    assert salary_of({"value": {"@type": "QuantitativeValue", "minValue": 30000.0, "maxValue": 45000.0}}) == "30000 - 45000"
    assert salary_of({"currency": "CZK"}) is None


def test_title_falls_back_to_name_and_location_list():
    entry = {
        "@type": "jobposting",
        "name": "Tester",
        "jobLocation": [{"address": {"addressRegion": "Jihomoravský kraj"}}],
    }
    got = extract_from_jsonld(_doc("", head=_ld(entry)))
    assert got["title"] == "Tester"
    assert got["location"] == "Jihomoravský kraj"
    assert got["company"] is None
    assert got["salary"] is None
