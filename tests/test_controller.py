# tests/test_controller.py
from urllib.parse import urlsplit

import pytest

from modules.jobs_cz.lib import controller as ctl
from modules.jobs_cz.lib.config import ConfigError
from modules.jobs_cz.lib.controller import CrawlController, resolve_seed_urls


def _details(client):
    return [u for u in client.fetched if "/rpd/" in u]


def _listings(client):
    return [u for u in client.fetched if "/prace/" in u]


# ----------------------------------------------------------------------
# Budget
# ----------------------------------------------------------------------
def test_budget_caps_detail_requests_and_records(make_settings, fake_site, memory_dataset, html_builders):
    settings = make_settings(keyword="developer", results_wanted=5)

    summary = CrawlController(settings, dataset=memory_dataset, client=fake_site).run()

    assert summary.saved == 5
    assert len(memory_dataset.rows) == 5
    assert len(_details(fake_site)) == 5
    assert not any(html_builders.page_no(u) >= 3 for u in _listings(fake_site))
    assert summary.seeds == ["https://www.jobs.cz/prace/?q%5B%5D=developer"]


@pytest.mark.parametrize("concurrency", [1, 4])
def test_saved_never_exceeds_wanted(make_settings, fake_site, memory_dataset, concurrency):
    settings = make_settings(keyword="developer", results_wanted=11, max_concurrency=concurrency)

    summary = CrawlController(settings, dataset=memory_dataset, client=fake_site).run()

    assert summary.saved == 11
    assert len(memory_dataset.rows) == 11
    assert len({r["url"] for r in memory_dataset.rows}) == 11


def test_max_pages_stops_pagination(make_settings, fake_site, memory_dataset, html_builders):
    settings = make_settings(keyword="developer", max_pages=2)

    summary = CrawlController(settings, dataset=memory_dataset, client=fake_site).run()

    assert sorted(html_builders.page_no(u) for u in _listings(fake_site)) == [1, 2]
    assert summary.saved == 16


# ----------------------------------------------------------------------
# Dedupe
# ----------------------------------------------------------------------
def _overlapping_site(html_builders, make_client):
    pages = {1: [1, 2, 3], 2: [2, 3, 4], 3: [4, 5]}

    def route(url):
        path = urlsplit(url).path
        if path.startswith("/rpd/"):
            return html_builders.detail(path.strip("/").split("/")[1])
        n = html_builders.page_no(url)
        return html_builders.listing(pages.get(n, []), next_link=n < 3)

    return make_client(route)


def test_dedupe_across_pages(make_settings, memory_dataset, html_builders, make_client):
    client = _overlapping_site(html_builders, make_client)
    settings = make_settings(keyword="developer")

    summary = CrawlController(settings, dataset=memory_dataset, client=client).run()

    assert sorted(_details(client)) == [f"https://www.jobs.cz/rpd/{i}/" for i in range(1, 6)]
    assert summary.saved == 5
    assert summary.requests_failed == 0


def test_dedupe_off_refetches_repeats(make_settings, memory_dataset, html_builders, make_client):
    client = _overlapping_site(html_builders, make_client)
    settings = make_settings(keyword="developer", dedupe=False)

    summary = CrawlController(settings, dataset=memory_dataset, client=client).run()

    assert len(_details(client)) == 8
    assert summary.saved == 8


# ----------------------------------------------------------------------
# Link-only mode
# ----------------------------------------------------------------------
def test_link_only_mode_emits_url_records(make_settings, fake_site, memory_dataset):
    settings = make_settings(keyword="developer", collectDetails=False, results_wanted=10)

    summary = CrawlController(settings, dataset=memory_dataset, client=fake_site).run()

    assert summary.saved == 10
    assert _details(fake_site) == []
    assert memory_dataset.rows[0] == {"url": "https://www.jobs.cz/rpd/100/", "_source": "jobs.cz"}
    assert all(set(r) == {"url", "_source"} for r in memory_dataset.rows)
    assert len(memory_dataset.rows) == 10


# ----------------------------------------------------------------------
# Failures
# ----------------------------------------------------------------------
def test_detail_failure_is_isolated(make_settings, fake_site, memory_dataset, monkeypatch):
    real = ctl.process_detail_page

    def flaky(soup, url, category=None):
        if "/rpd/101/" in url:
            raise RuntimeError("boom")
        return real(soup, url, category)

    monkeypatch.setattr(ctl, "process_detail_page", flaky)
    settings = make_settings(keyword="developer", results_wanted=3, max_pages=1)

    summary = CrawlController(settings, dataset=memory_dataset, client=fake_site).run()

    assert summary.detail_failures == 1
    assert summary.saved == 2
    assert sorted(r["url"] for r in memory_dataset.rows) == [
        "https://www.jobs.cz/rpd/100/",
        "https://www.jobs.cz/rpd/102/",
    ]


def test_fetch_failure_counts_as_failed_request(make_settings, memory_dataset, html_builders, make_client):
    def route(url):
        path = urlsplit(url).path
        if path == "/rpd/2/":
            return None
        if path.startswith("/rpd/"):
            return html_builders.detail(path.strip("/").split("/")[1])
        return html_builders.listing([1, 2, 3], next_link=False)

    client = make_client(route)
    settings = make_settings(keyword="developer")

    summary = CrawlController(settings, dataset=memory_dataset, client=client).run()

    assert summary.requests_failed == 1
    assert summary.saved == 2


def test_bad_seed_raises_before_crawling(make_settings, fake_site, memory_dataset):
    settings = make_settings(startUrl="/prace/")
    with pytest.raises(ConfigError):
        CrawlController(settings, dataset=memory_dataset, client=fake_site).run()
    assert fake_site.fetched == []


def test_bad_seed_still_closes_owned_client(make_settings, memory_dataset, monkeypatch):
    closed = []
    monkeypatch.setattr(ctl.HttpClient, "close", lambda self: closed.append(self))
    controller = CrawlController(make_settings(startUrl="/prace/"), dataset=memory_dataset)

    with pytest.raises(ConfigError):
        controller.run()
    assert closed == [controller.client]


# ----------------------------------------------------------------------
# Records and seeds
# ----------------------------------------------------------------------
def test_configured_category_and_record_shape(make_settings, fake_site, memory_dataset):
    settings = make_settings(keyword="developer", category="IT", results_wanted=1)

    CrawlController(settings, dataset=memory_dataset, client=fake_site).run()

    (row,) = memory_dataset.rows
    assert row["category"] == "IT"
    assert row["title"] == "Python Developer 100"
    assert row["company"] == "Acme s.r.o."
    assert row["location"] == "Praha"
    assert row["url"] == "https://www.jobs.cz/rpd/100/"
    assert row["description_text"].startswith("We are looking for")


def test_jsonl_output_written(make_settings, fake_site, tmp_path):
    out = tmp_path / "out" / "items.jsonl"
    settings = make_settings(keyword="developer", results_wanted=3, output_path=str(out))

    controller = CrawlController(settings, client=fake_site)
    summary = controller.run()

    assert summary.output_path == str(out)
    assert len(controller.dataset.read_all()) == 3


def test_seed_priority_combines_explicit_seeds(make_settings):
    settings = make_settings(
        keyword="ignored",
        startUrls=[{"url": "https://www.jobs.cz/prace/praha/"}],
        startUrl="https://www.jobs.cz/prace/brno/",
        url="https://www.jobs.cz/prace/ostrava/",
    )
    assert resolve_seed_urls(settings) == [
        "https://www.jobs.cz/prace/praha/",
        "https://www.jobs.cz/prace/brno/",
        "https://www.jobs.cz/prace/ostrava/",
    ]


def test_seed_from_filters(make_settings):
    settings = make_settings(keyword="tester", location="Brno")
    assert resolve_seed_urls(settings) == ["https://www.jobs.cz/prace/?q%5B%5D=tester&locality%5B%5D=Brno"]
