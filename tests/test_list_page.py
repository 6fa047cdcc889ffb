# tests/test_list_page.py
from modules.jobs_cz.lib.list_page import find_job_links, has_next_page, process_list_page
from modules.jobs_cz.lib.state import RunState

PAGE_URL = "https://www.jobs.cz/prace/?q%5B%5D=developer"


def test_find_job_links_canonical_unique_in_order(html_builders):
    html = html_builders.page(
        '<a href="/rpd/2/?searchId=a">two</a>'
        '<a href="https://www.jobs.cz/rpd/1/">one</a>'
        '<a href="/rpd/2/?searchId=b#apply">two again</a>'
        '<a href="/spolecnosti/acme/">company</a>'
        '<a href="https://www.jobs.cz/prace/?page=2">next</a>'
        "<a>no href</a>"
    )
    assert find_job_links(html_builders.soup(html), PAGE_URL) == [
        "https://www.jobs.cz/rpd/2/",
        "https://www.jobs.cz/rpd/1/",
    ]


def test_has_next_page(html_builders):
    assert has_next_page(html_builders.soup(html_builders.listing([1], next_link=True)))
    assert not has_next_page(html_builders.soup(html_builders.listing([1], next_link=False)))
    assert not has_next_page(html_builders.soup(html_builders.listing([1], next_link=False, disabled_next=True)))


def test_paginates_when_budget_and_pages_allow(html_builders):
    state = RunState(results_wanted=100, max_pages=5)
    seen = []
    soup = html_builders.soup(html_builders.listing([1, 2, 3]))

    result = process_list_page(soup, PAGE_URL, 1, state, on_links=seen.extend)

    assert seen == [f"https://www.jobs.cz/rpd/{i}/" for i in (1, 2, 3)]
    assert result.links == seen
    assert result.should_paginate is True
    assert result.next_url == "https://www.jobs.cz/prace/?q%5B%5D=developer&page=2"


def test_stops_at_max_pages(html_builders):
    state = RunState(results_wanted=100, max_pages=2)
    soup = html_builders.soup(html_builders.listing([1, 2, 3]))
    result = process_list_page(soup, PAGE_URL + "&page=2", 2, state)
    assert result.should_paginate is False
    assert result.next_url is None


def test_stops_on_empty_page(html_builders):
    state = RunState(results_wanted=100, max_pages=5)
    result = process_list_page(html_builders.soup(html_builders.listing([])), PAGE_URL, 1, state)
    assert result.links == []
    assert result.should_paginate is False


def test_stops_without_next_control(html_builders):
    state = RunState(results_wanted=100, max_pages=5)
    soup = html_builders.soup(html_builders.listing([1], next_link=False))
    assert process_list_page(soup, PAGE_URL, 1, state).should_paginate is False


def test_budget_is_read_after_links_are_handed_off(html_builders):
    state = RunState(results_wanted=3, max_pages=5)
    soup = html_builders.soup(html_builders.listing([1, 2, 3, 4]))

    result = process_list_page(
        soup, PAGE_URL, 1, state, on_links=lambda links: state.admit_links(links, count_as_saved=True)
    )

    assert state.saved_count == 3
    assert result.should_paginate is False
