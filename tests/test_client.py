"""Tests for the public scraper operations."""
from urllib.parse import parse_qs, urlparse

import aiohttp
import pytest

from hac_session.cache import ResultCache
from hac_session.client import HACScraper
from hac_session.config import HACConfig
from hac_session.transport import TransportResponse
from helpers import (
    ASSIGNMENT_CELLS,
    BASE_URL,
    LOGIN_URL,
    WEEK_VIEW_URL,
    FakeTransport,
    assignment_row,
    assignments_page,
    class_row,
    connection_error,
    login_page,
    login_responses,
    ok,
    week_view,
)


def make_scraper(responses, **kwargs):
    transport = FakeTransport(responses)
    return HACScraper(f"{BASE_URL}/", "student", "s3cret", transport, **kwargs), transport


async def test_fetch_course_summaries():
    listing = week_view(class_row("AP Biology", class_id="4521", grade="94.2"))
    scraper, transport = make_scraper(login_responses() + [ok(listing)])

    result = await scraper.fetch_course_summaries()

    assert result.error is None
    (course,) = result.courses
    assert course.class_id == "4521"
    assert course.class_name == "AP Biology"
    assert course.average == 94.2
    assert course.has_grade is True

    data_request = transport.requests[-1]
    assert data_request.url == WEEK_VIEW_URL
    assert ".AuthCookie=a1" in data_request.headers["Cookie"]


async def test_fetch_course_summaries_as_dict():
    scraper, _transport = make_scraper(login_responses() + [ok(week_view(class_row(grade="")))])

    data = (await scraper.fetch_course_summaries()).as_dict()

    assert data["error"] is None
    assert data["courses"][0]["average"] is None
    assert data["courses"][0]["has_grade"] is False


async def test_fetch_identity():
    scraper, _transport = make_scraper(
        login_responses() + [ok(week_view(class_row(), student="Doe, John"))]
    )

    identity = await scraper.fetch_identity()

    assert identity.name == "Doe, John"
    assert identity.error is None


async def test_fetch_course_detail():
    scraper, transport = make_scraper(
        login_responses()
        + [
            ok(week_view(class_row("AP Biology", section_key="778"))),
            ok(assignments_page(assignment_row(ASSIGNMENT_CELLS))),
        ]
    )

    detail = await scraper.fetch_course_detail("AP   Biology", "2")

    assert detail.error is None
    assert detail.section_key == "778"
    assert detail.class_name == "AP Biology"
    assert detail.teacher_name == "Smith, Jane"
    assert detail.current_average == 94.2
    assert detail.marking_period == "2"
    assert len(detail.assignments) == 1
    assert [c.name for c in detail.categories] == ["Major", "Minor"]

    detail_url = urlparse(transport.requests[-1].url)
    assert detail_url.path == "/HomeAccess/Content/Student/AssignmentsFromRCPopUp.aspx"
    query = parse_qs(detail_url.query)
    assert query["section_key"] == ["778"]
    assert query["RC_RUN"] == ["2"]


async def test_fetch_course_detail_uses_default_marking_period():
    scraper, transport = make_scraper(
        login_responses() + [ok(week_view(class_row())), ok(assignments_page())],
        marking_period="3",
    )

    detail = await scraper.fetch_course_detail("AP Biology")

    assert detail.marking_period == "3"
    assert parse_qs(urlparse(transport.requests[-1].url).query)["RC_RUN"] == ["3"]


async def test_fetch_course_detail_unknown_class():
    scraper, transport = make_scraper(login_responses() + [ok(week_view(class_row()))])

    detail = await scraper.fetch_course_detail("Chemistry")

    assert detail.error == "Class not found"
    assert detail.class_name == "Chemistry"
    assert detail.assignments == []
    assert detail.categories == []
    # No assignments page was requested
    assert transport.requests[-1].url == WEEK_VIEW_URL


async def test_missing_token_short_circuits_every_operation():
    for operation, args in (
        ("fetch_identity", ()),
        ("fetch_course_summaries", ()),
        ("fetch_course_detail", ("AP Biology",)),
    ):
        scraper, transport = make_scraper([ok(login_page(None), url=LOGIN_URL)])

        result = await getattr(scraper, operation)(*args)

        assert result.error == "Login failed"
        assert len(transport.requests) == 1

    scraper, _transport = make_scraper([ok(login_page(None), url=LOGIN_URL)])
    assert (await scraper.fetch_course_summaries()).courses == []


async def test_identity_login_failure_has_empty_name():
    scraper, _transport = make_scraper([ok(login_page(None), url=LOGIN_URL)])

    identity = await scraper.fetch_identity()

    assert identity.name == ""
    assert identity.as_dict() == {"name": "", "error": "Login failed"}


@pytest.mark.parametrize("operation", ["fetch_identity", "fetch_course_summaries"])
async def test_transport_failure_is_reported_not_raised(operation):
    scraper, _transport = make_scraper(login_responses() + [connection_error()])

    result = await getattr(scraper, operation)()

    assert result.error == "Timed out requesting portal"


async def test_detail_transport_failure_is_reported_not_raised():
    scraper, _transport = make_scraper(
        login_responses() + [ok(week_view(class_row())), connection_error()]
    )

    detail = await scraper.fetch_course_detail("AP Biology")

    assert detail.error == "Timed out requesting portal"
    assert detail.assignments == []


async def test_data_page_error_status():
    scraper, _transport = make_scraper(
        login_responses() + [TransportResponse(status=500, url=WEEK_VIEW_URL)]
    )

    result = await scraper.fetch_course_summaries()

    assert result.courses == []
    assert "500" in result.error


async def test_every_operation_logs_in_again():
    scraper, transport = make_scraper(
        login_responses()
        + [ok(week_view(class_row()))]
        + login_responses()
        + [ok(week_view(class_row()))]
    )

    await scraper.fetch_identity()
    await scraper.fetch_course_summaries()

    logins = [r for r in transport.requests if r.method == "POST"]
    assert len(logins) == 2
    # The second login starts with an empty jar
    assert "Cookie" not in transport.requests[4].headers


async def test_cache_serves_repeated_calls():
    cache = ResultCache(ttl=60)
    scraper, transport = make_scraper(
        login_responses() + [ok(week_view(class_row()))], cache=cache
    )

    first = await scraper.fetch_course_summaries()
    second = await scraper.fetch_course_summaries()

    assert second == first
    assert len(transport.requests) == 4


async def test_cache_does_not_cross_portals_or_passwords():
    cache = ResultCache(ttl=60)
    owner, _transport = make_scraper(
        login_responses() + [ok(week_view(class_row()))], cache=cache
    )
    assert (await owner.fetch_course_summaries()).error is None

    other_portal = HACScraper(
        "https://other.example.org",
        "student",
        "s3cret",
        FakeTransport([ok(login_page(None), url=LOGIN_URL)]),
        cache=cache,
    )
    wrong_password = HACScraper(
        BASE_URL,
        "student",
        "WRONG",
        FakeTransport([ok(login_page(None), url=LOGIN_URL)]),
        cache=cache,
    )

    for scraper in (other_portal, wrong_password):
        result = await scraper.fetch_course_summaries()
        assert result.error == "Login failed"
        assert result.courses == []
        assert len(scraper.transport.requests) == 1


async def test_cached_result_edits_do_not_leak():
    cache = ResultCache(ttl=60)
    scraper, _transport = make_scraper(
        login_responses() + [ok(week_view(class_row()))], cache=cache
    )

    first = await scraper.fetch_course_summaries()
    first.courses.clear()

    second = await scraper.fetch_course_summaries()
    assert [course.class_name for course in second.courses] == ["AP Biology"]


async def test_from_config_builds_cache_from_ttl():
    config = HACConfig.from_dict(
        {"base_url": BASE_URL, "username": "student", "password": "s3cret", "cache_ttl": 120}
    )

    async with aiohttp.ClientSession() as session:
        scraper = HACScraper.from_config(config, session)

    assert isinstance(scraper.cache, ResultCache)
    assert scraper.cache.ttl == 120
    assert scraper.school_url == BASE_URL


async def test_from_config_without_cache():
    config = HACConfig.from_dict(
        {"base_url": BASE_URL, "username": "student", "password": "s3cret", "cache_ttl": 0}
    )
    shared = ResultCache(ttl=30)

    async with aiohttp.ClientSession() as session:
        assert HACScraper.from_config(config, session).cache is None
        assert HACScraper.from_config(config, session, cache=shared).cache is shared


async def test_fetch_course_detail_skips_rows_without_section_key():
    keyless = class_row(class_id="4400").replace("ViewAssignmentsRCPopUp", "Other")
    scraper, transport = make_scraper(
        login_responses()
        + [
            ok(week_view(keyless, class_row(class_id="4521", section_key="778"))),
            ok(assignments_page()),
        ]
    )

    detail = await scraper.fetch_course_detail("AP Biology")

    assert detail.error is None
    assert detail.section_key == "778"
    assert parse_qs(urlparse(transport.requests[-1].url).query)["section_key"] == ["778"]


async def test_cache_skips_error_results():
    cache = ResultCache(ttl=60)
    scraper, transport = make_scraper(
        [ok(login_page(None), url=LOGIN_URL)]
        + login_responses()
        + [ok(week_view(class_row()))],
        cache=cache,
    )

    assert (await scraper.fetch_course_summaries()).error == "Login failed"
    assert len(cache) == 0

    result = await scraper.fetch_course_summaries()
    assert result.error is None
    assert len(cache) == 1
