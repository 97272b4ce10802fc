# tests/services/test_seo_score_service.py
import logging
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from conftest import build_page
from pageaudit.model import AnalyzerConfig
from pageaudit.services.scoring_api_service import ScoringApiError, ScoringApiService
from pageaudit.services.seo_score_service import (
    SeoScoreService,
    calculate_basic_seo_score,
    get_seo_score,
    grade_from_score,
    normalize_response,
)


# --- Local computation ---

def test_optimal_page_reaches_the_local_maximum_of_90(optimal_page):
    report = calculate_basic_seo_score(optimal_page)

    assert report.score == 90
    assert report.grade == "A"
    assert report.recommendations == []
    assert {name: d.score for name, d in report.details.items()} == {
        "title": 15, "metaDescription": 15, "headings": 20,
        "images": 15, "links": 10, "content": 15,
    }


def test_page_without_images_is_not_penalised_by_a_recommendation():
    body = '<h1>Tools</h1><a href="/x">x</a><p>' + "w" * 400 + "</p>"
    report = calculate_basic_seo_score(build_page(title="T" * 40, description="D" * 100, body=body))

    assert report.details["images"].score == 0
    assert report.details["images"].message == "No images found"
    assert report.recommendations == []
    assert report.score == 15 + 15 + 15 + 0 + 10 + 15


def test_empty_document():
    report = calculate_basic_seo_score("")

    assert report.score == 10
    assert report.grade == "F"
    assert report.recommendations == [
        "Add a title tag",
        "Add a meta description tag",
        "Add an H1 heading tag",
        "Add internal and external links",
        "Add more content (at least 300 characters recommended)",
    ]


def test_title_and_description_tiers():
    report = calculate_basic_seo_score(build_page(title="T" * 61, description="D" * 161))
    assert report.details["title"].score == 10
    assert report.details["metaDescription"].score == 10
    assert report.recommendations[:2] == [
        "Title tag should be 60 characters or less",
        "Meta description should be 160 characters or less",
    ]

    empty = calculate_basic_seo_score(build_page(title="", description=""))
    assert empty.details["title"].score == 0
    assert empty.recommendations[:2] == ["Add a descriptive title tag", "Add a meta description"]


def test_multiple_h1_tags():
    report = calculate_basic_seo_score("<h1>a</h1><h1>b</h1><h3>c</h3>")
    assert report.details["headings"].score == 15
    assert "Use only one H1 tag per page" in report.recommendations


def test_subheading_bonus_never_adds_a_recommendation():
    without_h1 = calculate_basic_seo_score("<h2>only a subheading</h2>")
    assert without_h1.details["headings"].score == 10
    assert [r for r in without_h1.recommendations if "H1" in r or "H2" in r] == ["Add an H1 heading tag"]


@pytest.mark.parametrize("alts, expected_score, percentage", [
    (["a", "b", ""], 10, "67%"),
    (["a", "", ""], 5, "33%"),
    (["a", ""], 10, "50%"),
])
def test_image_alt_percentage(alts, expected_score, percentage):
    body = "".join(f'<img src="{i}.png" alt="{alt}">' for i, alt in enumerate(alts))
    report = calculate_basic_seo_score(build_page(body=body))

    assert report.details["images"].score == expected_score
    image_recs = [r for r in report.recommendations if "alt text" in r]
    assert len(image_recs) == 1
    assert percentage in image_recs[0]


def test_images_without_alt_attribute_count_as_missing():
    report = calculate_basic_seo_score(build_page(body='<img src="a.png"><img src="b.png">'))
    assert report.details["images"].score == 5


def test_anchor_without_href_is_not_a_link():
    report = calculate_basic_seo_score(build_page(body='<a name="top">Top</a><a href=" ">x</a>'))
    assert report.details["links"].score == 0
    assert "Add internal and external links" in report.recommendations


@pytest.mark.parametrize("length, expected", [(0, 5), (100, 5), (101, 10), (300, 10), (301, 15)])
def test_content_length_tiers(length, expected):
    report = calculate_basic_seo_score("<p>" + "w" * length + "</p>")
    assert report.details["content"].score == expected


def test_local_score_is_idempotent(optimal_page):
    assert calculate_basic_seo_score(optimal_page).to_dict() == calculate_basic_seo_score(optimal_page).to_dict()


# --- Grades ---

@pytest.mark.parametrize("score, grade", [
    (100, "A"), (90, "A"), (89, "B"), (80, "B"), (79, "C"),
    (70, "C"), (69, "D"), (60, "D"), (59, "F"), (0, "F"),
])
def test_grade_from_score(score, grade):
    assert grade_from_score(score) == grade


def test_grade_is_monotone():
    order = "FDCBA"
    grades = [order.index(grade_from_score(score)) for score in range(0, 101)]
    assert grades == sorted(grades)


# --- Response normalisation ---

def test_normalize_uses_field_aliases():
    report = normalize_response({
        "seoScore": 72,
        "analysis": {"title": {"score": 10}},
        "suggestions": ["Shorten the title"],
    })

    assert report.score == 72
    assert report.grade == "C"
    assert report.details["title"].score == 10
    assert report.details["title"].message == ""
    assert report.recommendations == ["Shorten the title"]


def test_normalize_prefers_primary_field_names():
    report = normalize_response({
        "score": 0, "seoScore": 55,
        "details": {}, "analysis": {"x": {"score": 1}},
        "recommendations": ["a"], "suggestions": ["b"],
    })
    assert report.score == 0
    assert report.details == {}
    assert report.recommendations == ["a"]


def test_normalize_keeps_valid_grade_and_clips_score():
    assert normalize_response({"score": 150, "grade": "b"}).grade == "B"
    assert normalize_response({"score": 150}).score == 100
    assert normalize_response({"score": -3}).score == 0
    assert normalize_response({"score": 88.6, "grade": "Z"}).grade == "B"


def test_normalize_tolerates_fractional_and_unlabelled_details():
    report = normalize_response({
        "score": 85,
        "details": {
            "title": {"score": 12.5, "message": "ok"},
            "content": {"score": 7.6, "message": None},
        },
    })

    assert report.score == 85
    assert report.details["title"].score == 12
    assert report.details["title"].message == "ok"
    assert report.details["content"].score == 8
    assert report.details["content"].message == ""


@pytest.mark.parametrize("data", [
    {},
    {"score": "high"},
    {"score": True},
    {"score": 80, "details": ["not", "a", "mapping"]},
    {"score": 80, "details": {"title": "fine"}},
    {"score": 80, "recommendations": "one string"},
])
def test_normalize_rejects_malformed_responses(data):
    with pytest.raises(ScoringApiError):
        normalize_response(data)


# --- Delegation with mocked client ---

@pytest.mark.asyncio
async def test_external_score_is_used_when_available(optimal_page):
    client = MagicMock(spec=ScoringApiService)
    client.analyze = AsyncMock(return_value={"score": 64, "recommendations": ["Add schema markup"]})

    report = await SeoScoreService(client=client).get_seo_score(optimal_page)

    client.analyze.assert_awaited_once_with(optimal_page)
    assert report.score == 64
    assert report.grade == "D"
    assert report.recommendations == ["Add schema markup"]


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    ScoringApiError("HTTP 503", status=503),
    RuntimeError("unexpected"),
])
async def test_client_failure_falls_back_to_local(optimal_page, error, caplog):
    client = MagicMock(spec=ScoringApiService)
    client.analyze = AsyncMock(side_effect=error)
    caplog.set_level(logging.WARNING, logger="pageaudit.services.seo_score_service")

    report = await get_seo_score(optimal_page, client=client)

    assert report == calculate_basic_seo_score(optimal_page)
    assert "local fallback" in caplog.text


@pytest.mark.asyncio
async def test_malformed_external_body_falls_back_to_local(optimal_page):
    client = MagicMock(spec=ScoringApiService)
    client.analyze = AsyncMock(return_value={"status": "ok"})

    report = await get_seo_score(optimal_page, client=client)
    assert report.score == 90
    assert report.grade == "A"


# --- Delegation against a local HTTP server ---

@asynccontextmanager
async def scoring_server(handler):
    app = web.Application()
    app.router.add_post("/analyze", handler)
    server = TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/analyze"))
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_http_500_falls_back_to_local(optimal_page):
    async def handler(request):
        return web.Response(status=500, text="boom")

    async with scoring_server(handler) as url:
        report = await get_seo_score(optimal_page, AnalyzerConfig(seo_api_url=url))

    assert report == calculate_basic_seo_score(optimal_page)


@pytest.mark.asyncio
async def test_successful_post_sends_html_as_json():
    received = {}

    async def handler(request):
        received["content_type"] = request.content_type
        received["body"] = await request.json()
        return web.json_response({"seoScore": 91, "analysis": {"links": {"score": 10, "message": "ok"}}})

    async with scoring_server(handler) as url:
        report = await get_seo_score("<title>Home</title>", AnalyzerConfig(seo_api_url=url))

    assert received == {"content_type": "application/json", "body": {"html": "<title>Home</title>"}}
    assert report.score == 91
    assert report.grade == "A"
    assert report.details["links"].message == "ok"


@pytest.mark.asyncio
async def test_non_json_success_body_falls_back_to_local():
    async def handler(request):
        return web.Response(status=200, text="<html>not json</html>")

    async with scoring_server(handler) as url:
        report = await get_seo_score("", AnalyzerConfig(seo_api_url=url))

    assert report == calculate_basic_seo_score("")


@pytest.mark.asyncio
async def test_unreachable_endpoint_falls_back_to_local():
    config = AnalyzerConfig(seo_api_url="http://127.0.0.1:9/analyze", seo_api_timeout=5)
    report = await get_seo_score("<title>Home</title>", config)
    assert report == calculate_basic_seo_score("<title>Home</title>")
