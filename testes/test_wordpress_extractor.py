import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

pytest.importorskip("bs4")

from wp2sanity.extractors.wordpress_extractor import (
    extract_image_urls,
    fetch_all,
    fetch_media,
    full_size_url,
    wp_api_url,
)

CFG = {"base_url": "https://wp.test/", "timeout": 5}


def test_wp_api_url():
    assert wp_api_url(CFG, "posts") == "https://wp.test/wp-json/wp/v2/posts"
    assert wp_api_url(CFG, "/media/3") == "https://wp.test/wp-json/wp/v2/media/3"


def test_fetch_all_follows_total_pages(monkeypatch, fake_response):
    calls = []

    def fake_get(url, params=None, timeout=None):
        calls.append((url, params["page"], params["per_page"], timeout))
        return fake_response(json_data=[{"id": params["page"]}], headers={"X-WP-TotalPages": "3"})

    monkeypatch.setattr(requests, "get", fake_get)
    assert fetch_all(CFG, "posts") == [{"id": 1}, {"id": 2}, {"id": 3}]
    assert [c[1] for c in calls] == [1, 2, 3]
    assert calls[0][0] == "https://wp.test/wp-json/wp/v2/posts"
    assert calls[0][2] == 100 and calls[0][3] == 5


def test_fetch_all_stops_on_empty_page(monkeypatch, fake_response):
    pages = {1: [{"id": 1}], 2: []}
    monkeypatch.setattr(
        requests, "get", lambda url, params=None, timeout=None: fake_response(json_data=pages[params["page"]])
    )
    # no X-WP-TotalPages header means a single page
    assert fetch_all(CFG, "tags") == [{"id": 1}]


def test_fetch_all_stops_when_page_past_end_errors(monkeypatch, fake_response):
    def fake_get(url, params=None, timeout=None):
        if params["page"] == 1:
            return fake_response(json_data=[{"id": 1}], headers={"X-WP-TotalPages": "9"})
        return fake_response(status_code=400, json_data={"code": "rest_post_invalid_page_number"})

    monkeypatch.setattr(requests, "get", fake_get)
    assert fetch_all(CFG, "posts") == [{"id": 1}]


def test_fetch_all_propagates_network_errors(monkeypatch):
    def boom(url, params=None, timeout=None):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", boom)
    monkeypatch.setattr("time.sleep", lambda s: None)
    with pytest.raises(requests.ConnectionError):
        fetch_all(CFG, "posts")


def test_fetch_media(monkeypatch, fake_response):
    monkeypatch.setattr(
        requests,
        "get",
        lambda url, timeout=None: fake_response(json_data={"id": 7, "source_url": url}),
    )
    assert fetch_media(CFG, 7)["source_url"] == "https://wp.test/wp-json/wp/v2/media/7"
    assert fetch_media(CFG, 0) is None


def test_fetch_media_failure_returns_none(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", lambda url, timeout=None: fake_response(status_code=404))
    assert fetch_media(CFG, 7) is None


def test_full_size_url_strips_resize_suffix():
    assert full_size_url("https://wp.test/up/a-300x200.png") == "https://wp.test/up/a.png"
    assert full_size_url("https://wp.test/up/a.png") == "https://wp.test/up/a.png"


def test_extract_image_urls_full_size_first_and_deduplicated():
    html = (
        '<p><img src="https://wp.test/up/a-300x200.png"></p>'
        '<img src="https://wp.test/up/a.png">'
        '<img src="/relative.png"><img>'
        '<img src="https://wp.test/up/b.jpg">'
    )
    assert extract_image_urls(html) == [
        "https://wp.test/up/a.png",
        "https://wp.test/up/a-300x200.png",
        "https://wp.test/up/b.jpg",
    ]
    assert extract_image_urls("") == []
