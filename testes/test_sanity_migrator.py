import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from wp2sanity.migrators.sanity_migrator import (
    RateLimiter,
    create_or_replace,
    sanity_api_url,
    upload_image_from_url,
    with_retries,
)

CFG = {"project_id": "abc123", "dataset": "production", "api_version": "2024-07-01", "token": "secret", "timeout": 7}


def test_sanity_api_url():
    assert sanity_api_url(CFG, "data/mutate/production") == (
        "https://abc123.api.sanity.io/v2024-07-01/data/mutate/production"
    )


def test_rate_limiter_sleeps_for_remaining_interval():
    limiter = RateLimiter(60)
    slept = []
    clock = iter([100.0, 100.0, 100.25, 101.0])
    limiter.wait(time_fn=lambda: next(clock), sleep_fn=slept.append)
    limiter.wait(time_fn=lambda: next(clock), sleep_fn=slept.append)
    assert slept == [pytest.approx(0.75)]


def test_with_retries_honours_retry_after_then_succeeds(fake_response):
    responses = iter([
        fake_response(status_code=429, headers={"Retry-After": "3"}),
        fake_response(status_code=503),
        fake_response(json_data={"ok": True}),
    ])
    slept = []
    resp = with_retries(lambda: next(responses), sleep_fn=slept.append, base_delay=0.5)
    assert resp.json() == {"ok": True}
    assert slept == [3.0, 1.0]


def test_with_retries_does_not_retry_client_errors(fake_response):
    slept = []
    with pytest.raises(requests.HTTPError):
        with_retries(lambda: fake_response(status_code=400), sleep_fn=slept.append)
    assert slept == []


def test_with_retries_gives_up_after_max_attempts(fake_response):
    attempts = []

    def fn():
        attempts.append(1)
        return fake_response(status_code=500)

    with pytest.raises(requests.HTTPError):
        with_retries(fn, max_attempts=3, sleep_fn=lambda s: None)
    assert len(attempts) == 3


def test_with_retries_retries_connection_errors(fake_response):
    outcomes = [requests.ConnectionError("reset"), fake_response(json_data={})]

    def fn():
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    slept = []
    assert with_retries(fn, sleep_fn=slept.append, base_delay=0.1).status_code == 200
    assert slept == [0.1]


def test_upload_image_from_url(monkeypatch, fake_response):
    posted = {}

    def fake_get(url, timeout=None):
        return fake_response(content=b"\x89PNG", headers={"Content-Type": "image/jpeg"})

    def fake_post(url, params=None, headers=None, data=None, timeout=None):
        posted.update(url=url, params=params, headers=headers, data=data, timeout=timeout)
        return fake_response(json_data={"document": {"_id": "image-abc-10x10-jpg"}})

    monkeypatch.setattr(requests, "get", fake_get)
    monkeypatch.setattr(requests, "post", fake_post)

    asset_id = upload_image_from_url(CFG, "https://wp.test/up/My%20Chart.jpg")
    assert asset_id == "image-abc-10x10-jpg"
    assert posted["url"] == "https://abc123.api.sanity.io/v2024-07-01/assets/images/production"
    assert posted["params"] == {"filename": "My Chart.jpg"}
    assert posted["headers"] == {"Authorization": "Bearer secret", "Content-Type": "image/jpeg"}
    assert posted["data"] == b"\x89PNG"
    assert posted["timeout"] == 7


def test_upload_image_download_failure_returns_none(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", lambda url, timeout=None: fake_response(status_code=404))

    def unexpected_post(*args, **kwargs):
        raise AssertionError("upload must not be attempted")

    monkeypatch.setattr(requests, "post", unexpected_post)
    assert upload_image_from_url(CFG, "https://wp.test/missing.png") is None
    assert upload_image_from_url(CFG, "") is None


def test_upload_image_rejected_returns_none(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "get", lambda url, timeout=None: fake_response(content=b"x"))
    monkeypatch.setattr(requests, "post", lambda *a, **kw: fake_response(status_code=403))
    assert upload_image_from_url(CFG, "https://wp.test/a.png") is None


def test_create_or_replace_sends_one_transaction(monkeypatch, fake_response):
    posted = {}

    def fake_post(url, params=None, headers=None, json=None, timeout=None):
        posted.update(url=url, params=params, headers=headers, json=json)
        return fake_response(json_data={"transactionId": "t1", "results": [{"id": "post-a"}, {"id": "tag-b"}]})

    monkeypatch.setattr(requests, "post", fake_post)
    docs = [{"_id": "post-a", "_type": "post"}, {"_id": "tag-b", "_type": "tag"}]
    result = create_or_replace(CFG, docs)

    assert result["transactionId"] == "t1"
    assert posted["url"].endswith("/data/mutate/production")
    assert posted["params"] == {"returnIds": "true"}
    assert posted["headers"]["Authorization"] == "Bearer secret"
    assert posted["json"] == {"mutations": [{"createOrReplace": d} for d in docs]}


def test_create_or_replace_requires_ids(monkeypatch):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: pytest.fail("no request expected"))
    assert create_or_replace(CFG, []) == {"results": []}
    with pytest.raises(ValueError):
        create_or_replace(CFG, [{"_type": "post"}])


def test_create_or_replace_raises_after_client_error(monkeypatch, fake_response):
    monkeypatch.setattr(requests, "post", lambda *a, **kw: fake_response(status_code=400))
    with pytest.raises(requests.HTTPError):
        create_or_replace(CFG, [{"_id": "post-a", "_type": "post"}])
