import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests


class FakeResponse:
    """Minimal stand-in for ``requests.Response``."""

    def __init__(self, status_code=200, json_data=None, headers=None, content=b""):
        self.status_code = status_code
        self._json = json_data
        self.headers = headers or {}
        self.content = content
        self.text = "" if json_data is None else str(json_data)

    def json(self):
        if self._json is None:
            raise ValueError("No JSON body")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture(autouse=True)
def isolated_run(tmp_path, monkeypatch):
    """Keep report files out of the checkout and make rate limiters instant."""
    monkeypatch.chdir(tmp_path)
    from wp2sanity.extractors import wordpress_extractor
    from wp2sanity.migrators import sanity_migrator

    monkeypatch.setattr(sanity_migrator, "_limiter", sanity_migrator.RateLimiter(10 ** 9))
    monkeypatch.setattr(wordpress_extractor, "_limiter", sanity_migrator.RateLimiter(10 ** 9))
    yield tmp_path
