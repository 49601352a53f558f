"""
Sanity API helper functions for WordPress → Sanity migration.

This module implements low-level interactions with the Sanity HTTP API.
Functions defined here download remote images and upload them to the
dataset's asset store, and write documents through the mutation endpoint
as a single transaction.  A simple rate limiter is shared by all calls and
a generic retry wrapper handles transient network errors and server-side
rate limiting responses (429 or 5xx).

Usage example::

    from wp2sanity.migrators.sanity_migrator import upload_image_from_url, create_or_replace

    cfg = {"project_id": ..., "dataset": "production",
           "api_version": "2024-07-01", "token": ...}
    asset_id = upload_image_from_url(cfg, "https://example.com/a.png")
    create_or_replace(cfg, [{"_id": "post-hello", "_type": "post", ...}])

"""

from __future__ import annotations

import os
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import unquote, urlparse

import requests

DEFAULT_TIMEOUT = 30

###############################################################################
# Rate limiting and retry utilities
###############################################################################

class RateLimiter:
    """
    Simple time-based rate limiter.  Ensures that no more than ``rpm``
    requests are dispatched per minute.
    """

    def __init__(self, rpm: int = 200) -> None:
        self.rpm = max(1, rpm)
        self.interval = 60.0 / float(self.rpm)
        self._last = 0.0

    def wait(self, time_fn: Callable[[], float] = time.time, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        now = time_fn()
        dt = now - self._last
        if dt < self.interval:
            sleep_fn(self.interval - dt)
        self._last = time_fn()


def with_retries(
    fn: Callable[[], requests.Response],
    *,
    max_attempts: int = 5,
    base_delay: float = 0.7,
    sleep_fn: Optional[Callable[[float], None]] = None,
) -> requests.Response:
    """
    Execute a function returning a ``requests.Response``, retrying on
    transient failures.  Retries are attempted on status codes 429 and
    5xx and on connection errors, with exponential backoff.  A
    ``Retry-After`` header takes precedence over the computed delay.

    :param fn: A zero-argument callable that performs the HTTP request.
    :param max_attempts: Maximum number of attempts before giving up.
    :param base_delay: Base delay in seconds for exponential backoff.
    :return: The successful ``requests.Response``.
    :raises requests.HTTPError: if all attempts fail or the status is not retryable.
    """
    sleep_fn = sleep_fn or time.sleep
    attempt = 0
    while True:
        try:
            resp = fn()
            resp.raise_for_status()
            return resp
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            if status not in (429, 500, 502, 503, 504) or attempt >= max_attempts - 1:
                raise
            retry_after = e.response.headers.get("Retry-After")
            try:
                wait = float(retry_after) if retry_after else base_delay * (2 ** attempt)
            except ValueError:
                wait = base_delay * (2 ** attempt)
            sleep_fn(wait)
            attempt += 1
        except requests.RequestException:
            if attempt >= max_attempts - 1:
                raise
            sleep_fn(base_delay * (2 ** attempt))
            attempt += 1


_limiter = RateLimiter(180)


def sanity_api_url(cfg: Dict[str, Any], path: str) -> str:
    """Base URL of the project's API host for ``path`` (no leading slash)."""
    return f"https://{cfg['project_id']}.api.sanity.io/v{cfg['api_version']}/{path}"


def sanity_headers(cfg: Dict[str, Any]) -> Dict[str, str]:
    """
    Construct the default headers required for Sanity API requests.

    :param cfg: A configuration dictionary with the ``token``.
    :return: A dictionary of headers including Authorization.
    """
    return {
        "Authorization": f"Bearer {cfg['token']}",
    }


###############################################################################
# Asset helpers
###############################################################################

def _filename_from_url(url: str) -> str:
    name = os.path.basename(unquote(urlparse(url).path))
    return name or "image.png"


def upload_image_from_url(cfg: Dict[str, Any], image_url: str) -> Optional[str]:
    """
    Download a remote image and upload it to the dataset's asset store.

    Failures are not fatal for the migration: they are reported on stdout
    and ``None`` is returned so the caller can leave the image out.

    :param cfg: Sanity configuration dictionary.
    :param image_url: The source URL of the image.
    :return: The Sanity asset document id (``image-...``), or ``None`` on error.
    """
    if not image_url:
        return None
    timeout = cfg.get("timeout", DEFAULT_TIMEOUT)

    try:
        download = with_retries(lambda: requests.get(image_url, timeout=timeout))
    except requests.RequestException as e:
        print(f"[WARNING] Failed to download image {image_url}: {e}")
        return None

    content_type = download.headers.get("Content-Type") or "image/png"
    api_url = sanity_api_url(cfg, f"assets/images/{cfg['dataset']}")

    def do_request() -> requests.Response:
        _limiter.wait()
        return requests.post(
            api_url,
            params={"filename": _filename_from_url(image_url)},
            headers={**sanity_headers(cfg), "Content-Type": content_type},
            data=download.content,
            timeout=timeout,
        )

    try:
        resp = with_retries(do_request)
        return resp.json()["document"]["_id"]
    except requests.RequestException as e:
        print(f"[WARNING] Failed to upload image {image_url}: {e}")
    except (ValueError, KeyError, TypeError) as e:
        print(f"[WARNING] Unexpected asset response for {image_url}: {e}")
    return None


###############################################################################
# Document helpers
###############################################################################

def create_or_replace(cfg: Dict[str, Any], documents: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Write documents with ``createOrReplace`` mutations in one transaction.

    Every document must carry a deterministic ``_id`` so re-running the
    migration overwrites instead of duplicating.

    :param cfg: Sanity configuration dictionary.
    :param documents: Documents to write.
    :return: The mutation response from Sanity (``transactionId``, ``results``).
    :raises requests.HTTPError: on failure after retries.
    """
    if not documents:
        return {"results": []}
    for doc in documents:
        if not doc.get("_id"):
            raise ValueError(f"Document of type {doc.get('_type')!r} has no _id")

    api_url = sanity_api_url(cfg, f"data/mutate/{cfg['dataset']}")
    body = {"mutations": [{"createOrReplace": doc} for doc in documents]}

    def do_request() -> requests.Response:
        _limiter.wait()
        return requests.post(
            api_url,
            params={"returnIds": "true"},
            headers={**sanity_headers(cfg), "Content-Type": "application/json"},
            json=body,
            timeout=cfg.get("timeout", DEFAULT_TIMEOUT),
        )

    resp = with_retries(do_request)
    return resp.json()
