"""
WordPress REST API extraction.

Posts, categories, tags and media records are read from the public
``/wp-json/wp/v2`` collections, one page of 100 at a time.  Image URLs
referenced by post bodies are collected here so they can be uploaded
before any body is converted.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup
import requests

from wp2sanity.migrators.sanity_migrator import RateLimiter, with_retries

PER_PAGE = 100
DEFAULT_TIMEOUT = 30

# WordPress appends -<width>x<height> to resized copies of an upload
_SIZE_SUFFIX_RE = re.compile(r"-\d+x\d+(\.\w+)$")

_limiter = RateLimiter(180)


def wp_api_url(cfg: Dict[str, Any], endpoint: str) -> str:
    return f"{cfg['base_url'].rstrip('/')}/wp-json/wp/v2/{endpoint.lstrip('/')}"


def fetch_all(cfg: Dict[str, Any], endpoint: str) -> List[Dict[str, Any]]:
    """Fetch every record of a ``wp/v2`` collection.

    Pages are requested until the ``X-WP-TotalPages`` header says there are
    no more, a page comes back empty, or the API answers with an error (a
    page past the end returns 400 on most installs).

    Args:
        cfg: The ``wordpress`` configuration section (``base_url``).
        endpoint: Collection name such as ``posts``, ``categories`` or ``tags``.

    Returns:
        list: All records, in API order.
    """
    url = wp_api_url(cfg, endpoint)
    timeout = cfg.get("timeout", DEFAULT_TIMEOUT)
    records: List[Dict[str, Any]] = []
    page = 1
    while True:
        _limiter.wait()
        try:
            resp = with_retries(
                lambda: requests.get(url, params={"per_page": PER_PAGE, "page": page}, timeout=timeout)
            )
        except requests.HTTPError as e:
            print(f"[WARNING] Stopped fetching {endpoint} at page {page}: {e}")
            break
        data = resp.json()
        if not data:
            break
        records.extend(data)
        try:
            total_pages = int(resp.headers.get("X-WP-TotalPages") or 1)
        except ValueError:
            total_pages = 1
        if page >= total_pages:
            break
        page += 1
    return records


def fetch_media(cfg: Dict[str, Any], media_id: int) -> Optional[Dict[str, Any]]:
    """Fetch one media record (featured image), or ``None`` if unavailable."""
    if not media_id:
        return None
    _limiter.wait()
    try:
        resp = with_retries(
            lambda: requests.get(wp_api_url(cfg, f"media/{media_id}"), timeout=cfg.get("timeout", DEFAULT_TIMEOUT))
        )
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        print(f"[WARNING] Failed to fetch media {media_id}: {e}")
        return None


def full_size_url(src: str) -> str:
    """Strip the WordPress ``-WxH`` resize suffix from an image URL."""
    return _SIZE_SUFFIX_RE.sub(r"\1", src)


def extract_image_urls(html: str) -> List[str]:
    """List absolute image URLs in ``html``.

    For each ``<img>`` the full-size variant comes first, followed by the
    exact ``src`` (the key the converter looks up).  Duplicates are
    removed, document order is kept.
    """
    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    urls: List[str] = []
    for img in soup.find_all("img"):
        src = img.get("src") or ""
        if not src.startswith("http"):
            continue
        for url in (full_size_url(src), src):
            if url not in urls:
                urls.append(url)
    return urls
