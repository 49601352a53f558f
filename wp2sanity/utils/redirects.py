"""
Redirect map for the move off WordPress.

The new site serves posts at ``/blog/<slug>``; the CSV produced here lists
each old permalink next to its new address so the host can answer with a
301 for every post that was migrated.
"""

from __future__ import annotations

import csv
import os
from typing import Dict, Iterable, Optional


def new_post_url(site_url: str, slug: str) -> str:
    return f"{site_url.rstrip('/')}/blog/{slug}"


def generate_redirects_csv(
    posts: Iterable[Dict[str, Optional[str]]],
    *,
    old_domain: str,
    new_base: str,
    out_path: str = "reports/redirect_map.csv",
) -> str:
    """Write an ``OldURL,NewURL`` CSV and return its path.

    Each entry needs a ``slug``.  The WordPress ``link`` is the old URL when
    known, otherwise ``<old_domain>/<slug>``; ``new_url`` overrides the
    ``<new_base>/blog/<slug>`` target.  Missing parent directories are
    created.
    """
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["OldURL", "NewURL"])
        for post in posts:
            slug = post.get("slug") or ""
            old_url = post.get("link") or (f"{old_domain.rstrip('/')}/{slug}" if old_domain else slug)
            writer.writerow([old_url, post.get("new_url") or new_post_url(new_base, slug)])
    return out_path
