from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping


# WordPress category slug -> category value accepted by the post schema
_SLUG_TO_CATEGORY: Dict[str, str] = {
    "how-tos": "How-To",
    "thought-leadership": "Thought Leadership",
    "google-analytics": "Google Analytics",
    "tracking-solutions": "Tracking Solutions",
    "my-projects": "My Projects",
    "events": "How-To",
    "uncategorized": "How-To",
}

DEFAULT_CATEGORY = "How-To"


def site_categories() -> List[str]:
    """Distinct category values in schema order."""
    seen: List[str] = []
    for name in _SLUG_TO_CATEGORY.values():
        if name not in seen:
            seen.append(name)
    return seen


def map_category(wp_category_ids: Iterable[int], categories_by_id: Mapping[int, Dict[str, Any]]) -> str:
    """
    Pick the site category for a post.

    The first WordPress category (in the post's own order) whose slug is
    known wins.  Unknown or missing categories fall back to
    :data:`DEFAULT_CATEGORY`.
    """
    for cat_id in wp_category_ids or []:
        cat = categories_by_id.get(cat_id)
        if cat and cat.get("slug") in _SLUG_TO_CATEGORY:
            return _SLUG_TO_CATEGORY[cat["slug"]]
    return DEFAULT_CATEGORY
