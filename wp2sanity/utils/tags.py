from __future__ import annotations

from collections import Counter
import re
from typing import Any, Dict, Iterable, List, Mapping

from .entities import decode_entities


def normalize_label(value: str) -> str:
    """Decode HTML entities and collapse inner whitespace.

    Preserves original casing but trims leading/trailing spaces
    and converts sequences of whitespace to a single space.
    """
    if not value:
        return ""
    text = decode_entities(value).strip()
    return re.sub(r"\s+", " ", text)


def tag_size(post_count: int) -> str:
    """Display size in the tag cloud, from the number of posts using the tag."""
    if post_count >= 5:
        return "lg"
    if post_count <= 1:
        return "sm"
    return "default"


def count_tag_usage(posts: Iterable[Dict[str, Any]]) -> Counter:
    """Count how many posts reference each WordPress tag id."""
    counts: Counter = Counter()
    for post in posts:
        counts.update(post.get("tags") or [])
    return counts


def tag_names(wp_tag_ids: Iterable[int], tags_by_id: Mapping[int, Dict[str, Any]]) -> List[str]:
    """
    Resolve a post's tag ids to display names.

    Unknown ids are skipped; names are normalized and deduplicated
    case-insensitively, keeping the first-seen casing.
    """
    seen_lower = set()
    result: List[str] = []
    for tag_id in wp_tag_ids or []:
        tag = tags_by_id.get(tag_id)
        if not tag:
            continue
        label = normalize_label(tag.get("name", ""))
        key = label.lower()
        if label and key not in seen_lower:
            seen_lower.add(key)
            result.append(label)
    return result
