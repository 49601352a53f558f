from __future__ import annotations

from html import unescape
import re
from typing import Tuple


# Entities WordPress emits in rendered titles and excerpts.  Curly quotes are
# flattened to their ASCII forms to match the titles already on the site.
_WP_ENTITIES: Tuple[Tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&#038;", "&"),
    ("&#8211;", "–"),
    ("&#8212;", "—"),
    ("&#8216;", "'"),
    ("&#8217;", "'"),
    ("&lsquo;", "'"),
    ("&rsquo;", "'"),
    ("&#039;", "'"),
    ("&#8220;", '"'),
    ("&#8221;", '"'),
    ("&ldquo;", '"'),
    ("&rdquo;", '"'),
    ("&#8230;", "…"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&nbsp;", " "),
)

_TAG_RE = re.compile(r"<[^>]+>")


def decode_entities(text: str) -> str:
    """Decode the WordPress entity table, then any entity left over."""
    if not text:
        return ""
    for entity, char in _WP_ENTITIES:
        text = text.replace(entity, char)
    return unescape(text).replace("\xa0", " ")


def strip_tags(html: str) -> str:
    """Remove every markup tag, leaving the text (entities untouched)."""
    return _TAG_RE.sub("", html or "")


def excerpt_from_html(html: str, max_length: int = 300) -> str:
    """Plain-text excerpt: tags stripped, entities decoded, single line."""
    text = decode_entities(strip_tags(html)).replace("\n", " ").strip()
    return text[:max_length]


def word_count(html: str) -> int:
    return len(strip_tags(html or "").split())
