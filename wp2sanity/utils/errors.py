"""
Run reports for the migration.

Every post outcome is appended as one JSON object per line to
``reports/migration/errors.jsonl`` or ``reports/migration/success.jsonl``,
keyed by an event code from :data:`ERRORS` (unknown codes are used as their
own message).  The files are append-only so several runs can be compared;
delete the directory to start from a clean slate.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

ERRORS: Dict[str, str] = {
    "FEATURED_MEDIA": "Failed to resolve featured image",
    "SANITY_WRITE": "Sanity mutation failed",
    "WP_FETCH": "Failed to fetch from the WordPress REST API",
    "INVALID_POST": "WordPress post record could not be converted",
    "TAGS_WRITTEN": "Tags written successfully",
    "POST_WRITTEN": "Post written successfully",
}

REPORT_DIR = os.path.join("reports", "migration")


def _write_jsonl(filename: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as one JSON object per line to ``REPORT_DIR/filename``."""
    os.makedirs(REPORT_DIR, exist_ok=True)
    with open(os.path.join(REPORT_DIR, filename), "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def _entry(code: str, post: Dict[str, Any]) -> Dict[str, Any]:
    title = post.get("title")
    if isinstance(title, dict):
        title = title.get("rendered")
    return {
        "code": code,
        "message": ERRORS.get(code, code),
        "slug": post.get("slug"),
        "title": title,
    }


def report_error(code: str, post: Dict[str, Any], exc: Optional[Exception] = None) -> None:
    """Record a failed step for ``post`` and echo it on stdout.

    ``post`` is the WordPress record being migrated (only ``slug`` and
    ``title`` are read); pass ``{}`` for run-level failures.  The text of
    ``exc``, when given, is stored under ``error``.
    """
    entry = _entry(code, post)
    if exc is not None:
        entry["error"] = str(exc)
    print(f"[ERROR] {entry['message']} - {post.get('slug', '')}")
    _write_jsonl("errors.jsonl", entry)


def report_ok(code: str, post: Dict[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``post``; ``extra`` is merged into the entry."""
    entry = _entry(code, post)
    if extra:
        entry.update(extra)
    print(f"[OK] {entry['message']} - {post.get('slug', '')}")
    _write_jsonl("success.jsonl", entry)
