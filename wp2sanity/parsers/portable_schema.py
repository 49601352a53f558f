from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


BLOCK_STYLES = ("normal", "h2", "h3", "h4", "h5", "h6", "blockquote")
LIST_KINDS = ("bullet", "number")
DECORATORS = ("strong", "em", "code")


# --- Builders for Portable Text nodes ---

def span(key: str, text: str, marks: Sequence[str] = ()) -> Dict[str, Any]:
    return {"_type": "span", "_key": key, "text": text or "", "marks": list(marks)}


def link_def(key: str, href: str, blank: bool = False) -> Dict[str, Any]:
    return {"_type": "link", "_key": key, "href": href or "", "blank": bool(blank)}


def text_block(
    key: str,
    children: Sequence[Dict[str, Any]],
    mark_defs: Sequence[Dict[str, Any]] = (),
    *,
    style: str = "normal",
    list_item: Optional[str] = None,
    level: int = 1,
) -> Dict[str, Any]:
    if style not in BLOCK_STYLES:
        style = "normal"
    block: Dict[str, Any] = {
        "_type": "block",
        "_key": key,
        "style": style,
        "children": list(children),
        "markDefs": list(mark_defs),
    }
    if list_item in LIST_KINDS:
        block["listItem"] = list_item
        block["level"] = max(1, int(level or 1))
    return block


def heading_style(level: int) -> str:
    """Map an HTML heading level to a block style; ``h1`` is reserved for the post title."""
    lvl = max(1, min(6, int(level or 1)))
    return f"h{max(2, lvl)}"


def image_block(key: str, asset_id: str, alt: str = "", caption: Optional[str] = None) -> Dict[str, Any]:
    node: Dict[str, Any] = {
        "_type": "image",
        "_key": key,
        "asset": {"_type": "reference", "_ref": asset_id},
        "alt": alt or "",
    }
    if caption:
        node["caption"] = caption
    return node


def code_block(key: str, code: str, language: Optional[str] = None) -> Dict[str, Any]:
    return {
        "_type": "code",
        "_key": key,
        "code": (code or "").strip(),
        "language": language or "text",
    }


# --- Minimal validator/normalizer ---

def validate_portable_text(blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Ensure a block list follows the invariants the site renderer relies on.
    - Only ``block``, ``image`` and ``code`` entries are kept.
    - Images must reference an asset.
    - A stray span at block level is wrapped in a ``normal`` block.
    - Marks on a span that are neither decorators nor keys of the block's
      ``markDefs`` are dropped, and unreferenced link definitions removed.
    """
    if not isinstance(blocks, list):
        return []

    fixed: List[Dict[str, Any]] = []
    for b in blocks:
        if not isinstance(b, dict):
            continue
        t = b.get("_type")
        if t == "span":
            fixed.append(text_block(b.get("_key", "") + "-block", [b]))
            continue
        if t == "image":
            if (b.get("asset") or {}).get("_ref"):
                fixed.append(b)
            continue
        if t == "code":
            fixed.append(b)
            continue
        if t != "block":
            continue

        defs = {d.get("_key"): d for d in b.get("markDefs", []) if isinstance(d, dict)}
        used = set()
        for child in b.get("children", []):
            marks = []
            for m in child.get("marks", []):
                if m in DECORATORS:
                    marks.append(m)
                elif m in defs:
                    marks.append(m)
                    used.add(m)
            child["marks"] = marks
        b["markDefs"] = [d for k, d in defs.items() if k in used]
        if b.get("style") not in BLOCK_STYLES:
            b["style"] = "normal"
        fixed.append(b)
    return fixed
