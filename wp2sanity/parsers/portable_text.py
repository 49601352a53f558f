"""
Local HTML → Portable Text converter.

WordPress post bodies are parsed with BeautifulSoup and walked depth-first.
Each top-level node is classified into zero or more blocks:

* text, headings, paragraphs, quotes and list items become ``block`` entries
  whose ``children`` are spans carrying ``strong``/``em``/``code`` marks and
  link keys that point into the block's ``markDefs``;
* ``<img>`` and ``<figure>`` become ``image`` entries when the image URL is
  present in the asset map built by the uploader, and are dropped otherwise;
* ``<pre>`` becomes a ``code`` entry;
* generic containers are recursed into; anything else that still holds text
  is kept as a plain ``normal`` block.

The conversion never raises on odd markup.  Keys come from an injected
generator so the output is structurally deterministic.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, NamedTuple, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PageElement, PreformattedString, Tag

from .keys import KeyGenerator, RandomKeyGenerator
from .portable_schema import (
    code_block,
    heading_style,
    image_block,
    link_def,
    span,
    text_block,
    validate_portable_text,
)


Block = Dict[str, Any]

HEADINGS = {"h1", "h2", "h3", "h4", "h5", "h6"}
CONTAINERS = {"html", "body", "div", "section", "article", "main", "aside", "header", "footer", "span", "figure"}
MARK_TAGS = {
    "strong": "strong",
    "b": "strong",
    "em": "em",
    "i": "em",
    "code": "code",
}
_LANGUAGE_RE = re.compile(r"^(?:language|lang)-(\w+)")
# WordPress always writes attributes on the opening tag: [caption id="..." align="..."]
_CAPTION_SHORTCODE_RE = re.compile(r"\[caption\s[^\]]*\]|\[/caption\]", re.IGNORECASE)


class InlineRun(NamedTuple):
    """Spans and link definitions produced by one inline subtree."""

    spans: Tuple[Dict[str, Any], ...] = ()
    mark_defs: Tuple[Dict[str, Any], ...] = ()


def normalize_ws(text: str) -> str:
    # &nbsp; arrives as U+00A0 after parsing
    return (text or "").replace("\xa0", " ")


def _is_markup_only(node: PageElement) -> bool:
    # Comments, doctypes, CDATA and processing instructions carry no content
    return isinstance(node, PreformattedString)


def _strip_caption_shortcodes(soup: BeautifulSoup) -> None:
    """Remove ``[caption]`` shortcode markers from text outside code."""
    for text in soup.find_all(string=_CAPTION_SHORTCODE_RE):
        if _is_markup_only(text) or text.find_parent(["pre", "code"]) is not None:
            continue
        text.replace_with(_CAPTION_SHORTCODE_RE.sub("", str(text)))


def _has_visible_text(spans: Iterable[Dict[str, Any]]) -> bool:
    return any(s["text"].strip() for s in spans)


def _attr(tag: Tag, name: str) -> str:
    value = tag.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value or ""


def _class_tokens(tag: Optional[Tag]) -> List[str]:
    if tag is None:
        return []
    value = tag.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


class PortableTextConverter:
    """Convert one HTML fragment to a list of Portable Text blocks."""

    def __init__(self, image_assets: Optional[Mapping[str, str]] = None, key_gen: Optional[KeyGenerator] = None) -> None:
        self.image_assets: Mapping[str, str] = image_assets or {}
        self.key_gen: KeyGenerator = key_gen or RandomKeyGenerator()
        self._handlers: Dict[str, Callable[[Tag], List[Block]]] = {
            "p": self._paragraph,
            "blockquote": self._blockquote,
            "ul": self._list,
            "ol": self._list,
            "pre": self._preformatted,
            "img": self._standalone_image,
            "figure": self._figure,
        }
        for h in HEADINGS:
            self._handlers[h] = self._heading

    def key(self) -> str:
        return self.key_gen.next()

    def convert(self, html: str) -> List[Block]:
        if not html or not html.strip():
            return []
        soup = BeautifulSoup(html, "html.parser")
        for bad in soup.find_all(["script", "style"]):
            bad.decompose()
        _strip_caption_shortcodes(soup)

        blocks: List[Block] = []
        for child in soup.children:
            try:
                blocks.extend(self._classify(child))
            except RecursionError:
                # unclosed tags in legacy posts can nest deeper than the walk allows
                text = child.get_text() if isinstance(child, Tag) else str(child)
                blocks.extend(self._optional(self._plain_text(text)))
        return validate_portable_text(blocks)

    # --- Block level ---

    def _classify(self, node: PageElement) -> List[Block]:
        if _is_markup_only(node):
            return []
        if isinstance(node, NavigableString):
            return self._optional(self._plain_text(str(node)))
        if not isinstance(node, Tag):
            return []
        name = (node.name or "").lower()
        handler = self._handlers.get(name)
        if handler is not None:
            return handler(node)
        if name in CONTAINERS:
            return self._container(node)
        return self._optional(self._fallback(node))

    @staticmethod
    def _optional(block: Optional[Block]) -> List[Block]:
        return [block] if block is not None else []

    def _container(self, node: Tag) -> List[Block]:
        blocks: List[Block] = []
        for child in node.children:
            blocks.extend(self._classify(child))
        return blocks

    def _plain_text(self, raw: str, style: str = "normal") -> Optional[Block]:
        text = normalize_ws(raw).strip()
        if not text:
            return None
        return text_block(self.key(), [span(self.key(), text)], style=style)

    def _text_block(self, run: InlineRun, **kwargs: Any) -> Optional[Block]:
        if not _has_visible_text(run.spans):
            return None
        return text_block(self.key(), run.spans, run.mark_defs, **kwargs)

    def _heading(self, node: Tag) -> List[Block]:
        style = heading_style(int(node.name[1]))
        return self._optional(self._text_block(self._inline(node.children), style=style))

    def _paragraph(self, node: Tag) -> List[Block]:
        img = self._sole_image(node)
        if img is not None:
            return self._optional(self._image(img))
        return self._optional(self._text_block(self._inline(node.children)))

    def _sole_image(self, node: Tag) -> Optional[Tag]:
        """Return the image when it is the only meaningful content of ``node``."""
        meaningful = []
        for child in node.children:
            if _is_markup_only(child):
                continue
            if isinstance(child, NavigableString):
                if normalize_ws(str(child)).strip():
                    meaningful.append(child)
            elif isinstance(child, Tag) and child.name != "br":
                meaningful.append(child)
        if len(meaningful) != 1 or not isinstance(meaningful[0], Tag):
            return None
        only = meaningful[0]
        if only.name == "img":
            return only
        if only.name in MARK_TAGS or only.name in {"a", "span"}:
            return self._sole_image(only)
        return None

    def _blockquote(self, node: Tag) -> List[Block]:
        blocks: List[Block] = []
        for child in node.children:
            if _is_markup_only(child):
                continue
            if isinstance(child, NavigableString):
                blocks.extend(self._optional(self._plain_text(str(child), style="blockquote")))
            elif isinstance(child, Tag):
                children = child.children if child.name == "p" else [child]
                run = self._inline(children)
                blocks.extend(self._optional(self._text_block(run, style="blockquote")))
        return blocks

    def _list(self, node: Tag) -> List[Block]:
        kind = "number" if node.name == "ol" else "bullet"
        blocks: List[Block] = []
        for li in node.find_all("li", recursive=False):
            run = self._inline(li.children)
            blocks.extend(self._optional(self._text_block(run, list_item=kind, level=1)))
        return blocks

    def _preformatted(self, node: Tag) -> List[Block]:
        code_el = node.find("code")
        source = code_el if isinstance(code_el, Tag) else node
        text = normalize_ws(source.get_text())
        language = "text"
        for tag in (code_el if isinstance(code_el, Tag) else None, node):
            found = next((m.group(1) for m in map(_LANGUAGE_RE.match, _class_tokens(tag)) if m), None)
            if found:
                language = found
                break
        return [code_block(self.key(), text, language)]

    def _image(self, img: Tag, caption: str = "") -> Optional[Block]:
        src = _attr(img, "src")
        asset_id = self.image_assets.get(src) if src else None
        if not asset_id:
            return None
        alt = _attr(img, "alt") or caption
        return image_block(self.key(), asset_id, alt=alt, caption=caption or None)

    def _standalone_image(self, node: Tag) -> List[Block]:
        return self._optional(self._image(node))

    def _figure(self, node: Tag) -> List[Block]:
        img = node.find("img")
        if isinstance(img, Tag):
            figcaption = node.find("figcaption")
            caption = normalize_ws(figcaption.get_text()).strip() if isinstance(figcaption, Tag) else ""
            block = self._image(img, caption=caption)
            if block is not None:
                return [block]
        return self._container(node)

    def _fallback(self, node: Tag) -> Optional[Block]:
        return self._plain_text(node.get_text())

    # --- Inline level ---

    def _inline(self, children: Iterable[PageElement], marks: Tuple[str, ...] = ()) -> InlineRun:
        spans: List[Dict[str, Any]] = []
        defs: List[Dict[str, Any]] = []

        for child in children:
            if _is_markup_only(child):
                continue
            if isinstance(child, NavigableString):
                text = normalize_ws(str(child))
                # keep a lone separating space, drop indentation and newlines
                if text.strip() or text == " ":
                    spans.append(span(self.key(), text, marks))
                continue
            if not isinstance(child, Tag):
                continue

            name = (child.name or "").lower()
            if name == "br":
                spans.append(span(self.key(), "\n"))
                continue
            if name == "img":
                # images cannot live inside a text block
                continue

            if name in MARK_TAGS:
                mark = MARK_TAGS[name]
                inner = self._inline(child.children, marks if mark in marks else marks + (mark,))
            elif name == "a":
                link_key = self.key()
                inner = self._inline(child.children, marks + (link_key,))
                if inner.spans:
                    link = link_def(link_key, _attr(child, "href"), _attr(child, "target") == "_blank")
                    inner = InlineRun(inner.spans, (link,) + inner.mark_defs)
            else:
                inner = self._inline(child.children, marks)

            spans.extend(inner.spans)
            defs.extend(inner.mark_defs)

        return InlineRun(tuple(spans), tuple(defs))


def convert_html_to_portable_text(
    html: str,
    image_assets: Optional[Mapping[str, str]] = None,
    *,
    key_gen: Optional[KeyGenerator] = None,
) -> List[Block]:
    """
    Convert a WordPress post body to Portable Text blocks.

    :param html: Raw HTML fragment of the post body.
    :param image_assets: Mapping of absolute image URL to Sanity asset id.
        Images whose URL is missing are omitted from the output.
    :param key_gen: Object with a ``next()`` method returning unique keys.
        Defaults to :class:`~wp2sanity.parsers.keys.RandomKeyGenerator`.
    :return: The ordered list of ``block``, ``image`` and ``code`` entries.
    """
    return PortableTextConverter(image_assets, key_gen).convert(html)
