"""Render CMS structured rich text to HTML and plain text."""

import html
from typing import Sequence
from urllib.parse import urlsplit

from .models import RichTextBlock, RichTextSpan

BLOCK_TAGS = {
    "paragraph": "p",
    "heading1": "h1",
    "heading2": "h2",
    "heading3": "h3",
    "heading4": "h4",
    "heading5": "h5",
    "heading6": "h6",
    "preformatted": "pre",
}

LIST_TAGS = {"list-item": "ul", "o-list-item": "ol"}


def absolute_url(url: str, site_url: str) -> str:
    """Make a possibly relative URL absolute against the site root.

    Feed readers have no base URL to resolve relative links against, so
    ``/blog/x`` becomes ``https://site/blog/x``. URLs that already carry a
    scheme (``https:``, ``mailto:``) are returned unchanged and
    protocol-relative ones get ``https:``.

    Args:
        url: URL as stored in the CMS
        site_url: Absolute site root, e.g. ``https://100daysofcraft.com``

    Returns:
        An absolute URL
    """
    url = url.strip()
    if not url:
        return site_url
    if url.startswith("//"):
        return f"https:{url}"
    if urlsplit(url).scheme:
        return url
    return f"{site_url.rstrip('/')}/{url.lstrip('/')}"


def as_text(blocks: Sequence[RichTextBlock]) -> str:
    """Concatenate the text of all blocks, one block per line."""
    return "\n".join(block.text for block in blocks if block.text)


def _escape(text: str) -> str:
    return html.escape(text).replace("\n", "<br />")


def _open_tag(span: RichTextSpan, site_url: str) -> str:
    if span.type == "strong":
        return "<strong>"
    if span.type == "em":
        return "<em>"
    if span.type == "hyperlink":
        href = absolute_url(str(span.data.get("url") or ""), site_url)
        return f'<a href="{html.escape(href)}">'
    if span.type == "label":
        label = html.escape(str(span.data.get("label") or ""))
        return f'<span class="{label}">'
    return ""


def _close_tag(span: RichTextSpan) -> str:
    return {
        "strong": "</strong>",
        "em": "</em>",
        "hyperlink": "</a>",
        "label": "</span>",
    }.get(span.type, "")


def render_spans(text: str, spans: Sequence[RichTextSpan], site_url: str) -> str:
    """Render a block's text with its inline spans as nested HTML.

    The text is split at every span boundary. For each segment the spans
    covering it are kept open, outermost (earliest start, longest) first;
    overlapping spans are closed and reopened so the output always nests.
    """
    if not spans:
        return _escape(text)

    length = len(text)
    ordered = sorted(
        (s for s in spans if 0 <= s.start < s.end),
        key=lambda s: (s.start, -s.end),
    )
    cuts = {0, length}
    for s in ordered:
        cuts.add(min(s.start, length))
        cuts.add(min(s.end, length))
    bounds = sorted(cuts)

    out: list[str] = []
    stack: list[RichTextSpan] = []
    for a, b in zip(bounds, bounds[1:]):
        active = [s for s in ordered if s.start <= a and s.end >= b]

        keep = 0
        while keep < len(stack) and keep < len(active) and stack[keep] is active[keep]:
            keep += 1
        for span in reversed(stack[keep:]):
            out.append(_close_tag(span))
        del stack[keep:]

        for span in active[keep:]:
            out.append(_open_tag(span, site_url))
            stack.append(span)

        out.append(_escape(text[a:b]))

    for span in reversed(stack):
        out.append(_close_tag(span))

    return "".join(out)


def _render_block(block: RichTextBlock, site_url: str) -> str:
    if block.type == "image":
        if not block.url:
            return ""
        src = html.escape(absolute_url(block.url, site_url))
        alt = html.escape(block.alt or "")
        return f'<p class="block-img"><img src="{src}" alt="{alt}" loading="lazy" /></p>'

    if block.type == "embed":
        oembed = block.oembed or {}
        embed_url = oembed.get("embed_url")
        if not embed_url:
            return ""
        href = html.escape(absolute_url(str(embed_url), site_url))
        title = html.escape(str(oembed.get("title") or embed_url))
        return f'<p class="block-embed"><a href="{href}">{title}</a></p>'

    content = render_spans(block.text, block.spans, site_url)
    if block.type in LIST_TAGS:
        return f"<li>{content}</li>"

    tag = BLOCK_TAGS.get(block.type, "p")
    return f"<{tag}>{content}</{tag}>"


def as_html(blocks: Sequence[RichTextBlock], site_url: str) -> str:
    """Render rich-text blocks to an HTML fragment with absolute URLs.

    Consecutive ``list-item`` / ``o-list-item`` blocks are grouped into a
    single ``<ul>`` / ``<ol>``. Unknown block types render as paragraphs.

    Args:
        blocks: Structured rich text from the CMS
        site_url: Absolute site root used to rewrite relative links

    Returns:
        HTML fragment (empty string for an empty body)
    """
    out: list[str] = []
    open_list: str | None = None

    for block in blocks:
        list_tag = LIST_TAGS.get(block.type)
        if open_list and list_tag != open_list:
            out.append(f"</{open_list}>")
            open_list = None
        if list_tag and open_list is None:
            out.append(f"<{list_tag}>")
            open_list = list_tag

        rendered = _render_block(block, site_url)
        if rendered:
            out.append(rendered)

    if open_list:
        out.append(f"</{open_list}>")

    return "".join(out)
