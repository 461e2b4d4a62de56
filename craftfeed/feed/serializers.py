"""Serialize feed documents to RSS 2.0, Atom 1.0 and JSON Feed 1.1.

All serializers are pure: the same FeedDocument always produces the same
text. Escaping is left to ElementTree and the json module; characters that
XML 1.0 cannot represent at all are dropped beforehand.
"""

import json
import mimetypes
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Any

from .models import FeedAuthor, FeedDocument, FeedEntry

ATOM_NS = "http://www.w3.org/2005/Atom"
CONTENT_NS = "http://purl.org/rss/1.0/modules/content/"
JSON_FEED_VERSION = "https://jsonfeed.org/version/1.1"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'

# Code points outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _clean(text: str | None) -> str:
    return _INVALID_XML_CHARS.sub("", text or "")


def rfc822(value: datetime) -> str:
    """Format a timestamp as an RFC 822 date, e.g. ``Mon, 15 Jan 2024 10:30:00 GMT``."""
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


def iso8601(value: datetime) -> str:
    """Format a timestamp as an RFC 3339 UTC date, e.g. ``2024-01-15T10:30:00Z``."""
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _sub(parent: ET.Element, tag: str, text: str | None = None, **attrib: str) -> ET.Element:
    elem = ET.SubElement(parent, tag, {k: _clean(v) for k, v in attrib.items()})
    if text is not None:
        elem.text = _clean(text)
    return elem


def _to_xml(root: ET.Element) -> str:
    ET.indent(root, space="    ")
    return XML_DECLARATION + ET.tostring(root, encoding="unicode") + "\n"


def _image_type(url: str) -> str:
    guessed, _ = mimetypes.guess_type(url.split("?", 1)[0])
    return guessed or "image/jpeg"


def _categories_url(doc: FeedDocument) -> str:
    return doc.categories_url or f"{doc.site_url.rstrip('/')}/categories"


def _rss_author(author: FeedAuthor) -> str:
    return f"{author.email} ({author.name})"


def to_rss2(doc: FeedDocument) -> str:
    """Render a FeedDocument as an RSS 2.0 document."""
    rss = ET.Element("rss", {"version": "2.0"})
    rss.set("xmlns:atom", ATOM_NS)
    rss.set("xmlns:content", CONTENT_NS)
    channel = _sub(rss, "channel")

    _sub(channel, "title", doc.title)
    _sub(channel, "link", doc.site_url)
    _sub(channel, "description", doc.description)
    _sub(channel, "lastBuildDate", rfc822(doc.updated_at))
    _sub(channel, "docs", doc.docs)
    _sub(channel, "generator", doc.generator)
    _sub(channel, "language", doc.language)
    _sub(channel, "ttl", str(doc.ttl))
    if doc.image:
        image = _sub(channel, "image")
        _sub(image, "title", doc.title)
        _sub(image, "url", doc.image)
        _sub(image, "link", doc.site_url)
    if doc.copyright:
        _sub(channel, "copyright", doc.copyright)
    _sub(channel, "atom:link", href=doc.feed_links.rss, rel="self", type="application/rss+xml")
    if doc.hub_url:
        _sub(channel, "atom:link", href=doc.hub_url, rel="hub")

    for entry in doc.entries:
        item = _sub(channel, "item")
        _sub(item, "title", entry.title)
        _sub(item, "link", entry.link)
        _sub(item, "guid", entry.id, isPermaLink="true")
        _sub(item, "pubDate", rfc822(entry.published_at))
        _sub(item, "description", entry.summary)
        if entry.content_html:
            _sub(item, "content:encoded", entry.content_html)
        _sub(item, "author", _rss_author(entry.author))
        if entry.category:
            _sub(
                item,
                "category",
                entry.category.name,
                domain=_categories_url(doc),
            )
        if entry.image:
            _sub(item, "enclosure", url=entry.image, length="0", type=_image_type(entry.image))

    return _to_xml(rss)


def _atom_person(parent: ET.Element, tag: str, person: FeedAuthor) -> None:
    elem = _sub(parent, tag)
    _sub(elem, "name", person.name)
    _sub(elem, "email", person.email)
    if person.profile_url:
        _sub(elem, "uri", person.profile_url)


def _atom_entry(feed: ET.Element, entry: FeedEntry, categories_url: str) -> None:
    elem = _sub(feed, "entry")
    _sub(elem, "title", entry.title, type="text")
    _sub(elem, "id", entry.id)
    _sub(elem, "link", href=entry.link, rel="alternate")
    _sub(elem, "updated", iso8601(entry.updated_at or entry.published_at))
    _sub(elem, "published", iso8601(entry.published_at))
    _sub(elem, "summary", entry.summary, type="text")
    if entry.content_html:
        _sub(elem, "content", entry.content_html, type="html")
    _atom_person(elem, "author", entry.author)
    if entry.category:
        _sub(
            elem,
            "category",
            term=entry.category.slug,
            label=entry.category.name,
            scheme=categories_url,
        )
    if entry.image:
        _sub(elem, "link", rel="enclosure", href=entry.image, type=_image_type(entry.image))


def to_atom1(doc: FeedDocument) -> str:
    """Render a FeedDocument as an Atom 1.0 document."""
    feed = ET.Element("feed", {"xmlns": ATOM_NS})
    _sub(feed, "id", doc.feed_id)
    _sub(feed, "title", doc.title)
    _sub(feed, "updated", iso8601(doc.updated_at))
    _sub(feed, "generator", doc.generator)
    _atom_person(feed, "author", doc.author)
    _sub(feed, "link", rel="alternate", href=doc.site_url)
    self_url = doc.feed_links.atom or doc.feed_links.rss
    _sub(feed, "link", rel="self", href=self_url)
    if doc.hub_url:
        _sub(feed, "link", rel="hub", href=doc.hub_url)
    _sub(feed, "subtitle", doc.description)
    if doc.image:
        _sub(feed, "logo", doc.image)
    if doc.favicon:
        _sub(feed, "icon", doc.favicon)
    if doc.copyright:
        _sub(feed, "rights", doc.copyright)

    categories_url = _categories_url(doc)
    for entry in doc.entries:
        _atom_entry(feed, entry, categories_url)

    return _to_xml(feed)


def _json_author(author: FeedAuthor) -> dict[str, Any]:
    data: dict[str, Any] = {"name": author.name}
    if author.profile_url:
        data["url"] = author.profile_url
    return data


def _json_item(entry: FeedEntry) -> dict[str, Any]:
    item: dict[str, Any] = {
        "id": entry.id,
        "url": entry.link,
        "title": entry.title,
        "content_html": entry.content_html,
        "summary": entry.summary,
    }
    if not entry.content_html:
        item["content_text"] = entry.summary or entry.title
    if entry.image:
        item["image"] = entry.image
    item["date_published"] = iso8601(entry.published_at)
    if entry.updated_at:
        item["date_modified"] = iso8601(entry.updated_at)
    item["authors"] = [_json_author(entry.author)]
    if entry.category:
        item["tags"] = [entry.category.name]
    return item


def to_json_feed1(doc: FeedDocument) -> str:
    """Render a FeedDocument as a JSON Feed 1.1 document."""
    data: dict[str, Any] = {
        "version": JSON_FEED_VERSION,
        "title": doc.title,
        "home_page_url": doc.site_url,
    }
    feed_url = doc.feed_links.json_feed
    if feed_url:
        data["feed_url"] = feed_url
    data["description"] = doc.description
    if doc.image:
        data["icon"] = doc.image
    if doc.favicon:
        data["favicon"] = doc.favicon
    data["language"] = doc.language
    data["authors"] = [_json_author(doc.author)]
    if doc.hub_url:
        data["hubs"] = [{"type": "WebSub", "url": doc.hub_url}]
    data["items"] = [_json_item(entry) for entry in doc.entries]

    return json.dumps(data, ensure_ascii=False, indent=4)


SERIALIZERS = {
    "rss": to_rss2,
    "atom": to_atom1,
    "json": to_json_feed1,
}
