"""Structural validation of serialized RSS, Atom and JSON feeds."""

import json
import xml.etree.ElementTree as ET
from typing import Any
from urllib.parse import urlsplit

from .models import ValidationResult

ATOM_NS = "http://www.w3.org/2005/Atom"
JSON_FEED_VERSION_PREFIX = "https://jsonfeed.org/version/1"

RSS_CHANNEL_REQUIRED = ("title", "link", "description")
ATOM_FEED_REQUIRED = ("title", "id", "updated")
ATOM_ENTRY_REQUIRED = ("title", "id", "updated")


def _find(elem: ET.Element, name: str, namespace: str | None = None) -> ET.Element | None:
    """Find a direct child by local name; Atom children may be namespaced or not."""
    for child in elem:
        if child.tag == name:
            return child
        if namespace and child.tag == f"{{{namespace}}}{name}":
            return child
    return None


def _findall(elem: ET.Element, name: str, namespace: str | None = None) -> list[ET.Element]:
    tags = {name}
    if namespace:
        tags.add(f"{{{namespace}}}{name}")
    return [child for child in elem if child.tag in tags]


def _is_valid_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parts = urlsplit(value)
    return bool(parts.scheme and parts.netloc)


def _validate_rss(root: ET.Element, errors: list[str], warnings: list[str]) -> None:
    channel = _find(root, "channel") if root.tag == "rss" else None
    if root.tag != "rss":
        errors.append(f"Root element must be <rss>, found <{root.tag}>")
    if channel is None:
        errors.append("Missing required <channel> element")
        return

    for name in RSS_CHANNEL_REQUIRED:
        if _find(channel, name) is None:
            errors.append(f"Missing required channel element: <{name}>")

    items = _findall(channel, "item")
    if not items:
        warnings.append("No items found in feed")
        return

    for index, item in enumerate(items, start=1):
        if _find(item, "title") is None and _find(item, "description") is None:
            errors.append(f"Item {index} missing both title and description")
        if _find(item, "guid") is None:
            warnings.append(f"Item {index} missing guid element")
        if _find(item, "pubDate") is None:
            warnings.append(f"Item {index} missing pubDate")


def _validate_atom(root: ET.Element, errors: list[str], warnings: list[str]) -> None:
    if root.tag not in ("feed", f"{{{ATOM_NS}}}feed"):
        errors.append("Missing required <feed> element")
        return

    for name in ATOM_FEED_REQUIRED:
        if _find(root, name, ATOM_NS) is None:
            errors.append(f"Missing required feed element: <{name}>")

    entries = _findall(root, "entry", ATOM_NS)
    if not entries:
        warnings.append("No entries found in feed")
        return

    for index, entry in enumerate(entries, start=1):
        for name in ATOM_ENTRY_REQUIRED:
            if _find(entry, name, ATOM_NS) is None:
                errors.append(f"Entry {index} missing required element: <{name}>")

        has_content = _find(entry, "content", ATOM_NS) is not None
        has_summary = _find(entry, "summary", ATOM_NS) is not None
        if not has_content and not has_summary:
            errors.append(f"Entry {index} missing both content and summary")
        elif not has_summary:
            warnings.append(f"Entry {index} missing summary")


def _validate_xml(content: str, feed_format: str) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    try:
        root = ET.fromstring(content)
    except (ET.ParseError, UnicodeError, RecursionError) as exc:
        return ValidationResult(
            valid=False, errors=[f"XML parsing failed: {exc}"], warnings=warnings
        )

    if feed_format == "rss":
        _validate_rss(root, errors, warnings)
    else:
        _validate_atom(root, errors, warnings)

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def _validate_json(content: str) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    try:
        feed = json.loads(content)
    except (ValueError, RecursionError) as exc:
        return ValidationResult(
            valid=False, errors=[f"JSON parsing failed: {exc}"], warnings=warnings
        )

    if not isinstance(feed, dict):
        return ValidationResult(
            valid=False, errors=["Feed must be a JSON object"], warnings=warnings
        )

    version = feed.get("version")
    if not version:
        errors.append("Missing required field: version")
    elif not isinstance(version, str) or not version.startswith(JSON_FEED_VERSION_PREFIX):
        errors.append(f"Invalid version: {version}")

    if not feed.get("title"):
        errors.append("Missing required field: title")

    items = feed.get("items")
    if items is None:
        errors.append("Missing required field: items")
    elif not isinstance(items, list):
        errors.append("Items field must be an array")
    elif not items:
        warnings.append("No items found in feed")
    else:
        for index, item in enumerate(items, start=1):
            if not isinstance(item, dict):
                errors.append(f"Item {index} must be an object")
                continue
            if not item.get("id"):
                errors.append(f"Item {index} missing required field: id")
            if not item.get("content_html") and not item.get("content_text"):
                errors.append(f"Item {index} missing both content_html and content_text")
            if not item.get("date_published"):
                warnings.append(f"Item {index} missing date_published")

    for field in ("feed_url", "home_page_url"):
        if field in feed and not _is_valid_url(feed[field]):
            warnings.append(f"Invalid {field}: {feed[field]}")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def validate_feed(content: str, feed_format: str) -> ValidationResult:
    """
    Check a serialized feed against the structure its format requires.

    Findings are returned, never raised: format violations go to ``errors``
    and recommended-but-optional omissions to ``warnings``. A parse failure
    is reported as a single error and stops further checks.

    Args:
        content: Serialized feed text
        feed_format: One of "rss", "atom" or "json"

    Returns:
        ValidationResult with ``valid`` True when there are no errors
    """
    if not isinstance(content, str):
        return ValidationResult(valid=False, errors=["Feed content must be a string"])

    if feed_format in ("rss", "atom"):
        return _validate_xml(content, feed_format)
    if feed_format == "json":
        return _validate_json(content)

    return ValidationResult(valid=False, errors=[f"Unsupported feed format: {feed_format}"])
