"""Lightweight feed access tracking (logged, not stored)."""

import hashlib
import logging
import re
from typing import Mapping

logger = logging.getLogger(__name__)

READER_PATTERNS = {
    "Feedly": re.compile(r"Feedly", re.I),
    "Inoreader": re.compile(r"Inoreader", re.I),
    "NewsBlur": re.compile(r"NewsBlur", re.I),
    "Miniflux": re.compile(r"Miniflux", re.I),
    "FreshRSS": re.compile(r"FreshRSS", re.I),
    "Reeder": re.compile(r"Reeder", re.I),
    "NetNewsWire": re.compile(r"NetNewsWire", re.I),
    "Feedbin": re.compile(r"Feedbin", re.I),
    "The Old Reader": re.compile(r"theoldreader", re.I),
    "Flipboard": re.compile(r"Flipboard", re.I),
    "Thunderbird": re.compile(r"Thunderbird", re.I),
    "RSS Bandit": re.compile(r"RssBandit", re.I),
    "Liferea": re.compile(r"Liferea", re.I),
    "Vienna": re.compile(r"Vienna", re.I),
}


def identify_reader(user_agent: str) -> str:
    """Map a User-Agent string to a known feed reader name.

    Returns "generic-reader" for other agents mentioning feed/rss and
    "unknown" otherwise.
    """
    for name, pattern in READER_PATTERNS.items():
        if pattern.search(user_agent):
            return name

    lowered = user_agent.lower()
    if "feed" in lowered or "rss" in lowered:
        return "generic-reader"

    return "unknown"


def subscriber_id(headers: Mapping[str, str]) -> str:
    """Anonymous, stable identifier for a subscriber (no IP addresses)."""
    user_agent = headers.get("user-agent", "")
    accept_language = headers.get("accept-language", "")
    data = f"{user_agent}-{accept_language}-{identify_reader(user_agent)}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()[:16]


def track_feed_access(headers: Mapping[str, str], feed_type: str) -> dict:
    """Log one feed fetch and return what was recorded."""
    user_agent = headers.get("user-agent", "")
    record = {
        "feed_type": feed_type,
        "reader": identify_reader(user_agent),
        "subscriber_id": subscriber_id(headers),
        "conditional": bool(
            headers.get("if-none-match") or headers.get("if-modified-since")
        ),
    }
    logger.info(
        f"Feed access: type={record['feed_type']} reader={record['reader']} "
        f"subscriber={record['subscriber_id']} conditional={record['conditional']}"
    )
    return record
