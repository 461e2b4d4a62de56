"""Tests for feed validation."""

import json

import pytest

from craftfeed.feed.validator import validate_feed

VALID_RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Channel</title>
    <link>https://example.com</link>
    <description>Test</description>
    <item>
      <title>Post</title>
      <guid>https://example.com/post</guid>
      <pubDate>Mon, 15 Jan 2024 10:30:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

VALID_ATOM = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test</title>
  <id>https://example.com</id>
  <updated>2024-01-15T10:30:00Z</updated>
  <entry>
    <title>Post</title>
    <id>https://example.com/post</id>
    <updated>2024-01-15T10:30:00Z</updated>
    <summary>Hello</summary>
  </entry>
</feed>"""


def json_feed(**overrides) -> str:
    """Helper to create a serialized JSON feed."""
    data = {
        "version": "https://jsonfeed.org/version/1.1",
        "title": "Test",
        "home_page_url": "https://example.com",
        "feed_url": "https://example.com/feed.json",
        "items": [
            {
                "id": "https://example.com/post",
                "content_html": "<p>Hi</p>",
                "date_published": "2024-01-15T10:30:00Z",
            }
        ],
    }
    data.update(overrides)
    return json.dumps(data)


class TestRssValidation:
    """Tests for RSS 2.0 validation."""

    def test_valid_feed(self):
        result = validate_feed(VALID_RSS, "rss")
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_malformed_xml_stops_further_checks(self):
        result = validate_feed("<rss><channel>", "rss")
        assert not result.valid
        assert len(result.errors) == 1
        assert result.errors[0].startswith("XML parsing failed")

    def test_missing_channel(self):
        result = validate_feed('<rss version="2.0"></rss>', "rss")
        assert result.errors == ["Missing required <channel> element"]

    def test_missing_channel_elements(self):
        result = validate_feed("<rss><channel><title>T</title></channel></rss>", "rss")
        assert "Missing required channel element: <link>" in result.errors
        assert "Missing required channel element: <description>" in result.errors
        assert "No items found in feed" in result.warnings

    def test_item_without_title_or_description(self):
        xml = VALID_RSS.replace("<title>Post</title>", "")
        result = validate_feed(xml, "rss")
        assert not result.valid
        assert "Item 1 missing both title and description" in result.errors

    def test_item_without_guid_or_date_is_only_a_warning(self):
        xml = VALID_RSS.replace("<guid>https://example.com/post</guid>", "").replace(
            "<pubDate>Mon, 15 Jan 2024 10:30:00 GMT</pubDate>", ""
        )
        result = validate_feed(xml, "rss")
        assert result.valid
        assert result.warnings == ["Item 1 missing guid element", "Item 1 missing pubDate"]


class TestAtomValidation:
    """Tests for Atom 1.0 validation."""

    def test_valid_feed(self):
        result = validate_feed(VALID_ATOM, "atom")
        assert result.valid
        assert result.warnings == []

    def test_un_namespaced_feed_accepted(self):
        xml = VALID_ATOM.replace(' xmlns="http://www.w3.org/2005/Atom"', "")
        assert validate_feed(xml, "atom").valid

    def test_missing_feed_elements(self):
        xml = VALID_ATOM.replace("<id>https://example.com</id>", "")
        result = validate_feed(xml, "atom")
        assert "Missing required feed element: <id>" in result.errors

    def test_entry_missing_required_element(self):
        xml = VALID_ATOM.replace("<id>https://example.com/post</id>", "")
        result = validate_feed(xml, "atom")
        assert "Entry 1 missing required element: <id>" in result.errors

    def test_entry_without_content_or_summary(self):
        xml = VALID_ATOM.replace("<summary>Hello</summary>", "")
        result = validate_feed(xml, "atom")
        assert "Entry 1 missing both content and summary" in result.errors

    def test_entry_with_content_but_no_summary_warns(self):
        xml = VALID_ATOM.replace(
            "<summary>Hello</summary>", '<content type="html">&lt;p&gt;Hi&lt;/p&gt;</content>'
        )
        result = validate_feed(xml, "atom")
        assert result.valid
        assert result.warnings == ["Entry 1 missing summary"]

    def test_no_entries_warns(self):
        xml = VALID_ATOM.split("<entry>")[0] + "</feed>"
        result = validate_feed(xml, "atom")
        assert result.valid
        assert result.warnings == ["No entries found in feed"]

    def test_wrong_root_element(self):
        result = validate_feed(VALID_RSS, "atom")
        assert not result.valid


class TestJsonValidation:
    """Tests for JSON Feed validation."""

    def test_valid_feed(self):
        result = validate_feed(json_feed(), "json")
        assert result.valid
        assert result.warnings == []

    def test_version_1_0_accepted(self):
        assert validate_feed(json_feed(version="https://jsonfeed.org/version/1"), "json").valid

    def test_malformed_json(self):
        result = validate_feed("{not json", "json")
        assert not result.valid
        assert result.errors[0].startswith("JSON parsing failed")

    def test_invalid_version(self):
        result = validate_feed(json_feed(version="2.0"), "json")
        assert "Invalid version: 2.0" in result.errors

    def test_missing_title_and_items(self):
        feed = json.dumps({"version": "https://jsonfeed.org/version/1.1"})
        result = validate_feed(feed, "json")
        assert "Missing required field: title" in result.errors
        assert "Missing required field: items" in result.errors

    def test_items_must_be_a_list(self):
        result = validate_feed(json_feed(items={}), "json")
        assert "Items field must be an array" in result.errors

    def test_item_without_content(self):
        result = validate_feed(json_feed(items=[{"id": "x", "date_published": "d"}]), "json")
        assert "Item 1 missing both content_html and content_text" in result.errors

    def test_item_with_text_only_is_valid(self):
        items = [{"id": "x", "content_text": "hi", "date_published": "d"}]
        assert validate_feed(json_feed(items=items), "json").valid

    def test_item_missing_id_and_date(self):
        result = validate_feed(json_feed(items=[{"content_text": "hi"}]), "json")
        assert "Item 1 missing required field: id" in result.errors
        assert "Item 1 missing date_published" in result.warnings

    def test_invalid_urls_are_warnings(self):
        result = validate_feed(json_feed(feed_url="not a url"), "json")
        assert result.valid
        assert result.warnings == ["Invalid feed_url: not a url"]


@pytest.mark.parametrize("content", [None, 42, b"<rss/>"])
def test_non_string_content(content):
    result = validate_feed(content, "rss")
    assert not result.valid


def test_unsupported_format():
    result = validate_feed(VALID_RSS, "rdf")
    assert result.errors == ["Unsupported feed format: rdf"]


def test_deeply_nested_json_is_reported_not_raised():
    result = validate_feed("[" * 100000 + "]" * 100000, "json")
    assert not result.valid
    assert result.errors[0].startswith("JSON parsing failed")


@pytest.mark.parametrize("feed_format", ["rss", "atom"])
def test_lone_surrogate_is_reported_not_raised(feed_format):
    result = validate_feed("<rss>\ud800</rss>", feed_format)
    assert not result.valid
    assert result.errors[0].startswith("XML parsing failed")
