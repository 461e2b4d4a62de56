"""Tests for ETag / Last-Modified conditional responses."""

from datetime import datetime, timedelta, timezone

from craftfeed.feed.conditional import (
    CACHE_CONTROL,
    build_feed_response,
    compute_etag,
    feed_error_response,
    http_date,
    should_return_304,
)

CONTENT = '<?xml version="1.0" encoding="UTF-8"?>\n<rss version="2.0"><channel /></rss>\n'
MODIFIED = datetime(2024, 1, 15, 10, 30, 0, 250000, tzinfo=timezone.utc)


class TestComputeEtag:
    """Tests for compute_etag()."""

    def test_is_quoted_md5(self):
        assert compute_etag("hello") == '"5d41402abc4b2a76b9719d911017c592"'

    def test_stable_for_same_content(self):
        assert compute_etag(CONTENT) == compute_etag(CONTENT)

    def test_changes_with_content(self):
        assert compute_etag(CONTENT) != compute_etag(CONTENT + " ")

    def test_hashes_utf8_bytes(self):
        assert compute_etag("café") != compute_etag("cafe")


class TestShouldReturn304:
    """Tests for should_return_304()."""

    def test_no_conditional_headers(self):
        assert should_return_304({}, compute_etag(CONTENT), MODIFIED) is False

    def test_matching_if_none_match(self):
        etag = compute_etag(CONTENT)
        assert should_return_304({"If-None-Match": etag}, etag, MODIFIED) is True

    def test_header_lookup_is_case_insensitive(self):
        etag = compute_etag(CONTENT)
        assert should_return_304({"if-none-match": etag}, etag, MODIFIED) is True

    def test_unquoted_etag_does_not_match(self):
        etag = compute_etag(CONTENT)
        assert should_return_304({"If-None-Match": etag.strip('"')}, etag, MODIFIED) is False

    def test_if_modified_since_equal_to_last_modified(self):
        headers = {"If-Modified-Since": http_date(MODIFIED)}
        assert should_return_304(headers, compute_etag(CONTENT), MODIFIED) is True

    def test_if_modified_since_after_last_modified(self):
        headers = {"If-Modified-Since": http_date(MODIFIED + timedelta(days=1))}
        assert should_return_304(headers, compute_etag(CONTENT), MODIFIED) is True

    def test_if_modified_since_before_last_modified(self):
        headers = {"If-Modified-Since": http_date(MODIFIED - timedelta(seconds=1))}
        assert should_return_304(headers, compute_etag(CONTENT), MODIFIED) is False

    def test_stale_etag_falls_back_to_if_modified_since(self):
        headers = {"If-None-Match": '"stale"', "If-Modified-Since": http_date(MODIFIED)}
        assert should_return_304(headers, compute_etag(CONTENT), MODIFIED) is True

    def test_unparseable_date_is_ignored(self):
        headers = {"If-Modified-Since": "yesterday-ish"}
        assert should_return_304(headers, compute_etag(CONTENT), MODIFIED) is False


class TestBuildFeedResponse:
    """Tests for build_feed_response()."""

    def test_full_response_headers(self):
        response = build_feed_response({}, CONTENT, "application/rss+xml", MODIFIED)

        assert response.status == 200
        assert response.body == CONTENT
        assert response.headers["ETag"] == compute_etag(CONTENT)
        assert response.headers["Last-Modified"] == "Mon, 15 Jan 2024 10:30:00 GMT"
        assert response.headers["Cache-Control"] == CACHE_CONTROL
        assert response.headers["Content-Type"] == "application/rss+xml; charset=utf-8"
        assert response.headers["Content-Length"] == str(len(CONTENT.encode("utf-8")))
        assert response.headers["X-Robots-Tag"] == "noindex"

    def test_content_length_counts_bytes(self):
        content = "é" * 10
        response = build_feed_response({}, content, "application/feed+json", MODIFIED)
        assert response.headers["Content-Length"] == "20"

    def test_not_modified_has_empty_body_and_validators(self):
        etag = compute_etag(CONTENT)
        response = build_feed_response(
            {"If-None-Match": etag}, CONTENT, "application/rss+xml", MODIFIED
        )

        assert response.status == 304
        assert response.body == ""
        assert response.headers["ETag"] == etag
        assert response.headers["Cache-Control"] == CACHE_CONTROL
        assert "Last-Modified" in response.headers
        assert "Content-Type" not in response.headers

    def test_extra_headers_on_both_paths(self):
        extra = {"Access-Control-Allow-Origin": "*"}
        full = build_feed_response({}, CONTENT, "application/feed+json", MODIFIED, extra)
        cached = build_feed_response(
            {"If-None-Match": compute_etag(CONTENT)},
            CONTENT,
            "application/feed+json",
            MODIFIED,
            extra,
        )
        assert full.headers["Access-Control-Allow-Origin"] == "*"
        assert cached.headers["Access-Control-Allow-Origin"] == "*"


def test_feed_error_response_escapes_slug():
    response = feed_error_response("<bad&slug>")

    assert response.status == 500
    assert "<title>Feed Error</title>" in response.body
    assert "Unable to generate feed for category: &lt;bad&amp;slug&gt;" in response.body
    assert response.headers["Cache-Control"] == "no-cache"
    assert response.headers["Content-Type"].startswith("application/rss+xml")
