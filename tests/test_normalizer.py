"""Tests for normalizing CMS posts into feed entries."""

from datetime import datetime, timedelta, timezone

from craftfeed.content.models import (
    Broken,
    RawPost,
    RichTextBlock,
    RichTextSpan,
    Unresolved,
)
from craftfeed.feed.normalizer import (
    DEFAULT_AUTHOR_EMAIL,
    entry_url,
    make_excerpt,
    normalize,
)

SITE = "https://100daysofcraft.com"
FIRST_PUBLISHED = datetime(2024, 1, 10, 8, 0, 0, tzinfo=timezone.utc)


def make_post(**overrides) -> RawPost:
    """Helper to create a fully populated RawPost."""
    data = {
        "id": "post-1",
        "slug": "day-one",
        "title": "Day One",
        "body": [
            {
                "type": "paragraph",
                "text": "Read the intro first.",
                "spans": [
                    {"start": 9, "end": 14, "type": "hyperlink", "data": {"url": "/intro"}}
                ],
            }
        ],
        "published_at": datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
        "first_published_at": FIRST_PUBLISHED,
        "category": {
            "state": "resolved",
            "value": {"id": "cat-1", "slug": "design", "name": "Design"},
        },
        "author": {
            "state": "resolved",
            "value": {"id": "auth-1", "slug": "ada", "name": "Ada Lovelace"},
        },
        "image_url": "/images/day-one.png",
    }
    data.update(overrides)
    return RawPost(**data)


class TestMakeExcerpt:
    """Tests for excerpt generation."""

    def test_short_text_unchanged(self):
        assert make_excerpt("Short text") == "Short text"

    def test_strips_tags_and_collapses_whitespace(self):
        assert make_excerpt("<p>Hello</p>\n\n<b>world</b>  !") == "Hello world !"

    def test_plain_text_keeps_angle_brackets(self):
        text = "Compare a<b and b>c in code"
        assert make_excerpt(text, is_html=False) == text

    def test_long_text_is_truncated_with_ellipsis(self):
        excerpt = make_excerpt("a" * 500)
        assert len(excerpt) <= 160
        assert excerpt.endswith("...")

    def test_exactly_max_length_is_not_truncated(self):
        text = "b" * 160
        assert make_excerpt(text) == text

    def test_multibyte_characters_are_never_split(self):
        excerpt = make_excerpt("é🎨" * 200)
        assert len(excerpt) <= 160
        # Encodes cleanly, so no code point was cut in half
        excerpt.encode("utf-8")
        assert excerpt[:-3].replace("é", "").replace("🎨", "") == ""


class TestNormalize:
    """Tests for normalize()."""

    def test_fully_populated_post(self):
        entry = normalize(make_post(), SITE)

        assert entry.id == f"{SITE}/blog/design/day-one"
        assert entry.link == entry.id
        assert entry.title == "Day One"
        assert entry.category.slug == "design"
        assert entry.category.name == "Design"
        assert entry.author.name == "Ada Lovelace"
        assert entry.author.email == DEFAULT_AUTHOR_EMAIL
        assert entry.author.profile_url == f"{SITE}/authors/ada"
        assert entry.image == f"{SITE}/images/day-one.png"
        assert entry.published_at == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    def test_relative_links_in_content_are_absolute(self):
        entry = normalize(make_post(), SITE)
        assert f'<a href="{SITE}/intro">intro</a>' in entry.content_html
        assert 'href="/intro"' not in entry.content_html

    def test_summary_derived_from_body(self):
        entry = normalize(make_post(), SITE)
        assert entry.summary == "Read the intro first."

    def test_summary_keeps_literal_angle_brackets_from_body(self):
        body = [{"type": "paragraph", "text": "Compare a<b and b>c in code"}]
        entry = normalize(make_post(body=body), SITE)

        assert entry.summary == "Compare a<b and b>c in code"
        assert "a&lt;b and b&gt;c" in entry.content_html

    def test_explicit_excerpt_wins(self):
        entry = normalize(make_post(excerpt="A hand-written teaser."), SITE)
        assert entry.summary == "A hand-written teaser."

    def test_blank_excerpt_falls_back_to_body(self):
        entry = normalize(make_post(excerpt="   "), SITE)
        assert entry.summary == "Read the intro first."

    def test_missing_title_becomes_untitled(self):
        assert normalize(make_post(title=None), SITE).title == "Untitled"
        assert normalize(make_post(title="   "), SITE).title == "Untitled"

    def test_unresolved_category_uses_uncategorized(self):
        entry = normalize(make_post(category=Unresolved()), SITE)
        assert entry.category is None
        assert entry.id == f"{SITE}/blog/uncategorized/day-one"

    def test_broken_category_is_omitted(self):
        entry = normalize(make_post(category=Broken(id="deleted-cat")), SITE)
        assert entry.category is None
        assert "/uncategorized/" in entry.link

    def test_broken_author_becomes_anonymous(self):
        entry = normalize(make_post(author=Broken(id="gone")), SITE)
        assert entry.author.name == "Anonymous"
        assert entry.author.profile_url is None

    def test_unresolved_author_becomes_anonymous(self):
        entry = normalize(make_post(author=Unresolved(id="auth-9")), SITE)
        assert entry.author.name == "Anonymous"

    def test_resolved_author_without_name(self):
        entry = normalize(
            make_post(author={"state": "resolved", "value": {"id": "a", "slug": "a"}}), SITE
        )
        assert entry.author.name == "Anonymous"

    def test_publication_date_falls_back_to_first_publication(self):
        entry = normalize(make_post(published_at=None), SITE)
        assert entry.published_at == FIRST_PUBLISHED

    def test_naive_dates_are_treated_as_utc(self):
        entry = normalize(make_post(published_at=datetime(2024, 2, 1, 12, 0)), SITE)
        assert entry.published_at.tzinfo is not None
        assert entry.published_at == datetime(2024, 2, 1, 12, 0, tzinfo=timezone.utc)

    def test_updated_at_only_when_later_than_published(self):
        published = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        later = normalize(make_post(last_published_at=published + timedelta(days=1)), SITE)
        same = normalize(make_post(last_published_at=published), SITE)

        assert later.updated_at == published + timedelta(days=1)
        assert same.updated_at is None

    def test_empty_body_gives_empty_content(self):
        entry = normalize(make_post(body=[]), SITE)
        assert entry.content_html == ""
        assert entry.summary == ""

    def test_absolute_image_url_unchanged(self):
        entry = normalize(make_post(image_url="https://images.cdn.io/a.png"), SITE)
        assert entry.image == "https://images.cdn.io/a.png"

    def test_no_image(self):
        assert normalize(make_post(image_url=None), SITE).image is None

    def test_constructed_models_accepted(self):
        """Rich text built from model instances renders like parsed JSON."""
        post = make_post(
            body=[
                RichTextBlock(
                    type="paragraph",
                    text="Bold move",
                    spans=[RichTextSpan(start=0, end=4, type="strong")],
                )
            ]
        )
        entry = normalize(post, SITE)
        assert entry.content_html == "<p><strong>Bold</strong> move</p>"


def test_entry_url_is_stable():
    assert entry_url(SITE, "design", "x") == f"{SITE}/blog/design/x"
    assert entry_url(SITE + "/", None, "x") == f"{SITE}/blog/uncategorized/x"

