"""Test locator validation, classification and slug derivation."""
import pytest
from content_archive.exceptions import InvalidInput
from content_archive.ingestion.locators import (
    classify,
    path_slug,
    validate_locator,
    video_id,
    webpage_ref,
)
from content_archive.models.document import DocumentKind


class TestClassification:

    @pytest.mark.parametrize("url,expected_id", [
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("https://youtube.com/watch?v=dQw4w9WgXcQ&t=42s", "dQw4w9WgXcQ"),
        ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ("http://m.youtube.com/watch?v=a_b-c_d-e_f", "a_b-c_d-e_f"),
    ])
    def test_video_urls(self, url, expected_id):
        assert classify(url) == DocumentKind.TRANSCRIPT
        assert video_id(url) == expected_id

    @pytest.mark.parametrize("url", [
        "https://example.com/blog/abcdefghijk",
        "https://www.youtube.com/channel/UC1234567890",
        "https://vimeo.com/watch?v=dQw4w9WgXcQ",
    ])
    def test_web_urls(self, url):
        assert classify(url) == DocumentKind.WEBPAGE

    def test_video_id_rejects_web_url(self):
        with pytest.raises(InvalidInput):
            video_id("https://example.com/post")


class TestValidation:

    @pytest.mark.parametrize("locator", [None, "", "   ", "example.com/page", "ftp://example.com/x", "https://"])
    def test_invalid_locators(self, locator):
        with pytest.raises(InvalidInput):
            validate_locator(locator)

    def test_strips_whitespace(self):
        assert validate_locator("  https://example.com/a  ") == "https://example.com/a"


class TestSlug:

    def test_punctuation_removed(self):
        slug = path_slug("https://example.com/blog/My-Post!!")
        assert slug == "MyPost"
        assert slug.isalnum()
        assert len(slug) <= 30

    def test_truncated_to_thirty(self):
        slug = path_slug("https://example.com/" + "a" * 50)
        assert slug == "a" * 30

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "https://example.com/",
        "https://example.com/!!!/",
    ])
    def test_index_fallback(self, url):
        assert path_slug(url) == "index"

    def test_trailing_slash_uses_last_segment(self):
        assert path_slug("https://example.com/docs/intro/") == "intro"

    def test_query_ignored(self):
        assert path_slug("https://example.com/article.html?id=7") == "articlehtml"

    def test_webpage_ref_includes_domain(self):
        assert webpage_ref("https://Blog.Example.com/posts/Hello_World") == "blogexamplecom_HelloWorld"
