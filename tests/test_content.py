"""
Unit tests for content helpers
"""
import pytest
from knowledge_base.services.content import (
    extract_plain_text, is_safe_url, sanitize_document, sanitize_user_input, slugify, truncate
)


@pytest.mark.unit
class TestSlugify:
    @pytest.mark.parametrize("value,expected", [
        ("Hello World", "hello-world"),
        ("Café Menu", "cafe-menu"),
        ("  Multiple   spaces  ", "multiple-spaces"),
        ("Q3 / Q4 plans!", "q3-q4-plans"),
        ("---", ""),
    ])
    def test_slugify(self, value, expected):
        assert slugify(value) == expected


@pytest.mark.unit
class TestPlainText:
    def test_document_text_nodes(self):
        document = {
            "type": "doc",
            "content": [
                {"type": "heading", "content": [{"type": "text", "text": "Title"}]},
                {"type": "paragraph", "content": [{"type": "text", "text": "First line"}]},
            ],
        }

        assert extract_plain_text(document) == "Title First line"

    def test_html_string(self):
        assert extract_plain_text("<p>Hello <strong>there</strong></p>") == "Hello there"

    def test_truncate(self):
        assert truncate("short", 10) == "short"
        assert truncate("a longer sentence", 8) == "a longer..."


@pytest.mark.unit
class TestSanitize:
    def test_unsafe_link_neutralised(self):
        document = {
            "type": "doc",
            "content": [{
                "type": "paragraph",
                "content": [{
                    "type": "text",
                    "text": "click",
                    "marks": [{"type": "link", "attrs": {"href": "javascript:alert(1)"}}],
                }],
            }],
        }

        cleaned = sanitize_document(document)
        mark = cleaned["content"][0]["content"][0]["marks"][0]

        assert mark["attrs"]["href"] == "#"

    def test_safe_link_kept(self):
        node = {"type": "text", "text": "docs", "marks": [{"type": "link", "attrs": {"href": "https://inbound.no"}}]}

        assert sanitize_document(node)["marks"][0]["attrs"]["href"] == "https://inbound.no"

    def test_unsafe_image_src_removed(self):
        node = {"type": "image", "attrs": {"src": "data:text/html;base64,AAAA", "alt": "x"}}

        assert sanitize_document(node)["attrs"]["src"] == ""

    def test_script_tags_stripped_from_text(self):
        node = {"type": "text", "text": "<script>alert(1)</script>hello"}

        assert "<script>" not in sanitize_document(node)["text"]

    def test_is_safe_url(self):
        assert is_safe_url("/articles/1")
        assert is_safe_url("mailto:it@inbound.no")
        assert not is_safe_url("javascript:void(0)")
        assert not is_safe_url("")

    def test_sanitize_user_input(self):
        assert sanitize_user_input("  hi\0 there  ") == "hi there"
        assert sanitize_user_input(None) is None
