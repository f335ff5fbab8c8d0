"""
Content helpers: slugs, plain text extraction and sanitization
"""
import re
import unicodedata
from typing import Any, Optional
from urllib.parse import urlparse

import bleach

ALLOWED_TAGS = [
    "p", "br", "strong", "em", "u", "s", "code", "pre",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "a", "img",
    "table", "thead", "tbody", "tr", "th", "td",
    "blockquote", "div", "span",
]
ALLOWED_ATTRIBUTES = {
    "*": ["class"],
    "a": ["href", "target", "rel", "title"],
    "img": ["src", "alt", "title", "width", "height"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto", "tel"]
MAX_USER_INPUT_LENGTH = 1_000_000

_NON_SLUG_RE = re.compile(r"[^a-z0-9-]+")
_DASHES_RE = re.compile(r"-+")


def slugify(value: str) -> str:
    """
    Generate a URL-friendly slug

    Diacritics are folded to their base letter ("Café" -> "cafe"); anything
    outside [a-z0-9-] becomes a hyphen.
    """
    normalized = unicodedata.normalize("NFD", value or "")
    ascii_text = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    base = ascii_text.lower().strip().replace(" ", "-")
    base = _NON_SLUG_RE.sub("-", base)
    return _DASHES_RE.sub("-", base).strip("-")


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


def extract_plain_text(content: Any) -> str:
    """
    Extract plain text from an HTML string or a rich text document

    Args:
        content: HTML string or {"type": "doc", "content": [...]} document

    Returns:
        Whitespace-joined text of all text nodes
    """
    if content is None:
        return ""
    if isinstance(content, str):
        return re.sub(r"<[^>]*>", "", content)

    parts = []

    def walk(node: Any):
        if isinstance(node, list):
            for child in node:
                walk(child)
        elif isinstance(node, dict):
            text = node.get("text")
            if isinstance(text, str):
                parts.append(text)
            walk(node.get("content"))

    walk(content)
    return " ".join(part.strip() for part in parts if part.strip())


def is_safe_url(url: Optional[str]) -> bool:
    """True for relative URLs and http(s)/mailto/tel links"""
    if not url:
        return False
    scheme = urlparse(url.strip()).scheme.lower()
    return scheme == "" or scheme in ALLOWED_PROTOCOLS


def sanitize_html(html: str) -> str:
    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
    )


def sanitize_document(content: Any) -> Any:
    """
    Recursively sanitize a rich text document

    Text nodes are cleaned with bleach, link marks and image nodes with an
    unsafe URL scheme are neutralised.
    """
    if isinstance(content, str):
        return sanitize_html(content)
    if isinstance(content, list):
        return [sanitize_document(item) for item in content]
    if not isinstance(content, dict):
        return content

    node = dict(content)
    if isinstance(node.get("text"), str):
        node["text"] = sanitize_html(node["text"])
    if "content" in node:
        node["content"] = sanitize_document(node["content"])

    marks = node.get("marks")
    if isinstance(marks, list):
        cleaned_marks = []
        for mark in marks:
            mark = dict(mark) if isinstance(mark, dict) else mark
            if isinstance(mark, dict) and mark.get("type") == "link" and isinstance(mark.get("attrs"), dict):
                attrs = dict(mark["attrs"])
                if not is_safe_url(attrs.get("href")):
                    attrs["href"] = "#"
                mark["attrs"] = attrs
            cleaned_marks.append(mark)
        node["marks"] = cleaned_marks

    if node.get("type") == "image" and isinstance(node.get("attrs"), dict):
        attrs = dict(node["attrs"])
        if not is_safe_url(attrs.get("src")):
            attrs["src"] = ""
        node["attrs"] = attrs

    return node


def sanitize_user_input(value: Optional[str]) -> Optional[str]:
    """Strip NUL bytes, trim whitespace and cap the length of plain text input"""
    if not value:
        return value
    cleaned = value.replace("\0", "").strip()
    return cleaned[:MAX_USER_INPUT_LENGTH]
