"""URL extraction and rewriting for HTML and Markdown bodies.

Only relative URLs are considered references; absolute http(s) URLs
point outside storage and are never extracted or rewritten. Malformed
markup is not an error, it simply produces no match.
"""

import re
from collections.abc import Mapping

from .meta import MetaType

# (tag, attribute) pairs that carry a URL in HTML
HTML_URL_ATTRIBUTES = (
    ("img", "src"),
    ("a", "href"),
    ("video", "src"),
    ("audio", "src"),
    ("source", "src"),
    ("embed", "src"),
    ("object", "data"),
)

# Group 1: quote, group 2: URL. The closing quote must match the opening one.
_HTML_URL_PATTERNS = tuple(
    re.compile(rf"""<{tag}[^>]+{attr}\s*=\s*(["'])([^"']+)\1""", re.IGNORECASE)
    for tag, attr in HTML_URL_ATTRIBUTES
)

# Group 1: attribute name, group 2: quote, group 3: URL
_HTML_ATTR_PATTERN = re.compile(
    r"""(src|href|data)\s*=\s*(["'])([^"']+)\2""", re.IGNORECASE
)

# Group 1: alt/text, group 2: URL with optional title
_MARKDOWN_IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\(([^)]+)\)")
_MARKDOWN_LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)]+)\)")

_ABSOLUTE_PREFIXES = ("http://", "https://")


def is_relative_url(url: str) -> bool:
    """Check if a URL is a non-blank relative path (not http:// or https://)."""
    url = url.strip()
    return bool(url) and not url.lower().startswith(_ABSOLUTE_PREFIXES)


def _split_title(target: str) -> tuple[str, str]:
    """Split a Markdown link target into (url, title).

    The title starts at the first quote character after the URL;
    it is returned as written, quotes included.
    """
    target = target.strip()
    idx = next((i for i, ch in enumerate(target) if ch in "\"'"), -1)
    if idx > 0:
        return target[:idx].strip(), target[idx:]
    return target, ""


def extract_html_urls(content: str) -> set[str]:
    """Extract all relative URLs from HTML content."""
    urls: set[str] = set()
    if not content:
        return urls

    for pattern in _HTML_URL_PATTERNS:
        for match in pattern.finditer(content):
            url = match.group(2).strip()
            if is_relative_url(url):
                urls.add(url)

    return urls


def replace_html_urls(content: str, replacements: Mapping[str, str]) -> str:
    """
    Replace URLs in HTML src/href/data attributes.

    The attribute name, its quote character and any whitespace inside the
    quotes are kept as written. URLs are looked up trimmed, the same way
    extract_html_urls reports them. URLs not present in replacements pass
    through unchanged.
    """
    if not content or not replacements:
        return content

    def substitute(match: re.Match[str]) -> str:
        attr, quote, raw = match.groups()
        url = raw.strip()
        new_url = replacements.get(url)
        if new_url is None or not is_relative_url(url):
            return match.group(0)
        start = raw.index(url)
        end = start + len(url)
        return f"{attr}={quote}{raw[:start]}{new_url}{raw[end:]}{quote}"

    return _HTML_ATTR_PATTERN.sub(substitute, content)


def extract_markdown_urls(content: str) -> set[str]:
    """Extract all relative URLs from Markdown images and links."""
    urls: set[str] = set()
    if not content:
        return urls

    for pattern in (_MARKDOWN_IMAGE_PATTERN, _MARKDOWN_LINK_PATTERN):
        for match in pattern.finditer(content):
            url, _ = _split_title(match.group(2))
            if is_relative_url(url):
                urls.add(url)

    return urls


def _markdown_replacer(prefix: str, replacements: Mapping[str, str]):
    def substitute(match: re.Match[str]) -> str:
        text, target = match.groups()
        url, title = _split_title(target)
        new_url = replacements.get(url)
        if new_url is None or not is_relative_url(url):
            return match.group(0)
        if title:
            return f"{prefix}[{text}]({new_url} {title})"
        return f"{prefix}[{text}]({new_url})"

    return substitute


def replace_markdown_urls(content: str, replacements: Mapping[str, str]) -> str:
    """
    Replace URLs in Markdown images and links.

    Alt/link text and optional titles are preserved. Images are rewritten
    first so the link pass never consumes an image's leading "!".
    """
    if not content or not replacements:
        return content

    result = _MARKDOWN_IMAGE_PATTERN.sub(_markdown_replacer("!", replacements), content)
    return _MARKDOWN_LINK_PATTERN.sub(_markdown_replacer("", replacements), result)


def extract_urls(content: str, meta_type: MetaType) -> set[str]:
    """Extract relative URLs from a text body of the given category."""
    if meta_type is MetaType.RICHTEXT:
        return extract_html_urls(content)
    if meta_type is MetaType.MARKDOWN:
        return extract_markdown_urls(content)
    raise ValueError(f"Not a content category: {meta_type.value}")


def replace_urls(
    content: str, replacements: Mapping[str, str], meta_type: MetaType
) -> str:
    """Rewrite URLs in a text body of the given category."""
    if meta_type is MetaType.RICHTEXT:
        return replace_html_urls(content, replacements)
    if meta_type is MetaType.MARKDOWN:
        return replace_markdown_urls(content, replacements)
    raise ValueError(f"Not a content category: {meta_type.value}")
