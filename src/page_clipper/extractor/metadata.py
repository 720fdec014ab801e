"""Pattern-based metadata scraping from raw, possibly malformed markup."""

import html
import re
from urllib.parse import urljoin

DEFAULT_TITLE = "Shared Link"

# Checked in order; the first hit wins.
_PREVIEW_IMAGE_PATTERNS = [
    re.compile(
        r"""<meta\s[^>]*property=["']og:image["']\s[^>]*content=["']([^"']*)["']""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<meta\s[^>]*content=["']([^"']*)["']\s[^>]*property=["']og:image["']""",
        re.IGNORECASE,
    ),
    re.compile(
        r"""<meta\s[^>]*name=["']twitter:image["']\s[^>]*content=["']([^"']*)["']""",
        re.IGNORECASE,
    ),
]

_TITLE_RE = re.compile(r"<title[^>]*>(.*?)</title>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


def extract_preview_image(markup: str, base_url: str | None = None) -> str:
    """Return the page's preview image URL, or ``""`` if none is declared.

    Looks for ``og:image`` (either attribute order) and then
    ``twitter:image``. Relative URLs are resolved against ``base_url``
    when one is given.
    """
    if not markup:
        return ""
    for pattern in _PREVIEW_IMAGE_PATTERNS:
        match = pattern.search(markup)
        if not match:
            continue
        url = html.unescape(match.group(1)).strip()
        if not url:
            continue
        if base_url:
            url = urljoin(base_url, url)
        return url
    return ""


def extract_title(markup: str, default: str = DEFAULT_TITLE) -> str:
    """Text of the first ``<title>`` element with embedded tags stripped."""
    match = _TITLE_RE.search(markup or "")
    if not match:
        return default
    title = _TAG_RE.sub("", match.group(1))
    title = _WHITESPACE_RE.sub(" ", html.unescape(title)).strip()
    return title or default
