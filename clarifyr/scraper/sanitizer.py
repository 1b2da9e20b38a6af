"""Coarse HTML-to-text extraction.

:func:`sanitize` strips non-content markup (scripts, styles, frames, site
chrome, ad and cookie-consent blocks) and flattens what is left of the
document body into a single whitespace-collapsed line of text.

Text that decodes to something a parser would read as markup (a tutorial
showing ``&lt;nav&gt;``, a literal ``&amp;copy;``) is re-escaped on the way
out, so ``sanitize(sanitize(html)) == sanitize(html)`` for every input.
"""

from __future__ import annotations

import re
from html import unescape

from bs4 import BeautifulSoup, Tag

_DENY_TAGS = ["script", "style", "noscript", "iframe", "nav", "footer", "header"]

# Document containers are never removed, whatever their id/class says.
_CONTAINER_TAGS = frozenset({"html", "head", "body"})

# Words in an element's id/class that mark ad or cookie-consent containers,
# e.g. ``class="ad-slot"``, ``id="cookie_banner"``, ``class="gdpr-consent"``.
_MARKER_WORDS = frozenset(
    {
        "ad",
        "ads",
        "advert",
        "adverts",
        "advertisement",
        "advertising",
        "sponsored",
        "cookie",
        "cookies",
        "consent",
        "gdpr",
    }
)
_WORD_SPLIT = re.compile(r"[-_\s]+")
_WS = re.compile(r"\s+")
# A ``<`` the HTML parser would treat as the start of a tag, comment,
# declaration or processing instruction.
_TAG_START = re.compile(r"<(?=[A-Za-z!/?])")


def _has_marker(tag: Tag) -> bool:
    if tag.name in _CONTAINER_TAGS:
        return False
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    values = [*classes, tag.get("id") or ""]
    for value in values:
        for word in _WORD_SPLIT.split(str(value).lower()):
            if word in _MARKER_WORDS:
                return True
    return False


def _looks_like_markup(text: str) -> bool:
    """True if parsing *text* as HTML would change it (tags or char refs)."""
    return bool(_TAG_START.search(text)) or unescape(text) != text


def _escape_markup(text: str) -> str:
    return _TAG_START.sub("&lt;", text.replace("&", "&amp;"))


def collapse_whitespace(text: str) -> str:
    """Collapse every whitespace run to one space and trim the ends."""
    return _WS.sub(" ", text).strip()


def sanitize(html: str) -> str:
    """Return the flattened visible text of *html*.

    Pure function of its input.  Empty or unparseable markup yields ``""``
    rather than raising; deciding what to do with empty content is the
    caller's job.  Input with no tags or character references is plain text
    and only has its whitespace collapsed.
    """
    if not html:
        return ""
    if not _looks_like_markup(html):
        return collapse_whitespace(html)

    soup = BeautifulSoup(html, "html.parser")

    doomed = soup.find_all(_DENY_TAGS) + soup.find_all(_has_marker)
    for tag in doomed:
        # Nested matches are already gone with their ancestor.
        if not tag.decomposed:
            tag.decompose()

    container = soup.body or soup
    text = collapse_whitespace(container.get_text(separator=" "))
    if _looks_like_markup(text):
        text = _escape_markup(text)
    return text
