"""
Text Extractor Tool — sanitizes untrusted HTML, extracts plain text and normalizes titles.
Uses BeautifulSoup to strip irrelevant elements.
"""

import html
import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Comment

# Elements removed together with their content
DROP_TAGS = ["script", "style", "noscript", "svg", "iframe", "object", "embed", "form", "input", "button", "head", "title", "meta", "link"]

# Elements kept (without attributes, except href on links); everything else is unwrapped
SAFE_TAGS = {
    "a", "b", "strong", "i", "em", "u", "p", "br", "ul", "ol", "li",
    "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "code", "pre", "hr",
}

ACRONYM_LEN = 3


def sanitize_html(raw: str) -> str:
    """
    Reduce untrusted provider HTML to a safe formatting subset.

    Args:
        raw: HTML string from a provider (already unescaped).

    Returns:
        Sanitized HTML string.
    """
    if not raw:
        return ""

    soup = BeautifulSoup(raw, "html.parser")

    for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
        comment.extract()

    _drop(soup)

    for element in soup.find_all(True):
        if element.name not in SAFE_TAGS:
            element.unwrap()
            continue

        href = element.get("href") if element.name == "a" else None
        element.attrs = {}

        if element.name != "a":
            continue

        if href and urlparse(href).scheme in ("http", "https", "mailto"):
            element["href"] = href
            if urlparse(href).scheme in ("http", "https"):
                element["target"] = "_blank"
                element["rel"] = "noopener noreferrer"
        else:
            element.unwrap()

    text = str(soup)

    # Collapse whitespace-only runs between tags
    text = re.sub(r"\n\s*\n+", "\n", text)
    return text.strip()


def unescape_and_sanitize(escaped: str) -> str:
    """Greenhouse returns HTML-escaped content; unescape before sanitizing."""
    return sanitize_html(html.unescape(escaped or ""))


def html_to_text(raw: str, max_length: int = 4000) -> str:
    """
    Extract readable text from HTML.
    Truncates to max_length to stay within LLM context limits.
    """
    if not raw:
        return ""

    soup = BeautifulSoup(raw, "html.parser")

    _drop(soup)

    text = soup.get_text(separator="\n", strip=True)

    # Collapse multiple blank lines into single ones
    text = re.sub(r"\n{3,}", "\n\n", text)

    # Collapse multiple spaces
    text = re.sub(r" {2,}", " ", text)

    if len(text) > max_length:
        text = text[:max_length] + "\n\n[... content truncated ...]"

    return text


def norm_title(title: str) -> str:
    """
    Normalize an ATS job title.

    All-caps titles become title case, keeping short capital runs as acronyms:
    "SENIOR QA/DEVOPS ENGINEER" -> "Senior QA/Devops Engineer".
    Titles with lowercase letters, or of 3 characters or fewer, are only trimmed.
    """
    title = (title or "").strip()

    if len(title) <= ACRONYM_LEN or re.search(r"[a-z]", title):
        return title

    parts = re.findall(r"[A-Z]+|[^A-Z]+", title)

    return "".join(
        part[0] + part[1:].lower() if len(part) > ACRONYM_LEN and re.fullmatch(r"[A-Z]+", part) else part
        for part in parts
    )


def _drop(soup: BeautifulSoup) -> None:
    # One at a time: decomposing a parent invalidates nested matches
    element = soup.find(DROP_TAGS)
    while element is not None:
        element.decompose()
        element = soup.find(DROP_TAGS)
