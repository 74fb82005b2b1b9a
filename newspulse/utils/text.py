import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup

_WHITESPACE = re.compile(r'\s+')


def html_to_text(markup: str) -> str:
    """Reduce an HTML fragment from a feed item to a single line of plain text."""
    if not markup:
        return ""
    if '<' not in markup:
        return _WHITESPACE.sub(' ', markup).strip()
    text = BeautifulSoup(markup, "html.parser").get_text(" ", strip=True)
    return _WHITESPACE.sub(' ', text).strip()


def url_host(url: str) -> str:
    """Host part of a URL, used as a source name when the feed has no title."""
    try:
        return urlparse(url).netloc or url
    except ValueError:
        return url


def extract_json_object(raw: str) -> str:
    """Return the outermost {...} block of an LLM reply, tolerating fences and prose."""
    if not raw or not raw.strip():
        raise ValueError("Empty LLM response")
    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise ValueError("No JSON object found in LLM response")
    return match.group(0)
