import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from config import TestingConfig
from newspulse import create_app
from newspulse.models.article import Article


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def rss_xml(title, items):
    """Build an RSS 2.0 document from (title, link, description, pub_date) tuples."""
    entries = "".join(
        f"<item><title>{t}</title><link>{link}</link>"
        f"<description><![CDATA[{d}]]></description><pubDate>{p}</pubDate></item>"
        for t, link, d, p in items
    )
    return (
        f'<?xml version="1.0" encoding="UTF-8"?><rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://example.com</link>{entries}</channel></rss>"
    ).encode("utf-8")


def feed_response(content, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    return response


def sentiment_json(score, title="Title", sentiment=None):
    if sentiment is None:
        sentiment = "positive" if score > 0.3 else "negative" if score < -0.3 else "neutral"
    return json.dumps({
        "title": title,
        "summary": f"Summary of {title}",
        "sentiment": sentiment,
        "bias": "No notable bias",
        "mood": "📰",
        "sentiment_score": score,
        "bias_level": 2,
        "manipulative_score": 1,
    })


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_article():
    base = datetime(2025, 6, 11, 10, 0, tzinfo=timezone.utc)

    def _make(n, category="technology", minutes=None, title=None, content="Some content"):
        return Article(
            category=category,
            title=title or f"Article {n}",
            content=content,
            url=f"https://example.com/{category}/{n}",
            source="Example News",
            timestamp=base + timedelta(minutes=n if minutes is None else minutes),
        )
    return _make


@pytest.fixture
def scores_by_title():
    """Sentiment score the fake LLM assigns to each article title."""
    return {}


@pytest.fixture
def mock_llm(scores_by_title):
    llm = MagicMock()

    def generate_text(prompt, **kwargs):
        if kwargs.get("json_mode"):
            title = prompt.split("\n", 1)[0].replace("Title: ", "")
            return sentiment_json(scores_by_title.get(title, 0.0), title=title)
        return "Here is a short answer."

    llm.generate_text.side_effect = generate_text
    llm.transcribe.return_value = ("hello world", {"candidates": []})
    return llm


@pytest.fixture
def mock_search():
    search = MagicMock()
    search.search.return_value = [
        {"title": "Result one", "description": "First snippet"},
        {"title": "Result two", "description": None},
    ]
    return search


@pytest.fixture
def feed_session():
    return MagicMock()


@pytest.fixture
def app(mock_llm, mock_search, feed_session):
    return create_app(
        TestingConfig,
        llm_client=mock_llm,
        search_client=mock_search,
        fetcher_kwargs={"sleep": lambda seconds: None, "session": feed_session},
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["newspulse"]
