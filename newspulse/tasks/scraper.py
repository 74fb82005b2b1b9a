import logging
import time
from collections import OrderedDict
from datetime import datetime, timezone

import feedparser
import requests

from ..models.article import Article
from ..utils.retry import with_retries
from ..utils.text import html_to_text, url_host

logger = logging.getLogger(__name__)

CATEGORIES = ["breaking", "technology", "business", "science", "health"]

RSS_FEEDS = [
    {"category": "breaking", "url": "https://timesofindia.indiatimes.com/rssfeedstopstories.cms"},
    {"category": "technology", "url": "https://timesofindia.indiatimes.com/rssfeeds/66949542.cms"},
    {"category": "business", "url": "https://economictimes.indiatimes.com/prime/technology-and-startups/rssfeeds/63319172.cms"},
    {"category": "science", "url": "https://timesofindia.indiatimes.com/rssfeeds/-2128672765.cms"},
    {"category": "health", "url": "https://www.thehindu.com/sci-tech/health/feeder/default.rss"},
    {"category": "breaking", "url": "https://www.hindustantimes.com/feeds/rss/india/rssfeed.xml"},
]

_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "application/rss+xml, application/xml, application/atom+xml, text/xml;q=0.9, */*;q=0.8",
}

ALL_SOURCES_FAILED = "Failed to fetch articles from any source for this category"


def group_feeds_by_category(feeds):
    grouped = OrderedDict()
    for feed in feeds:
        grouped.setdefault(feed["category"], []).append(feed)
    return grouped


def merge_articles(existing, new, limit):
    """Combine retained and newly fetched articles.

    Articles are keyed by url; a later occurrence replaces an earlier one, so
    freshly fetched items win over retained ones. The result is sorted newest
    first and truncated to ``limit``.
    """
    unique = {}
    for article in list(existing) + list(new):
        unique[article.url] = article
    ordered = sorted(unique.values(), key=lambda a: a.timestamp, reverse=True)
    return ordered[:limit]


def _entry_timestamp(entry):
    for key in ("published_parsed", "updated_parsed"):
        tm = entry.get(key)
        if tm:
            try:
                return datetime(*tm[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                continue
    return datetime.now(timezone.utc)


def _entry_content(entry):
    for key in ("summary", "description"):
        value = entry.get(key)
        if value:
            return html_to_text(value)
    contents = entry.get("content")
    if contents:
        return html_to_text(contents[0].get("value", ""))
    return ""


class RSSFeedFetcherTask:
    def __init__(self, cache, feeds=None, max_articles=10, max_attempts=3, timeout=5,
                 feed_delay=2, sleep=time.sleep, session=None):
        self.cache = cache
        self.feeds = feeds if feeds is not None else RSS_FEEDS
        self.max_articles = max_articles
        self.max_attempts = max_attempts
        self.timeout = timeout
        self.feed_delay = feed_delay
        self.sleep = sleep
        self.session = session or requests.Session()
        self.stats = {
            'runs': 0,
            'categories_processed': 0,
            'articles_retained': 0,
            'failed_sources': 0,
            'errors': 0
        }

    def fetch_feed(self, feed):
        """Fetch one RSS source and map its items to articles."""
        url = feed["url"]
        logger.info(f"Fetching feed: {url}")
        resp = self.session.get(url, headers=_DEFAULT_HEADERS, timeout=self.timeout)
        if resp.status_code >= 400:
            logger.warning(f"RSS fetch failed ({resp.status_code}): {url}")
            resp.raise_for_status()

        parsed = feedparser.parse(resp.content)
        entries = parsed.get("entries") or []
        if parsed.get("bozo") and not entries:
            raise ValueError(f"Could not parse feed {url}: {parsed.get('bozo_exception')}")

        source = parsed.get("feed", {}).get("title") or url_host(url)
        articles = []
        for entry in entries:
            link = entry.get("link")
            if not link:
                logger.warning(f"Skipping item without link in {url}")
                continue
            articles.append(Article(
                category=feed["category"],
                title=entry.get("title", ""),
                content=_entry_content(entry),
                url=link,
                source=source,
                timestamp=_entry_timestamp(entry),
            ))

        logger.info(f"Successfully fetched {len(articles)} items from {url}")
        return articles

    def fetch_with_retry(self, feed):
        return with_retries(
            lambda: self.fetch_feed(feed),
            max_attempts=self.max_attempts,
            description=feed["url"],
            sleep=self.sleep,
        )

    def fetch_category(self, category, feeds):
        """Refresh one category from all of its sources."""
        self.cache.mark_loading(category)
        fetched = []
        success = False

        for feed in feeds:
            try:
                fetched.extend(self.fetch_with_retry(feed))
                success = True
                logger.info(f"Processed feed {feed['url']} for category: {category}")
            except Exception as e:
                logger.error(f"Failed to process feed {feed['url']} for category {category} after all retries: {e}")
                self.stats['failed_sources'] += 1
            if self.feed_delay:
                self.sleep(self.feed_delay)

        if success:
            merged = merge_articles(self.cache.articles(category), fetched, self.max_articles)
            self.cache.record_fetch_success(category, merged)
            self.stats['articles_retained'] += len(merged)
            logger.info(f"Retained {len(merged)} articles for category: {category}")
        else:
            self.cache.record_fetch_failure(category, ALL_SOURCES_FAILED)
            logger.error(f"All sources failed for category: {category}")
        return success

    def run_fetcher(self):
        """Run one polling cycle over every configured category."""
        logger.info("Starting RSS feed polling cycle...")
        self.stats['runs'] += 1

        for category, feeds in group_feeds_by_category(self.feeds).items():
            if category not in self.cache:
                logger.warning(f"Skipping feeds for unknown category: {category}")
                continue
            try:
                self.fetch_category(category, feeds)
            except Exception as e:
                logger.error(f"Error refreshing category {category}: {e}", exc_info=True)
                self.cache.record_fetch_failure(category, str(e))
                self.stats['errors'] += 1
            self.stats['categories_processed'] += 1

        self.cache.mark_initial_load_complete()
        logger.info(f"Polling cycle complete. Stats: {self.stats}")
        return self.stats
