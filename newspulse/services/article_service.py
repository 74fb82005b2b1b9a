import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

POSITIVE_THRESHOLD = 0.3
NEGATIVE_THRESHOLD = -0.3
BUCKET_LIMIT = 5
NO_ARTICLES_SUGGESTION = "No articles available for analysis."


def partition_by_sentiment(analyzed, limit=BUCKET_LIMIT):
    """Split analysed articles into positive, negative and neutral buckets.

    Positive articles are ordered by descending score, negative ones by
    ascending score; neutral ones keep their retained order. Each bucket is
    capped at ``limit``.
    """
    positive = sorted(
        (a for a in analyzed if a.sentiment_score > POSITIVE_THRESHOLD),
        key=lambda a: a.sentiment_score, reverse=True,
    )[:limit]
    negative = sorted(
        (a for a in analyzed if a.sentiment_score < NEGATIVE_THRESHOLD),
        key=lambda a: a.sentiment_score,
    )[:limit]
    neutral = [
        a for a in analyzed
        if NEGATIVE_THRESHOLD <= a.sentiment_score <= POSITIVE_THRESHOLD
    ][:limit]
    return positive, negative, neutral


class ArticleService:
    """Serves per-category sentiment analysis backed by the category cache."""

    def __init__(self, cache, analyzer):
        self.cache = cache
        self.analyzer = analyzer

    def get_overview(self):
        return self.cache.overview()

    def get_category_analysis(self, category):
        """
        Returns ``(payload, status)`` for a category, analysing it if the
        cached result is missing or stale.
        """
        category = category.lower()

        if category not in self.cache:
            logger.info(f"Category {category} not found")
            return {
                "error": "Category not found",
                "available_categories": self.cache.categories
            }, 404

        if self.cache.in_initial_load_window(category):
            logger.info(f"Category {category} is still loading articles")
            return {
                "status": "loading",
                "message": "Articles are being fetched",
                "category": category
            }, 202

        state = self.cache.get_state(category)
        if not state.articles:
            if state.last_error:
                logger.warning(f"Error found for category {category}: {state.last_error}")
                return {
                    "error": "Error fetching articles",
                    "message": state.last_error,
                    "category": category
                }, 500
            logger.info(f"No articles found for category {category}")
            return {
                "error": "No articles available",
                "message": "Please try again in a few moments as articles are being fetched",
                "category": category
            }, 404

        cached = self.cache.get_fresh_analysis(category)
        if cached:
            return self._cached_response(category, *cached)

        if not self.cache.try_begin_analysis(category):
            entry = self.cache.analysis_entry(category)
            logger.info(f"Analysis in progress for {category}")
            return {
                "status": "analyzing",
                "message": "Articles are being analyzed",
                "category": category,
                "started_at": entry.started_at
            }, 202

        try:
            # a concurrent analysis may have finished between the check above and claiming the slot
            cached = self.cache.get_fresh_analysis(category)
            if cached:
                return self._cached_response(category, *cached)

            logger.info(f"Starting fresh analysis for {category}")
            data = self.analyze_category(category, state.articles)
            self.cache.store_analysis(category, data)
        except Exception as e:
            logger.error(f"Error processing {category} articles: {e}", exc_info=True)
            return {
                "error": "Internal server error while analyzing articles",
                "message": str(e),
                "category": category
            }, 500
        finally:
            self.cache.end_analysis(category)

        logger.info(f"Analysis complete for {category}, cached results")
        return {
            **data,
            "cache_status": {
                "from_cache": False,
                "just_analyzed": True
            }
        }, 200

    def _cached_response(self, category, data, age):
        logger.info(f"Serving cached analysis for {category} ({int(age)}s old)")
        return {
            **data,
            "cache_status": {
                "from_cache": True,
                "age": int(age),
                "expires_in": int(self.cache.ttl_seconds - age)
            }
        }, 200

    def analyze_category(self, category, articles):
        """Annotate every retained article and build the cached payload."""
        suggestions = [] if articles else [NO_ARTICLES_SUGGESTION]
        results = self.analyzer.analyze_articles(articles)
        analyzed = [r.article for r in results]
        positive, negative, neutral = partition_by_sentiment(analyzed)

        logger.info(
            f"Categorized articles for {category} - Positive: {len(positive)}, "
            f"Negative: {len(negative)}, Neutral: {len(neutral)}"
        )
        return {
            "category": category,
            "summary": {
                "total_articles": len(articles),
                "analyzed_articles": len(positive) + len(negative) + len(neutral),
                "positive_count": len(positive),
                "negative_count": len(negative),
                "neutral_count": len(neutral),
                "degraded_count": sum(1 for r in results if r.degraded)
            },
            "articles": {
                "positive": [a.model_dump(mode="json") for a in positive],
                "negative": [a.model_dump(mode="json") for a in negative],
                "neutral": [a.model_dump(mode="json") for a in neutral]
            },
            "reader_suggestions": suggestions,
            "last_updated": datetime.now(timezone.utc).isoformat()
        }
