from datetime import datetime, timezone
from flask import Blueprint, jsonify, current_app

from ..services.article_service import ArticleService
from ..services.category_cache import CategoryCache
from ..services.chat_service import ChatService
from ..services.llm_client import GeminiClient
from ..services.search_client import WebSearchClient
from ..tasks.analyzer import GeminiAnalyzerTask
from ..tasks.scheduler import POLL_JOB_ID
from ..tasks.scraper import CATEGORIES, RSSFeedFetcherTask

# Initialize the blueprint
main_bp = Blueprint('main', __name__)

def init_route_dependencies(app, llm_client=None, search_client=None, fetcher_kwargs=None):
    """Build the shared cache and services and attach them to the app."""
    config = app.config
    cache = CategoryCache(
        CATEGORIES,
        ttl_seconds=config['CACHE_TTL_SECONDS'],
        initial_load_timeout=config['INITIAL_LOAD_TIMEOUT_SECONDS']
    )
    llm_client = llm_client or GeminiClient(
        config.get('GOOGLE_API_KEY'),
        model=config['GEMINI_MODEL'],
        transcription_model=config['TRANSCRIPTION_MODEL']
    )
    search_client = search_client or WebSearchClient(config.get('SEARCH_API_KEY'))
    analyzer = GeminiAnalyzerTask(llm_client, delay_seconds=config['ANALYSIS_DELAY_SECONDS'])

    fetcher_kwargs = fetcher_kwargs or {}
    app.extensions['newspulse'] = {
        'cache': cache,
        'feed_fetcher': RSSFeedFetcherTask(
            cache,
            max_articles=config['MAX_ARTICLES_PER_CATEGORY'],
            max_attempts=config['FEED_MAX_ATTEMPTS'],
            timeout=config['FEED_TIMEOUT_SECONDS'],
            feed_delay=config['FEED_DELAY_SECONDS'],
            **fetcher_kwargs
        ),
        'article_service': ArticleService(cache, analyzer),
        'chat_service': ChatService(
            analyzer, llm_client, search_client, cache,
            transcription_language=config['TRANSCRIPTION_LANGUAGE']
        ),
        'scheduler': None
    }

def get_service(name):
    return current_app.extensions['newspulse'][name]

@main_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    scheduler = get_service('scheduler')
    if scheduler is None:
        scheduler_status = "not started"
    elif scheduler.get_job(POLL_JOB_ID) is not None:
        scheduler_status = "running"
    else:
        scheduler_status = "missing poll job"

    return jsonify({
        "status": "ok",
        "message": "newspulse backend is healthy!",
        "dependencies": {
            "google_ai_key": "present" if current_app.config.get('GOOGLE_API_KEY') else "missing",
            "search_api_key": "present" if current_app.config.get('SEARCH_API_KEY') else "missing",
            "scheduler": scheduler_status
        },
        "limits": {
            "max_audio_bytes": current_app.config['MAX_AUDIO_BYTES']
        },
        "timestamp": datetime.now(timezone.utc).isoformat()
    }), 200

@main_bp.route('/api/articles', methods=['GET'])
def list_categories():
    """
    Per-category article counts and freshness flags. Never triggers analysis.
    """
    return jsonify(get_service('article_service').get_overview()), 200

@main_bp.route('/api/articles/<category>', methods=['GET'])
def get_category_articles(category):
    """
    Sentiment analysis for a category, served from cache while fresh.
    Responds 202 while the category is loading or being analysed.
    """
    payload, status = get_service('article_service').get_category_analysis(category)
    return jsonify(payload), status

@main_bp.route('/api/llm-news-summary/<category>', methods=['GET'])
def llm_news_summary(category):
    """
    LLM summary of the latest raw articles for a category, bypassing the analysis cache.
    """
    payload, status = get_service('chat_service').news_summary(category)
    return jsonify(payload), status
