import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..models.article import Article

logger = logging.getLogger(__name__)


@dataclass
class CategoryState:
    articles: List[Article] = field(default_factory=list)
    is_loading: bool = False
    last_error: Optional[str] = None
    last_fetched: Optional[float] = None


@dataclass
class AnalysisCacheEntry:
    timestamp: float = 0.0
    data: Optional[dict] = None
    is_analyzing: bool = False
    started_at: Optional[str] = None


class CategoryCache:
    """Raw articles and analysis results for every category.

    Owned by a single app instance and shared between the polling job and
    request handlers. State is guarded by one lock; each category also has a
    non-blocking analysis lock so at most one analysis runs per category.
    """

    def __init__(self, categories: Iterable[str], ttl_seconds: float = 300,
                 initial_load_timeout: float = 10, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.initial_load_timeout = initial_load_timeout
        self._clock = clock
        self._created_at = clock()
        self._initial_load_done = False
        self._lock = threading.Lock()
        self._states: Dict[str, CategoryState] = {}
        self._analysis: Dict[str, AnalysisCacheEntry] = {}
        self._analysis_locks: Dict[str, threading.Lock] = {}
        for category in categories:
            self._states[category] = CategoryState()
            self._analysis[category] = AnalysisCacheEntry()
            self._analysis_locks[category] = threading.Lock()

    @property
    def categories(self) -> List[str]:
        return list(self._states)

    def __contains__(self, category) -> bool:
        return category in self._states

    # Raw article state

    def get_state(self, category: str) -> CategoryState:
        """Snapshot of a category's raw state."""
        with self._lock:
            state = self._states[category]
            return replace(state, articles=list(state.articles))

    def articles(self, category: str) -> List[Article]:
        with self._lock:
            return list(self._states[category].articles)

    def mark_loading(self, category: str) -> None:
        with self._lock:
            self._states[category].is_loading = True

    def record_fetch_success(self, category: str, articles: List[Article]) -> None:
        with self._lock:
            state = self._states[category]
            state.articles = list(articles)
            state.last_error = None
            state.is_loading = False
            state.last_fetched = self._clock()

    def record_fetch_failure(self, category: str, message: str) -> None:
        """Keep the retained articles, remember why the refresh failed."""
        with self._lock:
            state = self._states[category]
            state.last_error = message
            state.is_loading = False
            state.last_fetched = self._clock()

    def mark_initial_load_complete(self) -> None:
        with self._lock:
            if not self._initial_load_done:
                logger.info("Initial feed load complete")
            self._initial_load_done = True

    @property
    def initial_load_complete(self) -> bool:
        if self._initial_load_done:
            return True
        return self._clock() - self._created_at >= self.initial_load_timeout

    def in_initial_load_window(self, category: str) -> bool:
        with self._lock:
            fetched = self._states[category].last_fetched is not None
        return not fetched and not self.initial_load_complete

    # Analysis cache

    def analysis_entry(self, category: str) -> AnalysisCacheEntry:
        with self._lock:
            return replace(self._analysis[category])

    def _age(self, entry: AnalysisCacheEntry) -> float:
        return self._clock() - entry.timestamp

    def get_fresh_analysis(self, category: str) -> Optional[Tuple[dict, float]]:
        """Cached analysis and its age in seconds, or None if missing or expired."""
        with self._lock:
            entry = self._analysis[category]
            if entry.data is None:
                return None
            age = self._age(entry)
            if age >= self.ttl_seconds:
                return None
            return entry.data, age

    def try_begin_analysis(self, category: str) -> bool:
        """Claim the category's analysis slot without blocking."""
        if not self._analysis_locks[category].acquire(blocking=False):
            return False
        with self._lock:
            entry = self._analysis[category]
            entry.is_analyzing = True
            entry.started_at = datetime.now(timezone.utc).isoformat()
        return True

    def store_analysis(self, category: str, data: dict) -> None:
        with self._lock:
            entry = self._analysis[category]
            entry.data = data
            entry.timestamp = self._clock()

    def end_analysis(self, category: str) -> None:
        with self._lock:
            entry = self._analysis[category]
            entry.is_analyzing = False
            entry.started_at = None
        self._analysis_locks[category].release()

    def overview(self) -> dict:
        """Per-category counts and freshness, without triggering analysis."""
        summary = {}
        with self._lock:
            for category, state in self._states.items():
                entry = self._analysis[category]
                summary[category] = {
                    "article_count": len(state.articles),
                    "is_loading": state.is_loading,
                    "has_analysis": entry.data is not None and self._age(entry) < self.ttl_seconds,
                    "last_updated": state.articles[0].timestamp.isoformat() if state.articles else None,
                }
        return {
            "available_categories": self.categories,
            "articles_per_category": summary,
            "initial_load_complete": self.initial_load_complete,
        }
