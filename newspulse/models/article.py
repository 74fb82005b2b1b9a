from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Article(BaseModel):
    category: str
    title: str
    content: str = ""
    url: str
    source: str
    timestamp: datetime

    model_config = ConfigDict(frozen=True)


class AnalyzedArticle(Article):
    summary: str
    overall_sentiment: Sentiment
    sentiment_score: float = Field(ge=-1.0, le=1.0)
    bias_level: float = Field(ge=0.0, le=10.0)
    manipulative_score: float = Field(ge=0.0, le=10.0)
    mood: str
    bias: str

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "category": "technology",
                "title": "Example News Article",
                "content": "Short plain text snippet...",
                "url": "https://example.com/news/1",
                "source": "Example News",
                "timestamp": "2025-06-11T10:00:00Z",
                "summary": "Brief summary of the article",
                "overall_sentiment": "positive",
                "sentiment_score": 0.6,
                "bias_level": 2.0,
                "manipulative_score": 1.0,
                "mood": "🚀📈",
                "bias": "Slightly promotional tone",
            }
        },
    )


class SentimentResponse(BaseModel):
    """JSON object the LLM must return for a single article."""
    title: Optional[str] = None
    summary: str
    sentiment: Sentiment
    bias: str
    mood: str
    sentiment_score: float = Field(ge=-1.0, le=1.0)
    bias_level: float = Field(ge=0.0, le=10.0)
    manipulative_score: float = Field(ge=0.0, le=10.0)

    @field_validator("sentiment", mode="before")
    @classmethod
    def normalize_sentiment(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class AnnotationStatus(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"


@dataclass(frozen=True)
class AnnotationResult:
    status: AnnotationStatus
    article: AnalyzedArticle
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status is AnnotationStatus.DEGRADED
