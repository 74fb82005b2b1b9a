import json
import logging
import time

from ..models.article import (
    AnalyzedArticle,
    AnnotationResult,
    AnnotationStatus,
    Sentiment,
    SentimentResponse,
)
from ..utils.chat_responses import (
    CHAT_SYSTEM_PROMPT,
    format_chat_prompt,
    format_summary_context,
    format_summary_request,
)
from ..utils.text import extract_json_object

logger = logging.getLogger(__name__)

SENTIMENT_SYSTEM_PROMPT = """You are a news sentiment analyzer. Analyze the news article and provide a response in this exact JSON format:
{
  "title": "Original article title",
  "summary": "2-5 sentence summary of the article",
  "sentiment": "positive/negative/neutral",
  "bias": "One line describing any bias detected",
  "mood": "3-5 relevant emojis that capture the article's mood",
  "sentiment_score": <number between -1 and 1>,
  "bias_level": <number between 0 and 10>,
  "manipulative_score": <number between 0 and 10>
}"""

UNAVAILABLE = "Analysis temporarily unavailable"


def fallback_analysis(article) -> AnalyzedArticle:
    """Neutral placeholder used whenever the LLM result cannot be used."""
    return AnalyzedArticle(
        **article.model_dump(),
        summary=UNAVAILABLE,
        overall_sentiment=Sentiment.NEUTRAL,
        sentiment_score=0.0,
        bias_level=0.0,
        manipulative_score=0.0,
        mood="❓",
        bias=UNAVAILABLE,
    )


def parse_sentiment_response(raw: str) -> SentimentResponse:
    """Parse and validate the LLM reply for one article."""
    return SentimentResponse(**json.loads(extract_json_object(raw)))


class GeminiAnalyzerTask:
    def __init__(self, llm_client, delay_seconds=1, sleep=time.sleep):
        self.llm = llm_client
        self.delay_seconds = delay_seconds
        self.sleep = sleep

    def analyze_article(self, article) -> AnnotationResult:
        """Annotate one article; failures degrade to a neutral placeholder."""
        logger.info(f"Analyzing article: {article.title}")
        try:
            raw = self.llm.generate_text(
                f"Title: {article.title}\n\nContent: {article.content}",
                system_instruction=SENTIMENT_SYSTEM_PROMPT,
                temperature=0.5,
                max_output_tokens=1000,
                top_p=0.9,
                json_mode=True,
            )
            analysis = parse_sentiment_response(raw)
        except Exception as e:
            logger.error(f"Error in sentiment analysis for '{article.title}' ({article.url}): {e}")
            return AnnotationResult(AnnotationStatus.DEGRADED, fallback_analysis(article), str(e))

        analyzed = AnalyzedArticle(
            **article.model_dump(),
            summary=analysis.summary,
            overall_sentiment=analysis.sentiment,
            sentiment_score=analysis.sentiment_score,
            bias_level=analysis.bias_level,
            manipulative_score=analysis.manipulative_score,
            mood=analysis.mood,
            bias=analysis.bias,
        )
        return AnnotationResult(AnnotationStatus.SUCCESS, analyzed)

    def analyze_articles(self, articles):
        """Annotate articles one at a time, pausing between LLM calls."""
        results = []
        for i, article in enumerate(articles):
            if i and self.delay_seconds:
                self.sleep(self.delay_seconds)
            results.append(self.analyze_article(article))
        degraded = sum(1 for r in results if r.degraded)
        logger.info(f"Analyzed {len(results)} articles ({degraded} degraded)")
        return results

    def answer_question(self, context, question):
        """Short conversational answer grounded in ``context``."""
        return self.llm.generate_text(
            format_chat_prompt(context, question),
            system_instruction=CHAT_SYSTEM_PROMPT,
            temperature=0.6,
            max_output_tokens=120,
        )

    def summarize_category(self, category, articles):
        """Trend summary of the five most recent retained articles."""
        context = format_summary_context(articles)
        return self.answer_question(context, format_summary_request(category, context))
