import logging

from ..utils.chat_responses import format_mock_response, format_search_context

logger = logging.getLogger(__name__)


class ChatService:
    """Chat, category summary and voice transcription on top of Gemini and web search."""

    def __init__(self, analyzer, llm_client, search_client, cache, transcription_language='en'):
        self.analyzer = analyzer
        self.llm = llm_client
        self.search = search_client
        self.cache = cache
        self.transcription_language = transcription_language

    def answer(self, message):
        """Answer a user question using web search snippets as context."""
        if not message:
            return {"error": "No message provided"}, 400
        try:
            logger.info(f"[CHAT] User message: {message}")
            context = format_search_context(self.search.search(message))
            logger.info(f"[CHAT] News context: {context}")
            answer = self.analyzer.answer_question(context, message)
            logger.info(f"[CHAT] LLM answer: {answer}")
            return {"answer": answer}, 200
        except Exception as e:
            logger.error(f"[CHAT] Error: {e}", exc_info=True)
            return {"error": "Failed to get answer", "detail": str(e)}, 500

    def mock_answer(self, message):
        """Echo a canned answer without calling any collaborator."""
        if not message:
            return {"error": "No message provided"}, 400
        return format_mock_response(message), 200

    def news_summary(self, category):
        """LLM summary of the most recent raw articles of a category."""
        category = category.lower()
        articles = self.cache.articles(category) if category in self.cache else []
        if not articles:
            return {"error": "No articles found for this category."}, 404
        try:
            summary = self.analyzer.summarize_category(category, articles)
            return {"summary": summary}, 200
        except Exception as e:
            logger.error(f"Failed to summarise {category}: {e}", exc_info=True)
            return {"error": "Failed to get LLM news summary", "detail": str(e)}, 500

    def transcribe(self, audio, mime_type, filename=None):
        """Transcribe uploaded audio bytes."""
        logger.info(f"[VOICE-TO-TEXT] Received file: {filename} size: {len(audio)} bytes")
        try:
            text, raw = self.llm.transcribe(audio, mime_type, self.transcription_language)
        except Exception as e:
            logger.error(f"[VOICE-TO-TEXT] Error: {e}", exc_info=True)
            return {"error": "Failed to transcribe audio", "detail": str(e)}, 500

        if text:
            return {"text": text}, 200
        logger.warning(f"[VOICE-TO-TEXT] No transcription text returned: {raw}")
        return {"error": "No transcription text returned", "whisperResp": raw}, 200
