import logging
from typing import Optional

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)


class GeminiClient:
    """Thin wrapper around the google-genai client used by every LLM feature.

    The underlying client is created on first use so the app can start
    without a key; calls then fail with ``ValueError`` and the endpoints
    report it as a collaborator failure.
    """

    def __init__(self, api_key: Optional[str], model: str = 'gemini-2.0-flash-001',
                 transcription_model: str = 'gemini-2.0-flash-001', client=None):
        self.api_key = api_key
        self.model = model
        self.transcription_model = transcription_model
        self._client = client

    @property
    def client(self):
        if self._client is None:
            if not self.api_key:
                raise ValueError("GOOGLE_API_KEY not set in environment")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate_text(self, prompt: str, *, system_instruction: Optional[str] = None,
                      temperature: float = 0.5, max_output_tokens: int = 1000,
                      top_p: Optional[float] = None, json_mode: bool = False) -> str:
        config = types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            top_p=top_p,
            response_mime_type='application/json' if json_mode else None,
        )
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=config,
        )
        if not response.text:
            raise ValueError("Empty response from Gemini")
        return response.text.strip()

    def transcribe(self, audio: bytes, mime_type: str, language: str = 'en'):
        """Transcribe audio bytes. Returns ``(text, raw_response)``; text may be empty."""
        prompt = (
            f"Transcribe this audio recording verbatim. The spoken language is '{language}'. "
            "Return only the transcribed text with no commentary."
        )
        response = self.client.models.generate_content(
            model=self.transcription_model,
            contents=[prompt, types.Part.from_bytes(data=audio, mime_type=mime_type)],
            config=types.GenerateContentConfig(temperature=0.0),
        )
        raw = response.model_dump(mode='json', exclude_none=True)
        text = (response.text or '').strip()
        logger.info(f"Transcription returned {len(text)} characters")
        return text, raw
