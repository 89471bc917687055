"""Plant care recommendations from a spoken description."""

import logging
import os
from typing import Dict, Optional

from openai import AsyncOpenAI

from models.analysis_record import VoiceRecommendation
from services.openai.analysis_prompts import build_voice_advice_prompt
from services.openai.dictation_service import DictationService
from services.openai.media_inputs import text_message
from services.openai.response_parser import extract_text

LOGGER = logging.getLogger(__name__)

DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-5")


class VoiceAdvisor:
    """Transcribe a recording, then answer it with recommendations in the same language."""

    def __init__(
        self,
        client: AsyncOpenAI,
        dictation: Optional[DictationService] = None,
        model: str = DEFAULT_MODEL,
    ) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.dictation = dictation or DictationService(client)
        self.model = model

    async def advise(self, audio_reference: str, language: Optional[str] = None) -> Dict[str, object]:
        """Return `transcript` and `recommendation` (VoiceRecommendation).

        Raises:
            ValueError: If nothing intelligible was said.
            RuntimeError: If the model returned no recommendation.
        """
        transcript = await self.dictation.transcribe(audio_reference, language)
        if not transcript:
            raise ValueError("I'm sorry, I couldn't understand that. Could you please repeat?")

        try:
            response = await self.client.responses.create(
                model=self.model,
                input=[
                    text_message("system", build_voice_advice_prompt(language)),
                    text_message("user", transcript),
                ],
            )
        except Exception as exc:
            LOGGER.error("OpenAI Responses API error: %s", exc)
            raise

        text = extract_text(response).strip()
        if not text:
            raise RuntimeError("Voice advice response was empty.")
        return {"transcript": transcript, "recommendation": VoiceRecommendation(text=text)}
