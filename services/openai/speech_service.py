"""Text-to-speech helper returning embeddable audio data URIs."""

import logging
import os

from openai import AsyncOpenAI

from utils.languages import language_name
from utils.media_validation import to_data_uri

LOGGER = logging.getLogger(__name__)

TTS_MODEL = os.getenv("OPENAI_TTS_MODEL", "gpt-4o-mini-tts")
TTS_VOICE = os.getenv("OPENAI_TTS_VOICE", "alloy")


class SpeechSynthesizer:
    """Convert reply text into a playable WAV data URI."""

    def __init__(self, client: AsyncOpenAI, model: str = TTS_MODEL, voice: str = TTS_VOICE) -> None:
        if client is None:
            raise ValueError("OpenAI client is required for speech synthesis.")
        self.client = client
        self.model = model
        self.voice = voice

    async def synthesize(self, text: str, language: str | None = None) -> str:
        """Return the spoken rendition of `text` as a `data:audio/wav;base64,` URI."""
        if not text or not text.strip():
            raise ValueError("Text is required for speech synthesis.")

        response = await self.client.audio.speech.create(
            model=self.model,
            voice=self.voice,
            input=text,
            instructions=f"Speak naturally in {language_name(language)}.",
            response_format="wav",
        )
        audio_bytes = getattr(response, "content", None)
        if not audio_bytes:
            raise RuntimeError("Speech response did not include audio.")
        LOGGER.info("Synthesized %d bytes of speech", len(audio_bytes))
        return to_data_uri(audio_bytes, "audio/wav")
