"""Audio transcription helper built on OpenAI's transcription models."""

import io
import logging
import os

from openai import AsyncOpenAI

from utils.languages import language_code
from utils.media_validation import parse_data_uri

LOGGER = logging.getLogger(__name__)

TRANSCRIBE_MODEL = os.getenv("OPENAI_TRANSCRIBE_MODEL", "gpt-4o-transcribe")

_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "mp4",
    "audio/aac": "m4a",
    "audio/ogg": "ogg",
    "audio/opus": "ogg",
    "audio/flac": "flac",
}


def filename_for_mime(mime_type: str) -> str:
    """Return an upload filename whose extension the transcription API accepts.

    Raises:
        ValueError: If the MIME type has no supported extension.
    """
    suffix = _EXTENSIONS.get(mime_type)
    if suffix is None:
        raise ValueError(f"Unsupported or unknown audio MIME type: '{mime_type}'")
    return f"recording.{suffix}"


class DictationService:
    """Create text transcriptions from recorded audio references."""

    def __init__(self, client: AsyncOpenAI, model: str = TRANSCRIBE_MODEL) -> None:
        if client is None:
            raise ValueError("OpenAI client is required for dictation.")
        self.client = client
        self.model = model

    async def transcribe(self, audio_reference: str, language: str | None = None) -> str:
        """Transcribe a base64 audio data URI and return the stripped text.

        An empty string means nothing intelligible was heard.
        """
        mime_type, audio_bytes = parse_data_uri(audio_reference)
        if not audio_bytes:
            raise ValueError("Audio reference must contain data for transcription.")

        audio_file = io.BytesIO(audio_bytes)
        audio_file.name = filename_for_mime(mime_type)

        try:
            response = await self.client.audio.transcriptions.create(
                model=self.model,
                file=audio_file,
                language=language_code(language),
            )
        except Exception as exc:
            LOGGER.error("OpenAI transcription request failed: %s", exc)
            raise

        return (getattr(response, "text", None) or "").strip()
