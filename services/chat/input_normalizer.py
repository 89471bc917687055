"""Turn typed text or a voice recording into one user message."""

from __future__ import annotations

from typing import Optional

from services.openai.dictation_service import DictationService
from utils.media_validation import to_data_uri


class InputNormalizer:
	"""Normalize chat input before it enters the session."""

	def __init__(self, transcriber: DictationService) -> None:
		self.transcriber = transcriber

	@staticmethod
	def from_text(text: Optional[str]) -> Optional[str]:
		"""Return the trimmed message, or None when nothing is left to send."""
		cleaned = (text or "").strip()
		return cleaned or None

	async def from_audio(self, audio_bytes: bytes, mime_type: str, language: Optional[str]) -> str:
		"""Transcribe a recording; an empty string means it could not be understood."""
		if not audio_bytes:
			raise ValueError("Recorded audio is empty.")
		audio_reference = to_data_uri(audio_bytes, mime_type)
		transcript = await self.transcriber.transcribe(audio_reference, language)
		return (transcript or "").strip()
