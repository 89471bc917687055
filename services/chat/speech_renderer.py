"""Attach synthesized speech to chatbot replies."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from services.chat.session_store import SessionStore
from services.openai.speech_service import SpeechSynthesizer

LOGGER = logging.getLogger(__name__)

SPEECH_FAILED_NOTICE = "Could not generate audio. You may have exceeded the API quota."


@dataclass
class SpeechResult:
	message_id: str
	audio_reference: Optional[str] = None
	notice: Optional[str] = None


class SpeechRenderer:
	"""Render a reply's text as audio after the text itself was delivered."""

	def __init__(self, store: SessionStore, synthesizer: SpeechSynthesizer) -> None:
		self.store = store
		self.synthesizer = synthesizer

	async def render(self, session_id: str, message_id: str) -> SpeechResult:
		"""Synthesize and attach audio; failures leave the message without audio."""
		try:
			state = self.store.get(session_id)
		except KeyError:
			return SpeechResult(message_id=message_id, notice="Session no longer exists.")
		message = state.find(message_id)
		if message is None:
			return SpeechResult(message_id=message_id, notice="Message no longer exists.")
		if message.audio_reference:
			return SpeechResult(message_id=message_id, audio_reference=message.audio_reference)

		try:
			audio_reference = await self.synthesizer.synthesize(message.content, state.language)
		except Exception as exc:
			LOGGER.warning("Text-to-speech failed for message %s: %s", message_id, exc)
			return SpeechResult(message_id=message_id, notice=SPEECH_FAILED_NOTICE)

		self.store.attach_audio(session_id, message_id, audio_reference)
		return SpeechResult(message_id=message_id, audio_reference=audio_reference)
