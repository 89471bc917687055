"""Run one conversational turn: normalize input, ask the responder, update the session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.conversation_models import ChatMessage, ChatSession
from services.chat.conversation import FALLBACK_REPLY, ConversationReply, ConversationResponder
from services.chat.input_normalizer import InputNormalizer
from services.chat.session_store import SessionStore

LOGGER = logging.getLogger(__name__)

UNINTELLIGIBLE_REPLY = "I'm sorry, I couldn't understand that. Could you please repeat?"
TRANSCRIPTION_FAILED_NOTICE = "Could not process your recording. Please try again."
PROCESSING_PLACEHOLDER = "Processing voice message..."
SESSION_CLOSED_NOTICE = "This conversation was closed before the reply arrived."


class SessionBusyError(RuntimeError):
	"""A turn or recording is already in progress for the session."""


class EmptyMessageError(ValueError):
	"""The message had no content after trimming."""


@dataclass
class TurnResult:
	"""Outcome of one send; `terminal` replies are not part of the conversation."""

	session_id: str
	response: str
	user_message: Optional[ChatMessage] = None
	model_message: Optional[ChatMessage] = None
	transcribed_message: Optional[str] = None
	terminal: bool = False
	fallback: bool = False
	notice: Optional[str] = None
	tool_calls: List[Dict[str, Any]] = field(default_factory=list)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"session_id": self.session_id,
			"response": self.response,
			"transcribed_message": self.transcribed_message,
			"user_message": self.user_message.to_dict() if self.user_message else None,
			"model_message": self.model_message.to_dict() if self.model_message else None,
			"terminal": self.terminal,
			"fallback": self.fallback,
			"notice": self.notice,
			"tool_calls": self.tool_calls,
		}


class ChatService:
	"""Coordinate the session store, input normalizer and conversation responder."""

	def __init__(self, store: SessionStore, normalizer: InputNormalizer, responder: ConversationResponder) -> None:
		self.store = store
		self.normalizer = normalizer
		self.responder = responder

	def start_recording(self, session_id: str) -> ChatSession:
		state = self.store.get(session_id)
		if state.is_pending:
			raise SessionBusyError("Wait for the previous message to finish processing.")
		if state.is_recording:
			raise SessionBusyError("A recording is already in progress.")
		state.is_recording = True
		return state

	def stop_recording(self, session_id: str) -> ChatSession:
		state = self.store.get(session_id)
		state.is_recording = False
		return state

	async def send_text(self, session_id: str, text: Optional[str]) -> TurnResult:
		"""Append the user's typed message and the model's reply."""
		state = self.store.get(session_id)
		message_text = self.normalizer.from_text(text)
		if message_text is None:
			raise EmptyMessageError("Message must not be empty.")
		self._begin_turn(state)
		try:
			history = self.store.history(session_id)
			user_message = self.store.append_user_message(session_id, message_text)
			state.input_text = ""
			return await self._reply(state, history, user_message)
		finally:
			state.is_pending = False

	async def send_audio(self, session_id: str, audio_bytes: bytes, mime_type: str) -> TurnResult:
		"""Transcribe a recording, then continue the conversation with the transcript.

		The user message is a pending placeholder until transcription resolves;
		it is removed again when nothing usable was transcribed.
		"""
		state = self.store.get(session_id)
		self._begin_turn(state)
		state.is_recording = False
		placeholder = self.store.append_user_message(session_id, PROCESSING_PLACEHOLDER, pending=True)
		try:
			try:
				transcript = await self.normalizer.from_audio(audio_bytes, mime_type, state.language)
			except Exception as exc:
				LOGGER.error("Transcription failed for session %s: %s", session_id, exc)
				transcript = None

			if state.session_id not in self.store:
				return self._closed(session_id)

			if transcript is None:
				self.store.remove_message(session_id, placeholder.id)
				return TurnResult(session_id=session_id, response="", terminal=True, notice=TRANSCRIPTION_FAILED_NOTICE)

			if not transcript:
				self.store.remove_message(session_id, placeholder.id)
				return TurnResult(session_id=session_id, response=UNINTELLIGIBLE_REPLY, terminal=True)

			history = self.store.history(session_id)
			user_message = self.store.finalize_message(session_id, placeholder.id, transcript)
			result = await self._reply(state, history, user_message)
			result.transcribed_message = transcript
			return result
		finally:
			state.is_pending = False

	def _closed(self, session_id: str, user_message: Optional[ChatMessage] = None) -> TurnResult:
		# The session was deleted while the provider was still working.
		LOGGER.info("Session %s closed during a turn; dropping the reply", session_id)
		return TurnResult(
			session_id=session_id,
			response="",
			user_message=user_message,
			terminal=True,
			notice=SESSION_CLOSED_NOTICE,
		)

	def _begin_turn(self, state: ChatSession) -> None:
		if state.is_pending:
			raise SessionBusyError("Wait for the previous message to finish processing.")
		state.is_pending = True

	async def _reply(self, state: ChatSession, history, user_message: ChatMessage) -> TurnResult:
		try:
			reply = await self.responder.respond(history, user_message.content, state.language)
		except Exception as exc:
			LOGGER.error("Responder failed for session %s: %s", state.session_id, exc)
			reply = ConversationReply(reply=FALLBACK_REPLY, fallback=True)

		if state.session_id not in self.store:
			return self._closed(state.session_id, user_message)
		model_message = self.store.append_model_message(state.session_id, reply.reply)
		return TurnResult(
			session_id=state.session_id,
			response=reply.reply,
			user_message=user_message,
			model_message=model_message,
			fallback=reply.fallback,
			tool_calls=reply.tool_calls,
		)
