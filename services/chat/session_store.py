"""In-memory store for chatbot sessions and their messages."""

from __future__ import annotations

from typing import Dict, List, Optional
from uuid import uuid4

from models.conversation_models import (
	MODEL_ROLE,
	PLAYBACK_PAUSED,
	USER_ROLE,
	ChatMessage,
	ChatSession,
	Turn,
)
from utils.languages import resolve_language


def _clamp_progress(value: float) -> float:
	return max(0.0, min(100.0, float(value)))


class SessionStore:
	"""Authoritative holder of conversation messages and the active-audio pointer."""

	def __init__(self) -> None:
		self._sessions: Dict[str, ChatSession] = {}

	def create(self, language: Optional[str] = None) -> ChatSession:
		"""Create an empty session answering in `language`."""
		session_id = uuid4().hex
		state = ChatSession(session_id=session_id, language=resolve_language(language))
		self._sessions[session_id] = state
		return state

	def get(self, session_id: str) -> ChatSession:
		"""Return a session or raise KeyError if missing."""
		state = self._sessions.get(session_id)
		if state is None:
			raise KeyError(f"Session {session_id} not found")
		return state

	def __contains__(self, session_id: object) -> bool:
		return session_id in self._sessions

	def delete(self, session_id: str) -> None:
		self.get(session_id)
		del self._sessions[session_id]

	def append_user_message(self, session_id: str, content: str, *, pending: bool = False) -> ChatMessage:
		"""Append a user message. Identical content is appended again, never merged."""
		text = (content or "").strip()
		if not text:
			raise ValueError("User message content must not be empty.")
		state = self.get(session_id)
		message = ChatMessage(role=USER_ROLE, content=text, pending=pending)
		state.messages.append(message)
		return message

	def append_model_message(self, session_id: str, content: str) -> ChatMessage:
		"""Append a model reply; its audio is attached later by the speech renderer."""
		state = self.get(session_id)
		message = ChatMessage(role=MODEL_ROLE, content=content, playback_progress=0.0)
		state.messages.append(message)
		return message

	def finalize_message(self, session_id: str, message_id: str, content: str) -> Optional[ChatMessage]:
		"""Replace a pending placeholder's content and confirm it."""
		message = self.get(session_id).find(message_id)
		if message is None:
			return None
		message.content = content.strip()
		message.pending = False
		return message

	def remove_message(self, session_id: str, message_id: str) -> bool:
		"""Roll back a message. Returns False when the id is unknown."""
		state = self.get(session_id)
		message = state.find(message_id)
		if message is None:
			return False
		state.messages.remove(message)
		if state.active_message_id == message_id:
			state.active_message_id = None
		return True

	def attach_audio(self, session_id: str, message_id: str, audio_reference: str) -> Optional[ChatMessage]:
		message = self.get(session_id).find(message_id)
		if message is not None:
			message.audio_reference = audio_reference
		return message

	def update_playback_state(
		self,
		session_id: str,
		message_id: str,
		*,
		is_playing: Optional[bool] = None,
		playback_progress: Optional[float] = None,
		playback_status: Optional[str] = None,
	) -> Optional[ChatMessage]:
		"""Patch playback fields of one message.

		At most one message plays at a time: activating a message first stops the
		previous owner and resets its progress. Unknown ids are ignored.
		"""
		state = self._sessions.get(session_id)
		if state is None:
			return None
		message = state.find(message_id)
		if message is None:
			return None

		if is_playing:
			for other in state.messages:
				if other.id != message_id and other.is_playing:
					other.is_playing = False
					other.playback_progress = 0.0
					other.playback_status = PLAYBACK_PAUSED
			state.active_message_id = message_id
		elif is_playing is False and state.active_message_id == message_id:
			state.active_message_id = None

		if is_playing is not None:
			message.is_playing = is_playing
		if playback_progress is not None:
			message.playback_progress = _clamp_progress(playback_progress)
		if playback_status is not None:
			message.playback_status = playback_status
		return message

	def history(self, session_id: str) -> List[Turn]:
		"""Return confirmed turns in chronological order, skipping pending placeholders."""
		return [message.as_turn() for message in self.get(session_id).messages if not message.pending]

	def set_input_text(self, session_id: str, text: str) -> ChatSession:
		state = self.get(session_id)
		state.input_text = text
		return state
