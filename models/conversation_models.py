"""Conversation domain models for the plant-care chatbot."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import uuid4

USER_ROLE = "user"
MODEL_ROLE = "model"
ROLES = (USER_ROLE, MODEL_ROLE)

PLAYBACK_IDLE = "idle"
PLAYBACK_PLAYING = "playing"
PLAYBACK_PAUSED = "paused"
PLAYBACK_ENDED = "ended"


@dataclass(frozen=True)
class Turn:
	"""One confirmed exchange unit sent to the responder as context."""

	role: str
	content: str


@dataclass
class ChatMessage:
	"""UI-facing message: a turn plus audio playback state."""

	role: str
	content: str
	id: str = field(default_factory=lambda: uuid4().hex)
	audio_reference: Optional[str] = None
	is_playing: bool = False
	playback_progress: float = 0.0
	playback_status: str = PLAYBACK_IDLE
	pending: bool = False
	created_at: float = field(default_factory=lambda: time.time())

	def as_turn(self) -> Turn:
		return Turn(role=self.role, content=self.content)

	def to_dict(self) -> dict:
		return {
			"id": self.id,
			"role": self.role,
			"content": self.content,
			"has_audio": self.audio_reference is not None,
			"is_playing": self.is_playing,
			"playback_progress": self.playback_progress,
			"playback_status": self.playback_status,
			"pending": self.pending,
			"created_at": self.created_at,
		}


@dataclass
class ChatSession:
	"""In-memory state of one active conversation."""

	session_id: str
	language: str
	messages: List[ChatMessage] = field(default_factory=list)
	input_text: str = ""
	is_recording: bool = False
	is_pending: bool = False
	active_message_id: Optional[str] = None

	def find(self, message_id: str) -> Optional[ChatMessage]:
		for message in self.messages:
			if message.id == message_id:
				return message
		return None

	def to_dict(self) -> dict:
		return {
			"session_id": self.session_id,
			"language": self.language,
			"input_text": self.input_text,
			"is_recording": self.is_recording,
			"is_pending": self.is_pending,
			"active_message_id": self.active_message_id,
			"messages": [message.to_dict() for message in self.messages],
		}
