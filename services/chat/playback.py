"""Audio playback state machine for chat messages.

Transitions:
	idle    --play-->       playing
	playing --pause-->      paused   (progress reset to 0)
	playing --end-->        ended    (progress reset to 0)
	playing --timeupdate--> playing  (progress sampled)
	paused/ended --play-->  playing  (restarts from the beginning)

Playing a message pauses whichever message owned the player before.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from models.conversation_models import (
	PLAYBACK_ENDED,
	PLAYBACK_PAUSED,
	PLAYBACK_PLAYING,
	ChatMessage,
)
from services.chat.session_store import SessionStore


class PlaybackEvent(str, Enum):
	PLAY = "play"
	PAUSE = "pause"
	END = "end"
	TIME_UPDATE = "timeupdate"
	TOGGLE = "toggle"


class PlaybackError(ValueError):
	"""Raised when an event cannot apply to the message's current state."""


class PlaybackController:
	"""Apply discrete audio events to session messages."""

	def __init__(self, store: SessionStore) -> None:
		self.store = store

	def dispatch(
		self,
		session_id: str,
		message_id: str,
		event: PlaybackEvent,
		*,
		current_time: Optional[float] = None,
		duration: Optional[float] = None,
	) -> Optional[ChatMessage]:
		"""Apply `event` and return the updated message (None for unknown ids)."""
		message = self.store.get(session_id).find(message_id)
		if message is None:
			return None

		if event is PlaybackEvent.TOGGLE:
			event = PlaybackEvent.PAUSE if message.is_playing else PlaybackEvent.PLAY

		if event is PlaybackEvent.PLAY:
			if not message.audio_reference:
				raise PlaybackError("Audio for this message is not available yet.")
			return self.store.update_playback_state(
				session_id, message_id, is_playing=True, playback_progress=0.0, playback_status=PLAYBACK_PLAYING
			)

		if not message.is_playing:
			# pause/end/timeupdate on a stopped message leave it as is
			return message

		if event is PlaybackEvent.PAUSE:
			return self.store.update_playback_state(
				session_id, message_id, is_playing=False, playback_progress=0.0, playback_status=PLAYBACK_PAUSED
			)
		if event is PlaybackEvent.END:
			return self.store.update_playback_state(
				session_id, message_id, is_playing=False, playback_progress=0.0, playback_status=PLAYBACK_ENDED
			)
		if not duration or current_time is None:
			return message
		return self.store.update_playback_state(
			session_id, message_id, playback_progress=(current_time / duration) * 100.0
		)
