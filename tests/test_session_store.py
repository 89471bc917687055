"""
Tests for the chat session store.
"""

import pytest

from models.conversation_models import MODEL_ROLE, PLAYBACK_PAUSED, USER_ROLE, Turn


class TestSessionStore:
    """Test cases for SessionStore."""

    def test_create_resolves_unsupported_language(self, store):
        """Unknown locales fall back to English."""
        assert store.create("xx-YY").language == "en-US"
        assert store.create("es-ES").language == "es-ES"

    def test_get_unknown_session_raises(self, store):
        with pytest.raises(KeyError):
            store.get("missing")

    def test_messages_keep_call_order(self, store, session):
        """Mixed appends come back exactly in call order."""
        sid = session.session_id
        store.append_user_message(sid, "first")
        store.append_model_message(sid, "second")
        store.append_user_message(sid, "third")
        store.append_model_message(sid, "fourth")

        assert [m.content for m in store.get(sid).messages] == ["first", "second", "third", "fourth"]
        assert [m.role for m in store.get(sid).messages] == [USER_ROLE, MODEL_ROLE, USER_ROLE, MODEL_ROLE]

    def test_duplicate_content_is_not_merged(self, store, session):
        sid = session.session_id
        first = store.append_user_message(sid, "hello")
        second = store.append_user_message(sid, "hello")

        assert first.id != second.id
        assert len(store.get(sid).messages) == 2

    def test_empty_user_message_is_rejected(self, store, session):
        with pytest.raises(ValueError):
            store.append_user_message(session.session_id, "   ")
        assert session.messages == []

    def test_model_message_starts_without_audio(self, store, session):
        message = store.append_model_message(session.session_id, "reply")
        assert message.audio_reference is None
        assert message.playback_progress == 0
        assert message.is_playing is False

    def test_only_one_message_plays_at_a_time(self, store, session):
        """Starting B while A plays stops A and resets its progress."""
        sid = session.session_id
        a = store.append_model_message(sid, "a")
        b = store.append_model_message(sid, "b")
        store.update_playback_state(sid, a.id, is_playing=True)
        store.update_playback_state(sid, a.id, playback_progress=42)

        store.update_playback_state(sid, b.id, is_playing=True)

        assert a.is_playing is False
        assert a.playback_progress == 0
        assert a.playback_status == PLAYBACK_PAUSED
        assert b.is_playing is True
        assert session.active_message_id == b.id
        assert sum(1 for m in session.messages if m.is_playing) == 1

    def test_update_unknown_message_is_noop(self, store, session):
        sid = session.session_id
        message = store.append_model_message(sid, "a")

        assert store.update_playback_state(sid, "nope", is_playing=True) is None
        assert store.update_playback_state("no-session", message.id, is_playing=True) is None
        assert message.is_playing is False

    def test_progress_is_clamped(self, store, session):
        sid = session.session_id
        message = store.append_model_message(sid, "a")
        store.update_playback_state(sid, message.id, playback_progress=180)
        assert message.playback_progress == 100
        store.update_playback_state(sid, message.id, playback_progress=-3)
        assert message.playback_progress == 0

    def test_history_skips_pending_placeholders(self, store, session):
        sid = session.session_id
        store.append_user_message(sid, "hi")
        store.append_model_message(sid, "hello")
        placeholder = store.append_user_message(sid, "Processing...", pending=True)

        assert store.history(sid) == [Turn(USER_ROLE, "hi"), Turn(MODEL_ROLE, "hello")]

        store.finalize_message(sid, placeholder.id, "  what about roses? ")
        assert store.history(sid)[-1] == Turn(USER_ROLE, "what about roses?")

    def test_remove_message_clears_active_pointer(self, store, session):
        sid = session.session_id
        message = store.append_model_message(sid, "a")
        store.update_playback_state(sid, message.id, is_playing=True)

        assert store.remove_message(sid, message.id) is True
        assert session.active_message_id is None
        assert store.remove_message(sid, message.id) is False

    def test_delete_session(self, store, session):
        store.delete(session.session_id)
        with pytest.raises(KeyError):
            store.get(session.session_id)
