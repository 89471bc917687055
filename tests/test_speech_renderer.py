"""
Tests for speech synthesis of chatbot replies.
"""

from types import SimpleNamespace

import pytest

from services.chat.speech_renderer import SPEECH_FAILED_NOTICE, SpeechRenderer
from services.openai.speech_service import SpeechSynthesizer

from conftest import FakeOpenAI


def _renderer(store, client):
    return SpeechRenderer(store, SpeechSynthesizer(client))


class TestSpeechRenderer:
    """Test cases for SpeechRenderer."""

    async def test_audio_is_attached(self, store, session):
        client = FakeOpenAI(speech=[SimpleNamespace(content=b"RIFF....WAVE")])
        message = store.append_model_message(session.session_id, "Water weekly.")

        result = await _renderer(store, client).render(session.session_id, message.id)

        assert result.notice is None
        assert result.audio_reference.startswith("data:audio/wav;base64,")
        assert message.audio_reference == result.audio_reference
        assert message.playback_progress == 0
        call = client.audio.speech.calls[0]
        assert call["input"] == "Water weekly."
        assert call["response_format"] == "wav"

    async def test_existing_audio_is_reused(self, store, session):
        client = FakeOpenAI()
        message = store.append_model_message(session.session_id, "Water weekly.")
        store.attach_audio(session.session_id, message.id, "data:audio/wav;base64,AAAA")

        result = await _renderer(store, client).render(session.session_id, message.id)

        assert result.audio_reference == "data:audio/wav;base64,AAAA"
        assert client.audio.speech.calls == []

    async def test_failure_leaves_text_intact(self, store, session):
        client = FakeOpenAI(speech=[RuntimeError("quota exceeded")])
        message = store.append_model_message(session.session_id, "Water weekly.")

        result = await _renderer(store, client).render(session.session_id, message.id)

        assert result.notice == SPEECH_FAILED_NOTICE
        assert result.audio_reference is None
        assert message.audio_reference is None
        assert message.content == "Water weekly."

    async def test_empty_audio_is_a_failure(self, store, session):
        client = FakeOpenAI(speech=[SimpleNamespace(content=b"")])
        message = store.append_model_message(session.session_id, "Water weekly.")

        result = await _renderer(store, client).render(session.session_id, message.id)

        assert result.notice == SPEECH_FAILED_NOTICE
        assert message.audio_reference is None

    async def test_unknown_message(self, store, session):
        result = await _renderer(store, FakeOpenAI()).render(session.session_id, "missing")
        assert result.audio_reference is None
        assert result.notice

    async def test_deleted_session(self, store, session):
        message = store.append_model_message(session.session_id, "bye")
        store.delete(session.session_id)
        result = await _renderer(store, FakeOpenAI()).render(session.session_id, message.id)
        assert result.audio_reference is None


class TestSpeechSynthesizer:
    """Test cases for SpeechSynthesizer."""

    async def test_blank_text_rejected(self):
        with pytest.raises(ValueError):
            await SpeechSynthesizer(FakeOpenAI()).synthesize("  ")

    async def test_instructions_name_the_language(self):
        client = FakeOpenAI(speech=[SimpleNamespace(content=b"wav")])
        await SpeechSynthesizer(client).synthesize("Bonjour", "fr-FR")
        assert "French" in client.audio.speech.calls[0]["instructions"]
