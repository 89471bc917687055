"""
Tests for chat input normalization.
"""

from types import SimpleNamespace

import pytest

from services.chat.input_normalizer import InputNormalizer
from services.openai.dictation_service import DictationService, filename_for_mime

from conftest import FakeOpenAI


class TestFromText:
    """Test cases for typed input."""

    @pytest.mark.parametrize("text", ["", "   ", "\n\t", None])
    def test_blank_input_is_nothing_to_send(self, text):
        assert InputNormalizer.from_text(text) is None

    def test_text_is_trimmed(self):
        assert InputNormalizer.from_text("  Is my monstera thirsty?\n") == "Is my monstera thirsty?"


class TestFromAudio:
    """Test cases for recorded input."""

    async def test_transcribes_in_session_language(self):
        client = FakeOpenAI(transcriptions=[SimpleNamespace(text="¿Cuánta agua necesita?  ")])
        normalizer = InputNormalizer(DictationService(client))

        transcript = await normalizer.from_audio(b"RIFFdata", "audio/wav", "es-ES")

        assert transcript == "¿Cuánta agua necesita?"
        call = client.audio.transcriptions.calls[0]
        assert call["language"] == "es"
        assert call["file"].name == "recording.wav"
        assert call["file"].getvalue() == b"RIFFdata"

    async def test_codec_parameters_are_ignored(self):
        client = FakeOpenAI(transcriptions=[SimpleNamespace(text="hello")])
        normalizer = InputNormalizer(DictationService(client))

        await normalizer.from_audio(b"data", "audio/webm;codecs=opus", "en-US")

        assert client.audio.transcriptions.calls[0]["file"].name == "recording.webm"

    async def test_silence_yields_empty_transcript(self):
        client = FakeOpenAI(transcriptions=[SimpleNamespace(text=None)])
        normalizer = InputNormalizer(DictationService(client))
        assert await normalizer.from_audio(b"data", "audio/webm", "en-US") == ""

    async def test_empty_recording_is_rejected(self):
        client = FakeOpenAI()
        with pytest.raises(ValueError):
            await InputNormalizer(DictationService(client)).from_audio(b"", "audio/webm", "en-US")
        assert client.audio.transcriptions.calls == []


def test_unknown_audio_type_has_no_filename():
    with pytest.raises(ValueError):
        filename_for_mime("audio/unknown")
