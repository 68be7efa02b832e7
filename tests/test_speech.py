from types import SimpleNamespace

import pytest

import config
import speech
from conftest import FAKE_WAV, FakeResponse
from errors import MissingCredentials, ProviderError, is_auth_failure


class FakeElevenLabs:
    def __init__(self, chunks=(b"\x00\x01" * 800,), transcript="Where is my refund?"):
        self.tts_calls = []
        self.stt_calls = []
        self.text_to_speech = SimpleNamespace(convert=self._convert)
        self.speech_to_text = SimpleNamespace(convert=self._transcribe)
        self._chunks = chunks
        self._transcript = transcript

    def _convert(self, **kwargs):
        self.tts_calls.append(kwargs)
        return iter(self._chunks)

    def _transcribe(self, **kwargs):
        self.stt_calls.append(kwargs)
        return SimpleNamespace(text=self._transcript, language_code="en")


def test_deepgram_transcribe_request_shape(fake_deepgram):
    text = speech.deepgram_transcribe(FAKE_WAV, "audio/webm")

    assert text == "I need a refund."
    call = fake_deepgram.calls[0]
    assert call["url"] == "https://api.deepgram.com/v1/listen"
    assert call["params"] == {"smart_format": "true", "model": "nova"}
    assert call["headers"] == {"Authorization": "Token test-deepgram-key", "Content-Type": "audio/webm"}


def test_deepgram_transcribe_handles_missing_results(fake_deepgram):
    fake_deepgram.responses["listen"] = FakeResponse(payload={"metadata": {}})
    assert speech.deepgram_transcribe(FAKE_WAV) == ""


def test_deepgram_speak_asks_for_wav(fake_deepgram):
    audio = speech.deepgram_speak("Give me my money back!")

    assert audio == FAKE_WAV
    call = fake_deepgram.calls[0]
    assert call["url"] == "https://api.deepgram.com/v1/speak"
    assert call["params"]["encoding"] == "linear16"
    assert call["params"]["container"] == "wav"
    assert call["json"] == {"text": "Give me my money back!"}


def test_deepgram_error_keeps_code_and_message(fake_deepgram):
    fake_deepgram.responses["speak"] = FakeResponse(
        status_code=401, payload={"err_code": "INVALID_AUTH", "err_msg": "Invalid credentials."}
    )
    with pytest.raises(ProviderError) as exc_info:
        speech.deepgram_speak("hello")

    assert str(exc_info.value) == "Invalid credentials."
    assert exc_info.value.status_code == 401
    assert exc_info.value.error_code == "INVALID_AUTH"
    assert is_auth_failure(exc_info.value)


def test_deepgram_error_without_json_uses_body_text(fake_deepgram):
    fake_deepgram.responses["speak"] = FakeResponse(status_code=502, text="Bad Gateway")
    with pytest.raises(ProviderError, match="Bad Gateway"):
        speech.deepgram_speak("hello")


def test_deepgram_missing_key(fake_deepgram, monkeypatch):
    monkeypatch.setattr(config, "DEEPGRAM_API_KEY", None)
    with pytest.raises(MissingCredentials):
        speech.deepgram_speak("hello")
    assert fake_deepgram.calls == []


def test_pcm_to_wav_adds_riff_header():
    wav = speech.pcm_to_wav(b"\x00\x00" * 160, 16000)
    assert wav[:4] == b"RIFF"
    assert wav[8:12] == b"WAVE"
    assert len(wav) > 320


def test_elevenlabs_speak_returns_wav():
    client = FakeElevenLabs()
    audio = speech.elevenlabs_speak("You people never listen.", client=client)

    assert audio[:4] == b"RIFF"
    call = client.tts_calls[0]
    assert call["output_format"] == "pcm_16000"
    assert call["text"] == "You people never listen."
    assert call["voice_id"]


def test_elevenlabs_speak_with_no_chunks_is_empty():
    assert speech.elevenlabs_speak("hello", client=FakeElevenLabs(chunks=())) == b""


def test_elevenlabs_transcribe():
    client = FakeElevenLabs(transcript="  Where is my refund?  ")
    assert speech.elevenlabs_transcribe(FAKE_WAV, client=client) == "Where is my refund?"
    assert client.stt_calls[0]["model_id"] == "scribe_v1"
    assert client.stt_calls[0]["file"].read() == FAKE_WAV


def test_dispatch_follows_provider(monkeypatch):
    client = FakeElevenLabs()
    monkeypatch.setattr(config, "SPEECH_PROVIDER", "elevenlabs")
    monkeypatch.setattr(speech, "get_elevenlabs_client", lambda: client)

    assert speech.transcribe_audio(FAKE_WAV) == "Where is my refund?"
    assert speech.synthesize_speech("hello")[:4] == b"RIFF"


def test_dispatch_defaults_to_deepgram(fake_deepgram):
    assert speech.synthesize_speech("hello") == FAKE_WAV
    assert speech.transcribe_audio(FAKE_WAV) == "I need a refund."


def test_unknown_provider_is_rejected(monkeypatch):
    monkeypatch.setattr(config, "SPEECH_PROVIDER", "polly")
    with pytest.raises(RuntimeError, match="Unknown SPEECH_PROVIDER"):
        speech.transcribe_audio(FAKE_WAV)
