"""
Speech recognition and synthesis.

Two providers share one interface: Deepgram over its REST API (the default)
and ElevenLabs through its SDK. Both hand back a plain transcript string and
WAV bytes, so the routes never need to know which one is configured.
"""

import io
import logging
from functools import lru_cache

import requests
from elevenlabs.client import ElevenLabs
from pydub import AudioSegment

import config
from errors import MissingCredentials, ProviderError
from persona import angry_customer

logger = logging.getLogger(__name__)

DEFAULT_MIMETYPE = "audio/wav"


def check_provider(provider: str = None) -> str:
    provider = provider or config.SPEECH_PROVIDER
    if provider not in config.SPEECH_PROVIDERS:
        raise RuntimeError(
            f"Unknown SPEECH_PROVIDER '{provider}', expected one of {', '.join(config.SPEECH_PROVIDERS)}"
        )
    return provider


# ============================================
# Deepgram
# ============================================

def _deepgram_headers(content_type: str) -> dict:
    if not config.DEEPGRAM_API_KEY:
        raise MissingCredentials("DEEPGRAM_API_KEY is not set (missing API key)")
    return {
        "Authorization": f"Token {config.DEEPGRAM_API_KEY}",
        "Content-Type": content_type,
    }


def _deepgram_error(response: requests.Response, fallback: str) -> ProviderError:
    """Pull Deepgram's error message and code out of a failed response."""
    message, error_code = None, None
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        message = payload.get("err_msg") or payload.get("message") or payload.get("reason")
        error_code = payload.get("err_code")
    message = message or response.text or fallback
    return ProviderError(message, status_code=response.status_code, error_code=error_code)


def deepgram_transcribe(audio: bytes, mimetype: str = DEFAULT_MIMETYPE) -> str:
    settings = config.MODELS["deepgram"]
    response = requests.post(
        f"{settings['base_url']}/listen",
        headers=_deepgram_headers(mimetype or DEFAULT_MIMETYPE),
        params={
            "smart_format": "true",
            "model": settings["transcribe_model"],
        },
        data=audio,
    )
    if not response.ok:
        raise _deepgram_error(response, "Failed to transcribe audio")

    results = response.json().get("results") or {}
    channels = results.get("channels") or [{}]
    alternatives = channels[0].get("alternatives") or [{}]
    return alternatives[0].get("transcript") or ""


def deepgram_speak(text: str) -> bytes:
    settings = config.MODELS["deepgram"]
    response = requests.post(
        f"{settings['base_url']}/speak",
        headers=_deepgram_headers("application/json"),
        params={
            "model": settings["speak_model"],
            "encoding": "linear16",
            "container": "wav",
        },
        json={"text": text},
    )
    if not response.ok:
        raise _deepgram_error(response, "Failed to generate speech")
    return response.content


# ============================================
# ElevenLabs
# ============================================

@lru_cache(maxsize=1)
def get_elevenlabs_client() -> ElevenLabs:
    if not config.ELEVENLABS_API_KEY:
        raise MissingCredentials("ELEVENLABS_API_KEY is not set (missing API key)")
    return ElevenLabs(api_key=config.ELEVENLABS_API_KEY)


def pcm_to_wav(raw_audio: bytes, sample_rate: int) -> bytes:
    """Wrap 16-bit mono PCM in a WAV container."""
    segment = AudioSegment(data=raw_audio, sample_width=2, frame_rate=sample_rate, channels=1)
    buffer = io.BytesIO()
    segment.export(buffer, format="wav")
    return buffer.getvalue()


def elevenlabs_transcribe(audio: bytes, mimetype: str = DEFAULT_MIMETYPE, client: ElevenLabs = None) -> str:
    client = client or get_elevenlabs_client()
    result = client.speech_to_text.convert(
        file=io.BytesIO(audio),
        model_id=config.MODELS["elevenlabs"]["stt_model"],
    )
    return (getattr(result, "text", None) or "").strip()


def elevenlabs_speak(text: str, client: ElevenLabs = None) -> bytes:
    client = client or get_elevenlabs_client()
    settings = config.MODELS["elevenlabs"]
    audio_gen = client.text_to_speech.convert(
        voice_id=settings["voice_id"] or angry_customer["voice_id"],
        text=text,
        model_id=settings["voice_model"],
        output_format=settings["output_format"],
    )

    raw_audio = b""
    for chunk in audio_gen:
        if chunk:
            raw_audio += chunk
    if not raw_audio:
        return b""
    return pcm_to_wav(raw_audio, settings["sample_rate"])


# ============================================
# Provider dispatch
# ============================================

def transcribe_audio(audio: bytes, mimetype: str = DEFAULT_MIMETYPE) -> str:
    """Return the best transcript for a clip, or "" when nothing was recognised."""
    provider = check_provider()
    logger.info(f"📝 Transcribing {len(audio)} bytes ({mimetype}) with {config.provider_label(provider)}")
    if provider == "elevenlabs":
        return elevenlabs_transcribe(audio, mimetype)
    return deepgram_transcribe(audio, mimetype)


def synthesize_speech(text: str) -> bytes:
    """Return WAV bytes for the given text."""
    provider = check_provider()
    logger.info(f"🔊 Synthesizing {len(text)} characters with {config.provider_label(provider)}")
    if provider == "elevenlabs":
        audio = elevenlabs_speak(text)
    else:
        audio = deepgram_speak(text)
    logger.info(f"✅ Audio data size: {len(audio)} bytes")
    return audio
