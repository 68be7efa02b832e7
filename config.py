"""
RefundDesk configuration.

Everything is read from the environment (or a local .env file) once, at
import time. Model choices live in MODELS so they can be updated in one place.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Env + API keys
load_dotenv(dotenv_path=Path(__file__).resolve().parent / ".env")

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
DEEPGRAM_API_KEY = os.getenv("DEEPGRAM_API_KEY")
ELEVENLABS_API_KEY = os.getenv("ELEVENLABS_API_KEY")

SPEECH_PROVIDERS = ("deepgram", "elevenlabs")
SPEECH_PROVIDER = os.getenv("SPEECH_PROVIDER", "deepgram").strip().lower()

# Model Configuration - Centralized for easy updates
MODELS = {
    "openai": {
        "chat_model": os.getenv("OPENAI_CHAT_MODEL", "gpt-3.5-turbo"),
        "temperature": 0.7,
        "max_tokens": 150,
    },
    "deepgram": {
        "base_url": "https://api.deepgram.com/v1",
        "transcribe_model": os.getenv("DEEPGRAM_TRANSCRIBE_MODEL", "nova"),
        "speak_model": os.getenv("DEEPGRAM_SPEAK_MODEL", "aura-asteria-en"),
    },
    "elevenlabs": {
        "voice_id": os.getenv("ELEVENLABS_VOICE_ID"),
        "voice_model": os.getenv("ELEVENLABS_VOICE_MODEL", "eleven_turbo_v2_5"),
        "stt_model": os.getenv("ELEVENLABS_STT_MODEL", "scribe_v1"),
        # Raw 16-bit mono PCM; wrapped into WAV before it leaves the server
        "output_format": "pcm_16000",
        "sample_rate": 16000,
    },
}

PORT = int(os.getenv("PORT", "5050"))
DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"

STATIC_DIR = Path(__file__).resolve().parent / "static"


def provider_label(provider: str = None) -> str:
    """Human-facing name of a speech provider, used in error messages."""
    provider = provider or SPEECH_PROVIDER
    return {"deepgram": "Deepgram", "elevenlabs": "ElevenLabs"}.get(provider, provider)
