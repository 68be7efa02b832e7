"""
RefundDesk - Call Center Training
Features:
- Angry customer role-play for customer service trainees
- Typed or spoken turns from a single browser page
- OpenAI chat completions for the customer's replies
- Deepgram (or ElevenLabs) speech recognition and synthesis
"""

import logging
import os
from functools import wraps

from flask import Flask, Response, jsonify, render_template, request
from flask_cors import CORS
from pydub.generators import Sine

import config
import dialogue
import speech
from errors import EmptyResult, InvalidRequest, ServiceError, Unauthorized, UpstreamFailure, is_auth_failure

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)

# Suppress excessive werkzeug logging
logging.getLogger("werkzeug").setLevel(logging.ERROR)

# Fail at startup rather than on the first request
speech.check_provider()

# Initialize Flask app
app = Flask(__name__, static_folder=str(config.STATIC_DIR))

# Enable CORS (Cross-Origin Resource Sharing)
CORS(app)


def ensure_static_files():
    """Ensure required static files exist"""
    os.makedirs(config.STATIC_DIR, exist_ok=True)

    # Short beep played when recording starts
    beep_path = config.STATIC_DIR / "beep.wav"
    if not beep_path.exists():
        logger.info("🔊 Generating beep.wav...")
        beep = Sine(1000).to_audio_segment(duration=300).apply_gain(-6)
        beep.export(str(beep_path), format="wav")
        logger.info("✅ beep.wav created")


def error_handler(failure_message, auth_message=None):
    """
    Wrap a route so every failure comes back as a JSON error body.

    ServiceError carries its own status and message. Anything else came from
    an upstream call: credential problems become 401 when the route has an
    auth_message, everything else is a 500 with the upstream text in details.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except ServiceError as e:
                logger.warning(f"⚠️ {f.__name__}: {e.message}")
                error = e
            except Exception as e:
                logger.exception(f"💥 Route error in {f.__name__}: {e}")
                if auth_message and is_auth_failure(e):
                    error = Unauthorized(auth_message)
                else:
                    error = UpstreamFailure(failure_message, details=str(e) or type(e).__name__)
            return jsonify(error.to_dict()), error.status_code
        return wrapper
    return decorator


def required_text(payload, field, error_message):
    value = payload.get(field) if isinstance(payload, dict) else None
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequest(error_message)
    return value.strip()


@app.route("/")
def index():
    return render_template("index.html")


@app.route("/api/chat", methods=["POST"])
@error_handler(
    "Failed to get AI response",
    auth_message="Invalid or missing OpenAI API key. Please check your environment variables.",
)
def chat():
    payload = request.get_json(silent=True) or {}
    message = required_text(payload, "message", "No message provided")
    history = dialogue.validate_history(payload.get("history"))

    logger.info(f"📝 Received message: '{message}' ({len(history)} prior messages)")
    reply = dialogue.generate_reply(message, history)
    return jsonify({"response": reply})


@app.route("/api/transcribe", methods=["POST"])
@error_handler("Failed to transcribe audio")
def transcribe():
    audio = request.files.get("audio")
    if audio is None:
        raise InvalidRequest("No audio file provided")

    audio_bytes = audio.read()
    if not audio_bytes:
        raise InvalidRequest("No audio file provided")

    text = speech.transcribe_audio(audio_bytes, audio.mimetype or speech.DEFAULT_MIMETYPE)
    logger.info(f"🎯 Transcript: '{text}'")
    return jsonify({"text": text})


@app.route("/api/speak", methods=["POST"])
@error_handler(
    "Failed to convert text to speech",
    auth_message=(
        f"Invalid or missing {config.provider_label()} API key. "
        "Please check your environment variables."
    ),
)
def speak():
    payload = request.get_json(silent=True) or {}
    text = required_text(payload, "text", "No text provided")

    audio = speech.synthesize_speech(text)
    if not audio:
        raise EmptyResult("No audio returned from speech synthesis")

    return Response(
        audio,
        mimetype="audio/wav",
        headers={"Content-Length": str(len(audio))},
    )


if __name__ == "__main__":
    # Ensure static directory and files exist
    ensure_static_files()

    print("\n🚀 RefundDesk - Call Center Training")
    print(f"\n📦 Model Configuration:")
    print(f"   OpenAI Chat: {config.MODELS['openai']['chat_model']}")
    print(f"   Speech Provider: {config.provider_label()}")
    if config.SPEECH_PROVIDER == "deepgram":
        print(f"   Transcription: {config.MODELS['deepgram']['transcribe_model']}")
        print(f"   Voice: {config.MODELS['deepgram']['speak_model']}")
    else:
        print(f"   Transcription: {config.MODELS['elevenlabs']['stt_model']}")
        print(f"   Voice: {config.MODELS['elevenlabs']['voice_model']}")
    print(f"\n🔑 API keys:")
    print(f"   OPENAI_API_KEY: {'set' if config.OPENAI_API_KEY else 'MISSING'}")
    print(f"   DEEPGRAM_API_KEY: {'set' if config.DEEPGRAM_API_KEY else 'MISSING'}")
    print(f"   ELEVENLABS_API_KEY: {'set' if config.ELEVENLABS_API_KEY else 'MISSING'}")
    print(f"\n🏁 Application started on port {config.PORT}\n")

    app.run(host="0.0.0.0", port=config.PORT, debug=config.DEBUG)
