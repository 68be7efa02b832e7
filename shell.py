"""
Terminal practice client for a running RefundDesk server.

Runs the same turn as the browser page (transcribe, reply, speak) and keeps
the transcript on this side of the wire, resending it with every turn.

Usage:
    python shell.py --base-url http://localhost:5050 --audio-dir replies
    You: Thank you for calling, how can I help?
    You: @recording.wav
"""

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import requests
from pydub import AudioSegment
from pydub.playback import play

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def as_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class Transcript:
    """Ordered chat messages of one session. Appending returns a new transcript."""

    messages: Tuple[ChatMessage, ...] = ()

    def append(self, role: str, content: str) -> "Transcript":
        return Transcript(self.messages + (ChatMessage(role, content),))

    def as_history(self) -> List[Dict[str, str]]:
        return [m.as_dict() for m in self.messages]

    def __len__(self) -> int:
        return len(self.messages)


@dataclass
class TurnResult:
    """
    What one turn produced.

    Attributes:
        user_text: What the trainee said or typed (None if transcription failed).
        reply: The customer's reply, when the dialogue step succeeded.
        audio: WAV bytes for the reply, when synthesis succeeded.
        error: The first error hit during the turn, if any.
    """

    user_text: Optional[str] = None
    reply: Optional[str] = None
    audio: Optional[bytes] = None
    error: Optional[str] = None


def _error_message(response, fallback: str) -> str:
    try:
        payload = response.json()
    except ValueError:
        return fallback
    if isinstance(payload, dict) and payload.get("error"):
        return payload["error"]
    return fallback


class TrainingSession:
    """Owns the transcript and runs turns against the server, one step at a time."""

    def __init__(self, base_url: str = "http://localhost:5050", http=None):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.transcript = Transcript()

    def take_turn(self, text: str) -> TurnResult:
        text = (text or "").strip()
        if not text:
            return TurnResult(error="No message provided")
        result = TurnResult(user_text=text)

        try:
            response = self.http.post(
                f"{self.base_url}/api/chat",
                json={"message": text, "history": self.transcript.as_history()},
            )
            if not response.ok:
                result.error = _error_message(response, "Failed to get AI response")
                return result
            reply = (response.json() or {}).get("response")
        except (requests.RequestException, ValueError) as e:
            result.error = f"Failed to get AI response: {e}"
            return result

        if not reply:
            result.error = "No response from AI"
            return result

        result.reply = reply
        self.transcript = self.transcript.append("user", text).append("assistant", reply)

        # The reply is kept whatever happens to the audio
        try:
            response = self.http.post(f"{self.base_url}/api/speak", json={"text": reply})
            if not response.ok:
                result.error = _error_message(response, "Failed to convert response to speech")
            else:
                result.audio = response.content
        except requests.RequestException as e:
            result.error = f"Failed to convert response to speech: {e}"
        return result

    def take_spoken_turn(self, audio: bytes, mimetype: str = "audio/wav") -> TurnResult:
        try:
            response = self.http.post(
                f"{self.base_url}/api/transcribe",
                files={"audio": ("recording.wav", audio, mimetype)},
            )
            if not response.ok:
                return TurnResult(error=_error_message(response, "Failed to transcribe audio"))
            text = ((response.json() or {}).get("text") or "").strip()
        except (requests.RequestException, ValueError) as e:
            return TurnResult(error=f"Failed to transcribe audio: {e}")

        if not text:
            return TurnResult(error="No transcription received. Please try speaking more clearly.")
        return self.take_turn(text)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def save_reply_audio(audio: bytes, audio_dir: Path, turn: int) -> Path:
    audio_dir.mkdir(parents=True, exist_ok=True)
    path = audio_dir / f"turn-{turn}.wav"
    path.write_bytes(audio)
    return path


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Practice with the angry customer from a terminal.")
    parser.add_argument("--base-url", default="http://localhost:5050", help="RefundDesk server URL")
    parser.add_argument("--audio-dir", default="replies", help="Where reply audio is written")
    parser.add_argument("--play", action="store_true", help="Play each reply through the speakers")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    session = TrainingSession(args.base_url)
    audio_dir = Path(args.audio_dir)
    turn = 0

    print("📞 You are the representative. Type a line, or @file.wav to send a recording. Ctrl-D to hang up.")
    while True:
        try:
            line = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return 0
        if not line:
            continue

        if line.startswith("@"):
            clip = Path(line[1:].strip())
            try:
                data = clip.read_bytes()
            except OSError as e:
                print(f"⚠️ Could not read {clip}: {e}")
                continue
            result = session.take_spoken_turn(data)
            if result.user_text:
                print(f"You (transcribed): {result.user_text}")
        else:
            result = session.take_turn(line)

        if result.reply:
            print(f"Customer: {result.reply}")
        if result.audio:
            turn += 1
            path = save_reply_audio(result.audio, audio_dir, turn)
            logger.info(f"Saved reply audio to {path}")
            if args.play:
                play(AudioSegment.from_wav(str(path)))
        if result.error:
            print(f"❌ {result.error}")


if __name__ == "__main__":
    raise SystemExit(main())
