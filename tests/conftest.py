import os
from types import SimpleNamespace

import pytest

# config reads the environment at import time, so seed it before anything
# imports the app.
os.environ["OPENAI_API_KEY"] = "test-openai-key"
os.environ["DEEPGRAM_API_KEY"] = "test-deepgram-key"
os.environ["ELEVENLABS_API_KEY"] = "test-elevenlabs-key"
os.environ["SPEECH_PROVIDER"] = "deepgram"

import dialogue  # noqa: E402
import speech  # noqa: E402
from app import app as flask_app  # noqa: E402


class FakeCompletions:
    def __init__(self):
        self.calls = []
        self.reply = "This is ridiculous. I want my refund right now!"
        self.error = None

    def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.reply)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeOpenAI:
    def __init__(self):
        self.chat = SimpleNamespace(completions=FakeCompletions())

    @property
    def calls(self):
        return self.chat.completions.calls


class FakeResponse:
    """Just enough of requests.Response for the Deepgram calls."""

    def __init__(self, status_code=200, payload=None, content=b"", text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        self.content = content
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeDeepgram:
    """Stands in for requests.post and records every call."""

    def __init__(self):
        self.calls = []
        self.responses = {}

    def __call__(self, url, **kwargs):
        self.calls.append(dict(kwargs, url=url))
        endpoint = url.rsplit("/", 1)[-1]
        return self.responses[endpoint]


FAKE_WAV = b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 28


@pytest.fixture
def fake_openai(monkeypatch):
    fake = FakeOpenAI()
    monkeypatch.setattr(dialogue, "get_openai_client", lambda: fake)
    return fake


@pytest.fixture
def fake_deepgram(monkeypatch):
    fake = FakeDeepgram()
    fake.responses["listen"] = FakeResponse(payload={
        "results": {"channels": [{"alternatives": [{"transcript": "I need a refund.", "confidence": 0.98}]}]}
    })
    fake.responses["speak"] = FakeResponse(content=FAKE_WAV)
    monkeypatch.setattr(speech.requests, "post", fake)
    return fake


@pytest.fixture
def client():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as client:
        yield client
