"""
Shared fixtures: a scripted LLM and speech backend so no model server,
Whisper weights or network access are needed.
"""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from mock_interview import main
from mock_interview.interview import agents
from mock_interview.interview.sessions import SessionStore
from mock_interview.models.schemas import SpeechAudio, TranscriptionResult
from mock_interview.speech import InvalidAudio, SpeechError
from mock_interview.utils.config import InterviewConfig, config


QUESTIONS = [
    "Tell me about yourself.",
    "Describe a difficult bug you fixed.",
    "Why do you want this role?",
]

SUMMARY = {
    "summary": (
        "Strengths:\n"
        "- Clear communication\n"
        "- Solid debugging process\n"
        "Areas for improvement:\n"
        "- Give more concrete metrics"
    ),
    "competencyRatings": [
        {"competency": "Communication", "rating": 8, "justification": "Clear answers"},
        {"competency": "Problem Solving", "rating": 6, "justification": "Reasonable approach"},
    ],
    "suggested_answers": [
        {
            "question": "Tell me about yourself.",
            "user_answer": "I am a developer.",
            "answer_analysis": "Too short",
            "suggested_answer": "I am a backend developer with five years of experience...",
        }
    ],
}

CV = {
    "name": "Nguyen Van A",
    "email": "a@example.com",
    "phone": "0900000000",
    "skills": ["Python", "FastAPI"],
    "experience": [{"title": "Developer", "company": "Acme", "years": "2020-2024", "description": "APIs"}],
    "education": [{"degree": "BSc Computer Science", "university": "HUST", "years": "2016-2020"}],
}


def use_default_language(monkeypatch, value):
    """Rebuild the interview settings as if DEFAULT_LANGUAGE were set."""
    monkeypatch.setenv("DEFAULT_LANGUAGE", value)
    monkeypatch.setattr(config, "interview", InterviewConfig())


class FakeLLM:
    """Answers generate_json by looking at the requested output schema."""

    def __init__(self):
        self.responses = {
            "QuestionGenerationOutput": {"questions": list(QUESTIONS)},
            "ConversationalResponseOutput": {"ai_response": "Thanks for sharing. Next question."},
            "InterviewSummaryOutput": SUMMARY,
            "CvData": CV,
        }
        self.failing = set()
        self.calls = []

    def generate_json(self, prompt, max_tokens=400, temperature=0.3, json_schema=None):
        title = (json_schema or {}).get("title")
        self.calls.append((title, prompt))
        if title in self.failing:
            return None, False
        return self.responses.get(title), title in self.responses


class FakeSpeech:
    """Stands in for SpeechService."""

    def __init__(self):
        self.transcript = "I have five years of Python experience."
        self.tts_fails = False
        self.stt_error = None
        self.spoken = []

    def text_to_speech(self, text, language="vi"):
        if self.tts_fails:
            raise SpeechError("tts offline")
        self.spoken.append((text, language))
        return SpeechAudio(media="data:audio/mpeg;base64,SUQz")

    def transcribe_audio(self, audio_data_uri, language=None):
        if self.stt_error == "invalid":
            raise InvalidAudio("bad audio")
        if self.stt_error:
            raise SpeechError("whisper crashed")
        return TranscriptionResult(transcript=self.transcript)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 9, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def fake_speech():
    return FakeSpeech()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def controller(fake_llm, fake_speech):
    return agents.AgentController(llm=fake_llm, speech=fake_speech)


@pytest.fixture
def store(monkeypatch):
    store = SessionStore(ttl_minutes=0)
    monkeypatch.setattr(main, "session_store", store)
    return store


@pytest.fixture
def client(monkeypatch, controller, store):
    monkeypatch.setattr(agents, "agent_controller", controller)
    return TestClient(main.app)
