import json
from datetime import timedelta

import pytest
import requests

from mock_interview.cv import CvError, cv_data_to_text, detect_kind, extract_cv_text
from mock_interview.interview.sessions import SessionNotFound, SessionStore
from mock_interview.llm.client import LLMClient
from mock_interview.models.schemas import CvData, InterviewMode
from mock_interview.speech import InvalidAudio, SpeechError, SpeechService
from mock_interview.utils.config import config


class TestCv:
    def test_detect_kind(self):
        assert detect_kind("cv.PDF", None) == "pdf"
        assert detect_kind("cv", "application/vnd.openxmlformats-officedocument.wordprocessingml.document") == "docx"
        assert detect_kind("cv.txt", "text/plain; charset=utf-8") == "txt"

    def test_unsupported(self):
        with pytest.raises(CvError) as err:
            detect_kind("cv.png", "image/png")
        assert err.value.code == "unsupported_file"

    def test_text_cv(self):
        text = extract_cv_text("Nguyễn Văn A\nPython developer\n".encode("utf-8"), "cv.txt")
        assert text == "Nguyễn Văn A\nPython developer"

    def test_too_large(self):
        with pytest.raises(CvError) as err:
            extract_cv_text(b"x" * (config.interview.max_cv_bytes + 1), "cv.txt")
        assert err.value.code == "max_file_size"

    def test_empty(self):
        with pytest.raises(CvError) as err:
            extract_cv_text(b"   \n", "cv.txt")
        assert err.value.code == "empty_cv"

    def test_unreadable_pdf(self):
        with pytest.raises(CvError) as err:
            extract_cv_text(b"not really a pdf", "cv.pdf")
        assert err.value.code == "empty_cv"

    def test_cv_data_to_text(self):
        text = cv_data_to_text(CvData(name="Trần Thị B", skills=["SQL"]))
        assert "Trần Thị B" in text
        assert json.loads(text)["skills"] == ["SQL"]


class TestSessionStore:
    def test_create_get_delete(self):
        store = SessionStore(ttl_minutes=0)
        session = store.create(job_role="Product Manager", interview_mode=InterviewMode.CHAT)
        assert store.get(session.session_id) is session
        assert store.count() == 1
        assert store.delete(session.session_id)
        assert not store.delete(session.session_id)
        with pytest.raises(SessionNotFound):
            store.get(session.session_id)

    def test_idle_sessions_expire(self, clock):
        store = SessionStore(ttl_minutes=30, clock=clock)
        session = store.create(job_role="Product Manager", clock=clock)
        clock.advance(timedelta(minutes=20).total_seconds())
        assert store.get(session.session_id) is session

        clock.advance(timedelta(minutes=31).total_seconds())
        with pytest.raises(SessionNotFound):
            store.get(session.session_id)
        assert store.count() == 0


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.exceptions.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


class FakeHttp:
    def __init__(self, responses):
        self.responses = list(responses)
        self.payloads = []

    def post(self, url, json=None, timeout=None):
        self.payloads.append(json)
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class TestLLMClient:
    def test_generate_json_sends_schema(self):
        http = FakeHttp([FakeResponse({"content": '<think>plan</think>{"ai_response": "Hi"}'})])
        client = LLMClient(base_url="http://llm:9000", session=http)
        parsed, ok = client.generate_json("prompt", json_schema={"type": "object"})
        assert ok
        assert parsed == {"ai_response": "Hi"}
        assert http.payloads[0]["json_schema"] == {"type": "object"}
        assert http.payloads[0]["n_predict"] == 400

    def test_retries_then_succeeds(self, monkeypatch):
        monkeypatch.setattr("mock_interview.llm.client.time.sleep", lambda s: None)
        http = FakeHttp([
            requests.exceptions.ConnectionError("down"),
            FakeResponse({"content": "hello"}),
        ])
        response = LLMClient(session=http).generate("prompt")
        assert response.is_valid
        assert response.content == "hello"

    def test_failure_is_reported_not_raised(self, monkeypatch):
        monkeypatch.setattr("mock_interview.llm.client.time.sleep", lambda s: None)
        client = LLMClient(session=FakeHttp([FakeResponse({}, status=500)] * (config.llm.max_retries + 1)))
        assert client.generate_json("prompt") == (None, False)

    def test_output_without_json_rejected(self):
        http = FakeHttp([FakeResponse({"content": "no braces at all"})])
        assert LLMClient(session=http).generate_json("prompt") == (None, False)


class TestSpeechService:
    def test_rejects_non_data_uri(self):
        with pytest.raises(InvalidAudio):
            SpeechService().transcribe_audio("https://example.com/a.webm")

    def test_rejects_non_audio(self):
        with pytest.raises(InvalidAudio):
            SpeechService().transcribe_audio("data:image/png;base64,iVBORw0KGgo=")

    def test_rejects_empty_audio(self):
        with pytest.raises(InvalidAudio):
            SpeechService().transcribe_audio("data:audio/webm;base64,")

    def test_nothing_to_say(self):
        with pytest.raises(SpeechError):
            SpeechService().text_to_speech("## \n  ")
