import base64

import pytest

from mock_interview.models.schemas import Language
from mock_interview.utils.cleaning import ResponseCleaner
from mock_interview.utils.datauri import parse_data_uri, to_data_uri
from mock_interview.utils.i18n import JOB_ROLE_KEYS, job_roles, t


class TestDataUri:
    def test_parse_audio(self):
        payload = base64.b64encode(b"webm-bytes").decode()
        mime, data = parse_data_uri(f"data:audio/webm;codecs=opus;base64,{payload}")
        assert mime == "audio/webm"
        assert data == b"webm-bytes"

    def test_missing_padding_repaired(self):
        payload = base64.b64encode(b"abcd1").decode().rstrip("=")
        assert parse_data_uri(f"data:audio/wav;base64,{payload}")[1] == b"abcd1"

    def test_to_data_uri(self):
        assert to_data_uri("audio/mpeg", b"ID3") == "data:audio/mpeg;base64,SUQz"

    @pytest.mark.parametrize("uri", [
        "",
        "http://example.com/a.mp3",
        "data:audio/wav,plain-text",
        "data:audio/wav;base64,@@@",
    ])
    def test_invalid(self, uri):
        with pytest.raises(ValueError):
            parse_data_uri(uri)


class TestResponseCleaner:
    def test_strip_reasoning(self):
        assert ResponseCleaner.strip_reasoning("<think>hmm</think>Answer") == "Answer"
        assert ResponseCleaner.strip_reasoning("leaked reasoning</think>Answer") == "Answer"

    def test_parse_fenced_json(self):
        text = 'Sure!\n```json\n{"questions": ["A?", "B?"], "meta": {"n": 2}}\n```'
        parsed, ok = ResponseCleaner.parse_json(text)
        assert ok
        assert parsed == {"questions": ["A?", "B?"], "meta": {"n": 2}}

    def test_parse_trailing_comma(self):
        parsed, ok = ResponseCleaner.parse_json('{"ai_response": "Hi",}')
        assert ok
        assert parsed == {"ai_response": "Hi"}

    def test_parse_garbage(self):
        assert ResponseCleaner.parse_json("no json here") == ({}, True)
        assert ResponseCleaner.parse_json('{"a": ') == (None, False)

    def test_clean_spoken_text(self):
        text = "# Heading\n**Great** answer.\n\nNext _question_?"
        assert ResponseCleaner.clean_spoken_text(text) == "Great answer. Next question?"

    def test_clean_message(self):
        assert ResponseCleaner.clean_message('"Thanks.   Next question?"') == "Thanks. Next question?"


class TestI18n:
    def test_lookup(self):
        assert t("en", "error_title") == "Error"
        assert t(Language.VI, "error_title") == "Lỗi"

    def test_fallbacks(self):
        assert t("fr", "error_title") == "Lỗi"
        assert t("en", "no_such_key") == "no_such_key"

    def test_job_roles(self):
        roles = job_roles("vi")
        assert len(roles) == len(JOB_ROLE_KEYS)
        assert roles[0] == {"value": "Software Engineer", "label": "Kỹ sư phần mềm"}
