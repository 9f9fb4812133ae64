import pytest

from mock_interview.interview.phases import InterviewPhases, InterviewStateError
from mock_interview.interview.state import InterviewStateMachine
from mock_interview.models.schemas import (
    InterviewMode,
    InterviewPhase,
    InterviewSummaryOutput,
    Language,
    MessageRole,
    VoiceState,
)

QUESTIONS = ["Q1?", "Q2?", "Q3?"]


def make_session(mode=InterviewMode.CHAT, language=Language.EN, clock=None, questions=QUESTIONS):
    kwargs = {"clock": clock} if clock else {}
    session = InterviewStateMachine(
        "Software Engineer", interview_mode=mode, language=language, review_seconds=5, **kwargs
    )
    session.begin_question_generation()
    session.questions_ready(list(questions))
    return session


def answer(session, text, ai_response="Next."):
    outcome = session.submit_answer(text)
    if outcome.accepted and not outcome.interview_ended:
        session.advance(ai_response)
    return outcome


class TestQuestionGeneration:
    def test_loading_message_names_role(self):
        session = InterviewStateMachine("Data Scientist", language=Language.EN)
        message = session.begin_question_generation()
        assert session.phase == InterviewPhase.GENERATING_QUESTIONS
        assert "Data Scientist" in message.content
        assert "preparing a few questions" in message.content

    def test_questions_ready_greets_and_asks_first_question(self):
        session = make_session()
        assert session.phase == InterviewPhase.IN_PROGRESS
        assert [m.role for m in session.messages] == [MessageRole.AI, MessageRole.AI]
        assert "Let's begin." in session.messages[0].content
        assert session.messages[1].content == "Q1?"
        assert session.current_question == "Q1?"

    def test_empty_question_list_fails(self):
        session = InterviewStateMachine("Software Engineer")
        session.begin_question_generation()
        with pytest.raises(InterviewStateError):
            session.questions_ready(["  ", ""])
        assert session.phase == InterviewPhase.FAILED

    def test_failed_session_can_retry(self):
        session = InterviewStateMachine("Software Engineer")
        session.begin_question_generation()
        session.fail()
        session.begin_question_generation()
        assert session.phase == InterviewPhase.GENERATING_QUESTIONS


class TestChatAnswers:
    def test_answer_advances_to_next_question(self):
        session = make_session()
        outcome = session.submit_answer("  My answer  ")
        assert outcome.accepted
        assert outcome.previous_question == "Q1?"
        assert outcome.next_question == "Q2?"
        assert outcome.user_message.content == "My answer"
        assert session.is_loading
        assert session.chat_controls_disabled

        session.advance("Good. Q2?")
        assert session.current_question_index == 1
        assert not session.is_loading
        assert session.messages[-1].content == "Good. Q2?"

    def test_blank_answer_ignored(self):
        session = make_session()
        before = len(session.messages)
        assert not session.submit_answer("   ").accepted
        assert len(session.messages) == before

    def test_answer_while_loading_ignored(self):
        session = make_session()
        session.submit_answer("first")
        assert not session.submit_answer("second").accepted
        assert [m.content for m in session.messages if m.role == MessageRole.USER] == ["first"]

    def test_last_answer_ends_interview(self):
        session = make_session()
        answer(session, "a1")
        answer(session, "a2")
        assert session.is_last_question

        outcome = session.submit_answer("a3")
        assert outcome.accepted
        assert outcome.interview_ended
        assert session.phase == InterviewPhase.AWAITING_FINISH
        assert session.interview_is_over
        assert session.chat_controls_disabled
        assert session.messages[-1].content == "a3"

    def test_single_question_interview_can_be_answered(self):
        session = make_session(questions=["Only question?"])
        outcome = session.submit_answer("only answer")
        assert outcome.interview_ended

    def test_answer_after_end_rejected(self):
        session = make_session(questions=["Only?"])
        session.submit_answer("done")
        with pytest.raises(InterviewStateError):
            session.submit_answer("more")

    def test_advance_without_pending_answer(self):
        session = make_session()
        with pytest.raises(InterviewStateError):
            session.advance("hello")

    def test_transcript_lines(self):
        session = make_session()
        answer(session, "a1", "Thanks. Q2?")
        lines = session.build_transcript().split("\n")
        assert lines[1] == "ai: Q1?"
        assert lines[2] == "user: a1"
        assert lines[3] == "ai: Thanks. Q2?"


class TestVoice:
    def test_ai_message_is_spoken(self):
        session = make_session(mode=InterviewMode.VOICE)
        assert session.voice_state == VoiceState.AI_SPEAKING
        session.playback_ended()
        assert session.voice_state == VoiceState.IDLE

    def test_recording_interrupts_ai(self):
        session = make_session(mode=InterviewMode.VOICE)
        assert session.start_recording() is True
        assert session.voice_state == VoiceState.RECORDING

    def test_cancel_recording_returns_to_idle(self):
        session = make_session(mode=InterviewMode.VOICE)
        session.start_recording()
        session.cancel_recording()
        assert session.voice_state == VoiceState.IDLE
        assert session.start_recording() is False

    def test_cancel_recording_when_idle_is_noop(self):
        session = make_session(mode=InterviewMode.VOICE)
        session.playback_ended()
        session.cancel_recording()
        assert session.voice_state == VoiceState.IDLE
        assert [m.role for m in session.messages] == [MessageRole.AI, MessageRole.AI]

    def test_recording_not_available_in_chat_mode(self):
        session = make_session()
        with pytest.raises(InterviewStateError):
            session.start_recording()

    def test_review_then_confirm(self, clock):
        session = make_session(mode=InterviewMode.VOICE, clock=clock)
        session.playback_ended()
        session.start_recording()
        session.stop_recording()
        assert session.voice_controls_disabled

        assert session.transcription_complete(" spoken answer ")
        assert session.voice_state == VoiceState.REVIEWING
        assert session.pending_answer == "spoken answer"
        assert session.review_seconds_remaining() == 5

        clock.advance(2)
        assert session.review_seconds_remaining() == 3

        outcome = session.confirm_pending_answer()
        assert outcome.accepted
        assert outcome.user_message.content == "spoken answer"
        assert session.pending_answer is None

        session.advance("Thanks. Q2?")
        assert session.voice_state == VoiceState.AI_SPEAKING

    def test_discard_allowed_only_during_countdown(self, clock):
        session = make_session(mode=InterviewMode.VOICE, clock=clock)
        session.begin_transcription()
        session.transcription_complete("first try")
        session.discard_pending_answer()
        assert session.voice_state == VoiceState.IDLE
        assert session.pending_answer is None

        session.begin_transcription()
        session.transcription_complete("second try")
        clock.advance(6)
        assert session.review_expired
        with pytest.raises(InterviewStateError):
            session.discard_pending_answer()
        assert session.confirm_pending_answer().accepted

    def test_empty_transcript_returns_to_idle(self):
        session = make_session(mode=InterviewMode.VOICE)
        session.begin_transcription()
        assert session.transcription_complete("   ") is False
        assert session.voice_state == VoiceState.IDLE

    def test_transcription_failed_returns_to_idle(self):
        session = make_session(mode=InterviewMode.VOICE)
        session.begin_transcription()
        session.transcription_failed()
        assert session.voice_state == VoiceState.IDLE

    def test_cannot_type_answer_while_reviewing(self):
        session = make_session(mode=InterviewMode.VOICE)
        session.begin_transcription()
        session.transcription_complete("pending")
        with pytest.raises(InterviewStateError):
            session.submit_answer("typed")

    def test_last_question_answerable_by_voice(self):
        session = make_session(mode=InterviewMode.VOICE, questions=["Only?"])
        session.begin_transcription()
        session.transcription_complete("final answer")
        outcome = session.confirm_pending_answer()
        assert outcome.interview_ended
        with pytest.raises(InterviewStateError):
            session.start_recording()


class TestFinishing:
    def finished_answers(self):
        session = make_session(questions=["Only?"])
        session.submit_answer("done")
        return session

    def test_finish_before_end_rejected(self):
        with pytest.raises(InterviewStateError):
            make_session().begin_finish()

    def test_finish_flow(self):
        session = self.finished_answers()
        transcript = session.begin_finish()
        assert "user: done" in transcript
        assert session.phase == InterviewPhase.FINISHING
        assert not session.submit_answer("late").accepted

        session.finish(InterviewSummaryOutput(summary="Strengths: good"))
        assert session.phase == InterviewPhase.FINISHED
        assert session.get_status()["has_summary"]
        assert session.end_time is not None

    def test_failed_summary_can_retry(self):
        session = self.finished_answers()
        session.begin_finish()
        session.finish_failed()
        assert session.phase == InterviewPhase.AWAITING_FINISH
        session.begin_finish()


def test_status_shape():
    status = make_session(mode=InterviewMode.VOICE).get_status()
    assert status["phase"] == "in_progress"
    assert status["question_count"] == 3
    assert status["voice"]["state"] == "ai_speaking"
    assert status["messages"][1]["role"] == "ai"


def test_chat_status_has_no_voice_block():
    assert make_session().get_status()["voice"] is None


def test_phase_table():
    assert InterviewPhases.can_transition(InterviewPhase.IN_PROGRESS, InterviewPhase.AWAITING_FINISH)
    assert not InterviewPhases.can_transition(InterviewPhase.FINISHED, InterviewPhase.IN_PROGRESS)
    assert not InterviewPhases.can_transition_voice(VoiceState.REVIEWING, VoiceState.RECORDING)
    phases = [p["phase"] for p in InterviewPhases.get_all_phases_info()]
    assert phases[0] == "generating_questions"


def test_failed_phase_listed_with_retry():
    info = {p["phase"]: p["next"] for p in InterviewPhases.get_all_phases_info()}
    assert info["failed"] == ["generating_questions"]
    assert info["finished"] == []
