"""
Interview state machine for managing the conversation flow.
Tracks the question list, the message history, answer/loading gates and,
in voice mode, recording/transcription/playback and the review countdown.
"""
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from mock_interview.interview.phases import InterviewPhases, InterviewStateError
from mock_interview.models.schemas import (
    InterviewMode,
    InterviewPhase,
    InterviewSummaryOutput,
    Language,
    Message,
    MessageRole,
    VoiceState,
)
from mock_interview.utils.config import config
from mock_interview.utils.i18n import t


@dataclass
class AnswerOutcome:
    """Result of submitting an answer."""
    accepted: bool
    interview_ended: bool = False
    previous_question: Optional[str] = None
    next_question: Optional[str] = None
    user_message: Optional[Message] = None


class InterviewStateMachine:
    """
    Manages the state of one interview session.
    """

    def __init__(
        self,
        job_role: str,
        interview_mode: InterviewMode = InterviewMode.VOICE,
        language: Language = Language.VI,
        cv_text: Optional[str] = None,
        session_id: Optional[str] = None,
        review_seconds: Optional[float] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize a new interview state machine.

        Args:
            job_role: The job role being interviewed for
            interview_mode: Chat (typed) or voice (recorded) answers
            language: Interview language
            cv_text: Extracted CV data as text, if the user uploaded one
            session_id: Optional existing session ID
            review_seconds: Length of the voice review countdown
            clock: Time source, replaceable in tests
        """
        self.session_id = session_id or f"session-{uuid.uuid4().hex[:12]}"
        self.job_role = job_role.strip()
        self.interview_mode = InterviewMode(interview_mode)
        self.language = Language(language)
        self.cv_text = cv_text or None
        self.review_seconds = (
            config.interview.voice_review_seconds if review_seconds is None else review_seconds
        )
        self._clock = clock
        self._lock = threading.RLock()

        # Progress
        self.phase = InterviewPhase.GENERATING_QUESTIONS
        self.questions: List[str] = []
        self.current_question_index = 0
        self.messages: List[Message] = []
        self.is_loading = False

        # Voice
        self.voice_state = VoiceState.IDLE
        self.pending_answer: Optional[str] = None
        self.review_deadline: Optional[datetime] = None

        # Result
        self.summary: Optional[InterviewSummaryOutput] = None

        # Timing
        self.start_time = self._clock()
        self.end_time: Optional[datetime] = None
        self.last_activity = self.start_time

    # ========================================
    # Helpers
    # ========================================

    @property
    def is_voice(self) -> bool:
        return self.interview_mode == InterviewMode.VOICE

    def touch(self):
        self.last_activity = self._clock()

    def _set_phase(self, target: InterviewPhase):
        InterviewPhases.ensure_transition(self.phase, target)
        self.phase = target

    def _set_voice(self, target: VoiceState):
        InterviewPhases.ensure_voice_transition(self.voice_state, target)
        self.voice_state = target

    def _append(self, role: MessageRole, content: str) -> Message:
        message = Message(role=role, content=content, timestamp=self._clock())
        self.messages.append(message)
        return message

    # ========================================
    # Question generation
    # ========================================

    def begin_question_generation(self) -> Message:
        """Show the waiting message while questions are generated."""
        with self._lock:
            self._set_phase(InterviewPhase.GENERATING_QUESTIONS)
            self.questions = []
            self.current_question_index = 0
            self.messages = []
            self.touch()
            return self._append(
                MessageRole.AI,
                f"{t(self.language, 'initial_loading')} {self.job_role}. {t(self.language, 'generating_questions')}",
            )

    def questions_ready(self, questions: List[str]) -> Message:
        """
        Install the generated questions and ask the first one.

        Raises:
            InterviewStateError: if no usable question was generated
        """
        with self._lock:
            cleaned = [q.strip() for q in questions or [] if q and q.strip()]
            if not cleaned:
                self.fail()
                raise InterviewStateError(t(self.language, "question_generation_error"))

            self._set_phase(InterviewPhase.IN_PROGRESS)
            self.questions = cleaned
            self.current_question_index = 0
            self.messages = []
            self._append(
                MessageRole.AI,
                f"{t(self.language, 'initial_loading')} {self.job_role}. {t(self.language, 'ready_to_start')}",
            )
            self.touch()
            return self.add_ai_message(cleaned[0])

    def fail(self):
        """Question generation failed; the interview cannot start."""
        with self._lock:
            self._set_phase(InterviewPhase.FAILED)
            self.end_time = self._clock()

    # ========================================
    # Conversation
    # ========================================

    @property
    def current_question(self) -> Optional[str]:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return bool(self.questions) and self.current_question_index >= len(self.questions) - 1

    def add_ai_message(self, content: str) -> Message:
        """Append an interviewer message; in voice mode it will be spoken."""
        with self._lock:
            message = self._append(MessageRole.AI, content)
            if self.is_voice and InterviewPhases.can_transition_voice(self.voice_state, VoiceState.AI_SPEAKING):
                self.voice_state = VoiceState.AI_SPEAKING
            return message

    def playback_ended(self):
        """The interviewer's audio finished (or could not be played)."""
        with self._lock:
            if self.voice_state == VoiceState.AI_SPEAKING:
                self._set_voice(VoiceState.IDLE)
            self.touch()

    def submit_answer(self, answer: str) -> AnswerOutcome:
        """
        Record the candidate's answer to the current question.

        Blank answers and answers sent while a response is loading or the
        summary is being generated are ignored. Answering the last question
        ends the interview; otherwise the state is marked loading until
        ``advance`` delivers the interviewer's next message.
        """
        with self._lock:
            text = (answer or "").strip()
            if not text or self.is_loading or self.phase == InterviewPhase.FINISHING:
                return AnswerOutcome(accepted=False)

            if self.phase != InterviewPhase.IN_PROGRESS:
                raise InterviewStateError(f"Cannot answer while interview is '{self.phase.value}'")
            if self.is_voice and self.voice_state not in (VoiceState.IDLE, VoiceState.AI_SPEAKING):
                raise InterviewStateError(f"Cannot answer while voice state is '{self.voice_state.value}'")

            if self.voice_state == VoiceState.AI_SPEAKING:
                self._set_voice(VoiceState.IDLE)

            user_message = self._append(MessageRole.USER, text)
            self.touch()

            if self.is_last_question:
                self._set_phase(InterviewPhase.AWAITING_FINISH)
                return AnswerOutcome(accepted=True, interview_ended=True, user_message=user_message)

            self.is_loading = True
            return AnswerOutcome(
                accepted=True,
                previous_question=self.questions[self.current_question_index],
                next_question=self.questions[self.current_question_index + 1],
                user_message=user_message,
            )

    def advance(self, ai_response: str) -> Message:
        """Ask the next question, wrapped in the interviewer's transition."""
        with self._lock:
            if not self.is_loading:
                raise InterviewStateError("No answer is waiting for a response")
            message = self.add_ai_message(ai_response)
            self.current_question_index += 1
            self.is_loading = False
            return message

    @property
    def interview_is_over(self) -> bool:
        return self.phase in (
            InterviewPhase.AWAITING_FINISH,
            InterviewPhase.FINISHING,
            InterviewPhase.FINISHED,
        )

    @property
    def chat_controls_disabled(self) -> bool:
        return self.is_loading or self.phase != InterviewPhase.IN_PROGRESS

    @property
    def voice_controls_disabled(self) -> bool:
        return self.chat_controls_disabled or self.voice_state in (
            VoiceState.TRANSCRIBING,
            VoiceState.REVIEWING,
        )

    def build_transcript(self) -> str:
        """Conversation as 'role: content' lines."""
        return "\n".join(f"{m.role.value}: {m.content}" for m in self.messages)

    # ========================================
    # Voice
    # ========================================

    def start_recording(self) -> bool:
        """
        Begin recording an answer.

        Returns:
            True if the interviewer's audio was interrupted
        """
        with self._lock:
            if not self.is_voice:
                raise InterviewStateError("Recording is only available in voice mode")
            if self.chat_controls_disabled:
                raise InterviewStateError("Recording is not available right now")
            interrupted = self.voice_state == VoiceState.AI_SPEAKING
            self._set_voice(VoiceState.RECORDING)
            self.touch()
            return interrupted

    def stop_recording(self):
        with self._lock:
            self._set_voice(VoiceState.TRANSCRIBING)
            self.touch()

    def cancel_recording(self):
        """Recording could not start or was abandoned."""
        with self._lock:
            if self.voice_state == VoiceState.RECORDING:
                self._set_voice(VoiceState.IDLE)

    def begin_transcription(self):
        """Move to transcribing from wherever the recording flow currently is."""
        with self._lock:
            if self.voice_state in (VoiceState.IDLE, VoiceState.AI_SPEAKING):
                self.start_recording()
            if self.voice_state == VoiceState.RECORDING:
                self.stop_recording()
            if self.voice_state != VoiceState.TRANSCRIBING:
                raise InterviewStateError(
                    f"Cannot transcribe while voice state is '{self.voice_state.value}'"
                )

    def transcription_complete(self, transcript: str) -> bool:
        """
        Hold the transcribed answer for review.

        Returns:
            False if the transcript was empty (nothing understood)
        """
        with self._lock:
            if self.voice_state != VoiceState.TRANSCRIBING:
                raise InterviewStateError("No transcription in progress")

            text = (transcript or "").strip()
            if not text:
                self._set_voice(VoiceState.IDLE)
                return False

            self._set_voice(VoiceState.REVIEWING)
            self.pending_answer = text
            self.review_deadline = self._clock() + timedelta(seconds=self.review_seconds)
            self.touch()
            return True

    def transcription_failed(self):
        with self._lock:
            if self.voice_state == VoiceState.TRANSCRIBING:
                self._set_voice(VoiceState.IDLE)

    def review_seconds_remaining(self) -> float:
        if self.voice_state != VoiceState.REVIEWING or self.review_deadline is None:
            return 0.0
        remaining = (self.review_deadline - self._clock()).total_seconds()
        return max(0.0, round(remaining, 2))

    @property
    def review_expired(self) -> bool:
        return self.voice_state == VoiceState.REVIEWING and self.review_seconds_remaining() <= 0

    def discard_pending_answer(self):
        """Re-record: throw away the transcribed answer while the countdown runs."""
        with self._lock:
            if self.voice_state != VoiceState.REVIEWING:
                raise InterviewStateError("There is no recorded answer to discard")
            if self.review_expired:
                raise InterviewStateError("The review window has closed")
            self._clear_pending()
            self.touch()

    def confirm_pending_answer(self) -> AnswerOutcome:
        """Commit the transcribed answer (early or when the countdown ends)."""
        with self._lock:
            if self.voice_state != VoiceState.REVIEWING or self.pending_answer is None:
                raise InterviewStateError("There is no recorded answer to confirm")
            answer = self.pending_answer
            self._clear_pending()
            return self.submit_answer(answer)

    def _clear_pending(self):
        self.pending_answer = None
        self.review_deadline = None
        self._set_voice(VoiceState.IDLE)

    # ========================================
    # Finishing
    # ========================================

    def begin_finish(self) -> str:
        """Start summary generation and return the transcript to summarize."""
        with self._lock:
            if self.phase != InterviewPhase.AWAITING_FINISH:
                raise InterviewStateError("The interview is not over yet")
            self._set_phase(InterviewPhase.FINISHING)
            self.touch()
            return self.build_transcript()

    def finish(self, summary: InterviewSummaryOutput):
        with self._lock:
            self._set_phase(InterviewPhase.FINISHED)
            self.summary = summary
            self.end_time = self._clock()

    def finish_failed(self):
        """Summary generation failed; let the user try again."""
        with self._lock:
            self._set_phase(InterviewPhase.AWAITING_FINISH)

    # ========================================
    # Serialization
    # ========================================

    def get_status(self) -> Dict[str, Any]:
        """Get current interview status."""
        with self._lock:
            return {
                "session_id": self.session_id,
                "job_role": self.job_role,
                "interview_mode": self.interview_mode.value,
                "language": self.language.value,
                "has_cv": self.cv_text is not None,
                "phase": self.phase.value,
                "phase_description": InterviewPhases.describe(self.phase),
                "question_count": len(self.questions),
                "current_question_index": self.current_question_index,
                "is_loading": self.is_loading,
                "interview_ended": self.interview_is_over,
                "chat_controls_disabled": self.chat_controls_disabled,
                "voice": {
                    "state": self.voice_state.value,
                    "controls_disabled": self.voice_controls_disabled,
                    "pending_answer": self.pending_answer,
                    "review_seconds_remaining": self.review_seconds_remaining(),
                } if self.is_voice else None,
                "messages": [m.model_dump(mode="json") for m in self.messages],
                "has_summary": self.summary is not None,
                "start_time": self.start_time.isoformat(),
                "end_time": self.end_time.isoformat() if self.end_time else None,
            }
