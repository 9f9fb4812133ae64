"""
Interview phase definitions and transition rules.
"""
from typing import Dict, List, Set, Any

from mock_interview.models.schemas import InterviewPhase, VoiceState


class InterviewStateError(Exception):
    """Raised when an operation is not allowed in the current state."""


# Phase order for progression, with the failed (retryable) start last
PHASE_ORDER = [
    InterviewPhase.GENERATING_QUESTIONS,
    InterviewPhase.IN_PROGRESS,
    InterviewPhase.AWAITING_FINISH,
    InterviewPhase.FINISHING,
    InterviewPhase.FINISHED,
    InterviewPhase.FAILED,
]


class InterviewPhases:
    """
    Allowed moves between interview phases and between voice states.
    """

    PHASE_TRANSITIONS: Dict[InterviewPhase, Set[InterviewPhase]] = {
        InterviewPhase.GENERATING_QUESTIONS: {
            InterviewPhase.GENERATING_QUESTIONS,
            InterviewPhase.IN_PROGRESS,
            InterviewPhase.FAILED,
        },
        InterviewPhase.IN_PROGRESS: {InterviewPhase.AWAITING_FINISH},
        InterviewPhase.AWAITING_FINISH: {InterviewPhase.FINISHING},
        InterviewPhase.FINISHING: {InterviewPhase.FINISHED, InterviewPhase.AWAITING_FINISH},
        InterviewPhase.FINISHED: set(),
        InterviewPhase.FAILED: {InterviewPhase.GENERATING_QUESTIONS},
    }

    VOICE_TRANSITIONS: Dict[VoiceState, Set[VoiceState]] = {
        VoiceState.IDLE: {VoiceState.AI_SPEAKING, VoiceState.RECORDING},
        # Recording may interrupt the interviewer's audio
        VoiceState.AI_SPEAKING: {VoiceState.IDLE, VoiceState.RECORDING, VoiceState.AI_SPEAKING},
        VoiceState.RECORDING: {VoiceState.TRANSCRIBING, VoiceState.IDLE},
        VoiceState.TRANSCRIBING: {VoiceState.REVIEWING, VoiceState.IDLE},
        VoiceState.REVIEWING: {VoiceState.IDLE},
    }

    DESCRIPTIONS: Dict[InterviewPhase, str] = {
        InterviewPhase.GENERATING_QUESTIONS: "Preparing interview questions",
        InterviewPhase.IN_PROGRESS: "Interview in progress",
        InterviewPhase.AWAITING_FINISH: "All questions answered, ready for feedback",
        InterviewPhase.FINISHING: "Generating feedback",
        InterviewPhase.FINISHED: "Feedback ready",
        InterviewPhase.FAILED: "Interview could not be started",
    }

    @classmethod
    def can_transition(cls, current: InterviewPhase, target: InterviewPhase) -> bool:
        return target in cls.PHASE_TRANSITIONS.get(current, set())

    @classmethod
    def ensure_transition(cls, current: InterviewPhase, target: InterviewPhase) -> None:
        """Raise InterviewStateError for an illegal phase move."""
        if not cls.can_transition(current, target):
            raise InterviewStateError(
                f"Cannot move interview from '{current.value}' to '{target.value}'"
            )

    @classmethod
    def can_transition_voice(cls, current: VoiceState, target: VoiceState) -> bool:
        return target in cls.VOICE_TRANSITIONS.get(current, set())

    @classmethod
    def ensure_voice_transition(cls, current: VoiceState, target: VoiceState) -> None:
        """Raise InterviewStateError for an illegal voice state move."""
        if not cls.can_transition_voice(current, target):
            raise InterviewStateError(
                f"Cannot move voice state from '{current.value}' to '{target.value}'"
            )

    @classmethod
    def describe(cls, phase: InterviewPhase) -> str:
        return cls.DESCRIPTIONS.get(phase, phase.value)

    @classmethod
    def get_all_phases_info(cls) -> List[Dict[str, Any]]:
        """Get information about all phases."""
        return [
            {
                "phase": phase.value,
                "description": cls.describe(phase),
                "next": sorted(p.value for p in cls.PHASE_TRANSITIONS[phase]),
            }
            for phase in PHASE_ORDER
        ]
