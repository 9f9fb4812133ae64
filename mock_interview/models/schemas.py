"""
Pydantic models shared by the flows, the state machine and the HTTP API.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from mock_interview.utils.config import config


# ================================================================
# Enums
# ================================================================

class InterviewMode(str, Enum):
    CHAT = "chat"
    VOICE = "voice"


class Language(str, Enum):
    VI = "vi"
    EN = "en"

    @property
    def display_name(self) -> str:
        """Language name used inside prompts."""
        return {"vi": "Vietnamese", "en": "English"}[self.value]

    @property
    def speech_code(self) -> str:
        """Language code understood by gTTS and Whisper."""
        return self.value

    @classmethod
    def default(cls) -> "Language":
        """Language configured by DEFAULT_LANGUAGE, Vietnamese if unset or unknown."""
        try:
            return cls(config.interview.default_language.strip().lower())
        except ValueError:
            return cls.VI


class MessageRole(str, Enum):
    USER = "user"
    AI = "ai"


class InterviewPhase(str, Enum):
    GENERATING_QUESTIONS = "generating_questions"
    IN_PROGRESS = "in_progress"
    AWAITING_FINISH = "awaiting_finish"
    FINISHING = "finishing"
    FINISHED = "finished"
    FAILED = "failed"


class VoiceState(str, Enum):
    IDLE = "idle"
    AI_SPEAKING = "ai_speaking"
    RECORDING = "recording"
    TRANSCRIBING = "transcribing"
    REVIEWING = "reviewing"


# ================================================================
# Conversation
# ================================================================

class Message(BaseModel):
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)


# ================================================================
# Flow inputs / outputs
# ================================================================

class QuestionGenerationInput(BaseModel):
    job_role: str = Field(min_length=1)
    language: str = "Vietnamese"
    cv_text: Optional[str] = None
    question_count: int = Field(default=5, ge=1, le=20)


class QuestionGenerationOutput(BaseModel):
    questions: List[str] = Field(description="The interview questions, in the order they should be asked.")

    @field_validator("questions")
    @classmethod
    def drop_blank_questions(cls, value: List[str]) -> List[str]:
        return [q.strip() for q in value if q and q.strip()]


class ConversationalResponseInput(BaseModel):
    job_role: str
    previous_question: str
    user_answer: str
    next_question: str
    language: str = "Vietnamese"


class ConversationalResponseOutput(BaseModel):
    ai_response: str = Field(
        description="A natural, conversational response that acknowledges the user answer and asks the next question."
    )


class CompetencyRating(BaseModel):
    competency: str
    rating: float = Field(ge=1, le=10)
    justification: str = ""


class SuggestedAnswer(BaseModel):
    question: str
    user_answer: str = ""
    answer_analysis: str = ""
    suggested_answer: str = ""


class InterviewSummaryInput(BaseModel):
    interview_transcript: str
    job_role: str
    cv_text: Optional[str] = None
    language: str = "Vietnamese"


class InterviewSummaryOutput(BaseModel):
    summary: str = Field(
        description='Structured with a "Strengths:" section and an "Areas for improvement:" section, with bullet points.'
    )
    competency_ratings: List[CompetencyRating] = []
    suggested_answers: List[SuggestedAnswer] = []


class CvExperience(BaseModel):
    title: str = ""
    company: str = ""
    years: str = ""
    description: str = ""


class CvEducation(BaseModel):
    degree: str = ""
    university: str = ""
    years: str = ""


class CvDataExtractionInput(BaseModel):
    cv_text: str = Field(min_length=1)


class CvData(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    skills: List[str] = []
    experience: List[CvExperience] = []
    education: List[CvEducation] = []


class TranscriptionResult(BaseModel):
    transcript: str


class SpeechAudio(BaseModel):
    media: str = Field(description="Audio as a data URI, e.g. data:audio/mpeg;base64,...")


# ================================================================
# API requests
# ================================================================

class StartInterviewRequest(BaseModel):
    job_role: str
    interview_mode: InterviewMode = InterviewMode.VOICE
    cv_text: Optional[str] = None
    language: Language = Field(default_factory=Language.default)

    @field_validator("job_role")
    @classmethod
    def strip_job_role(cls, v: str) -> str:
        return v.strip()


class AnswerRequest(BaseModel):
    answer: str


class AudioAnswerRequest(BaseModel):
    audio_data_uri: str = Field(min_length=5)
