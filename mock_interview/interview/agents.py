"""
Agent orchestration for the interview coach.
Coordinates the flows: Interviewer, Conversation, Summary, CV and Speech.
"""
import logging
from typing import List, Optional, Tuple

from mock_interview.llm.client import llm_client
from mock_interview.llm.flows import FlowError, get_flow
from mock_interview.llm.prompts import fallback_questions
from mock_interview.interview.scoring import SummaryScorer
from mock_interview.models.schemas import (
    CvData,
    InterviewSummaryOutput,
    Language,
    SpeechAudio,
    TranscriptionResult,
)
from mock_interview.speech import SpeechError, speech_service
from mock_interview.utils.cleaning import ResponseCleaner
from mock_interview.utils.config import config

# Set up logging
logger = logging.getLogger(__name__)


class InterviewerAgent:
    """
    Generates the interview's question list.
    """

    def __init__(self, llm=None):
        self.llm = llm or llm_client

    def generate_questions(
        self,
        job_role: str,
        language: Language,
        cv_text: Optional[str] = None,
        question_count: Optional[int] = None,
        allow_fallback: Optional[bool] = None,
    ) -> List[str]:
        """
        Generate the questions for an interview.

        Args:
            job_role: The job role being interviewed for
            language: Interview language
            cv_text: Parsed CV, used to personalize questions
            question_count: Number of questions (defaults to config)
            allow_fallback: Use static questions if generation fails

        Returns:
            Non-empty list of questions

        Raises:
            FlowError: if generation fails and fallback is disabled
        """
        count = question_count or config.interview.question_count
        fallback = config.interview.fallback_questions if allow_fallback is None else allow_fallback
        logger.info(f"Generating {count} questions for {job_role} ({language.value})")

        try:
            output = get_flow("generateInterviewQuestionsFlow").run({
                "job_role": job_role,
                "language": language.display_name,
                "cv_text": cv_text,
                "question_count": count,
            }, llm=self.llm)
            questions = [ResponseCleaner.clean_message(q) for q in output.questions]
            questions = [q for q in questions if q][:count]
            if not questions:
                raise FlowError("generateInterviewQuestionsFlow", "no questions generated")
            return questions
        except FlowError:
            if not fallback:
                raise
            logger.warning(f"Question generation failed for {job_role}, using fallback questions")
            return fallback_questions(language.value, job_role, count)


class ConversationAgent:
    """
    Writes the interviewer's transition from one question to the next.
    """

    def __init__(self, llm=None):
        self.llm = llm or llm_client

    def respond(
        self,
        job_role: str,
        previous_question: str,
        user_answer: str,
        next_question: str,
        language: Language,
    ) -> str:
        """
        Acknowledge the answer and ask the next question.

        Raises:
            FlowError: callers fall back to asking next_question verbatim
        """
        output = get_flow("generateConversationalResponseFlow").run({
            "job_role": job_role,
            "previous_question": previous_question,
            "user_answer": user_answer,
            "next_question": next_question,
            "language": language.display_name,
        }, llm=self.llm)

        response = ResponseCleaner.clean_message(output.ai_response)
        if not response:
            raise FlowError("generateConversationalResponseFlow", "empty response")
        return response


class SummaryAgent:
    """
    Produces the end-of-interview feedback.
    """

    def __init__(self, llm=None):
        self.llm = llm or llm_client

    def summarize(
        self,
        interview_transcript: str,
        job_role: str,
        language: Language,
        cv_text: Optional[str] = None,
    ) -> InterviewSummaryOutput:
        logger.info(f"Summarizing interview for {job_role} ({len(interview_transcript)} chars)")
        output = get_flow("generateInterviewSummaryFlow").run({
            "interview_transcript": interview_transcript,
            "job_role": job_role,
            "cv_text": cv_text,
            "language": language.display_name,
        }, llm=self.llm)
        if not output.summary.strip() and not output.competency_ratings:
            raise FlowError("generateInterviewSummaryFlow", "empty summary")
        return output


class CvAgent:
    """
    Parses CV text into structured data.
    """

    def __init__(self, llm=None):
        self.llm = llm or llm_client

    def extract(self, cv_text: str) -> CvData:
        return get_flow("extractCvDataFlow").run({"cv_text": cv_text}, llm=self.llm)


class SpeechAgent:
    """
    Voices interviewer messages and transcribes recorded answers.
    """

    def __init__(self, speech=None):
        self.speech = speech or speech_service

    def speak(self, text: str, language: Language) -> Optional[SpeechAudio]:
        """Synthesize a message; returns None when audio is unavailable."""
        try:
            return self.speech.text_to_speech(text, language.speech_code)
        except SpeechError as e:
            logger.warning(f"TTS unavailable: {e}")
            return None

    def transcribe(self, audio_data_uri: str, language: Language) -> TranscriptionResult:
        return self.speech.transcribe_audio(audio_data_uri, language.speech_code)


class AgentController:
    """
    Orchestrates all agents.
    """

    def __init__(self, llm=None, speech=None):
        self.interviewer = InterviewerAgent(llm)
        self.conversation = ConversationAgent(llm)
        self.summarizer = SummaryAgent(llm)
        self.cv = CvAgent(llm)
        self.speech = SpeechAgent(speech)

    def generate_questions(self, job_role: str, language: Language, cv_text: Optional[str] = None) -> List[str]:
        return self.interviewer.generate_questions(job_role, language, cv_text)

    def next_message(
        self,
        job_role: str,
        previous_question: str,
        user_answer: str,
        next_question: str,
        language: Language,
    ) -> Tuple[str, bool]:
        """
        Interviewer message introducing the next question.

        Returns:
            Tuple of (message, used_fallback)
        """
        try:
            return self.conversation.respond(
                job_role, previous_question, user_answer, next_question, language
            ), False
        except FlowError as e:
            logger.warning(f"Conversational response failed, asking next question directly: {e}")
            return next_question, True

    def summarize(self, transcript: str, job_role: str, language: Language, cv_text: Optional[str] = None):
        """Summary plus the derived report shown on the summary page."""
        summary = self.summarizer.summarize(transcript, job_role, language, cv_text)
        return summary, SummaryScorer.build_report(summary)

    def extract_cv(self, cv_text: str) -> CvData:
        return self.cv.extract(cv_text)

    def speak(self, text: str, language: Language) -> Optional[SpeechAudio]:
        return self.speech.speak(text, language)

    def transcribe(self, audio_data_uri: str, language: Language) -> TranscriptionResult:
        return self.speech.transcribe(audio_data_uri, language)


# Global controller instance
agent_controller = AgentController()
