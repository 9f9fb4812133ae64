"""
Mock Interview Coach - FastAPI Backend

Drives a mock interview for a chosen job role:
- Question list generated up front by an LLM flow
- Conversational transitions between questions
- Chat (typed) or voice (recorded, transcribed, reviewed) answers
- Spoken interviewer turns in voice mode
- Scored feedback summary at the end

Compatible with a llama.cpp-style /completion REST API.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mock_interview import __version__
from mock_interview.cv import CvError, cv_data_to_text, extract_cv_text
from mock_interview.interview import agents
from mock_interview.interview.phases import InterviewPhases, InterviewStateError
from mock_interview.interview.scoring import SummaryScorer
from mock_interview.interview.sessions import SessionNotFound, session_store
from mock_interview.interview.state import AnswerOutcome, InterviewStateMachine
from mock_interview.llm.client import llm_client
from mock_interview.llm.flows import FlowError, list_flows
from mock_interview.models.schemas import (
    AnswerRequest,
    AudioAnswerRequest,
    InterviewPhase,
    Language,
    Message,
    StartInterviewRequest,
)
from mock_interview.speech import InvalidAudio, SpeechError
from mock_interview.utils.config import config
from mock_interview.utils.i18n import job_roles, t

logger = logging.getLogger(__name__)

# ================================================================
# FastAPI App Initialization
# ================================================================

app = FastAPI(
    title="Mock Interview Coach API",
    description="AI mock interviews with conversational questions and scored feedback",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.server.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(InterviewStateError)
async def interview_state_error_handler(request: Request, exc: InterviewStateError):
    return JSONResponse(status_code=409, content={"detail": str(exc)})


# ================================================================
# Helpers
# ================================================================

def get_session(session_id: str) -> InterviewStateMachine:
    """Look up a session or fail with 404."""
    try:
        return session_store.get(session_id)
    except SessionNotFound:
        raise HTTPException(
            status_code=404,
            detail=f"Interview session '{session_id}' not found. Please start a new interview."
        )


def localized_error(language: Language, key: str, title_key: str = "error_title") -> Dict[str, str]:
    return {"title": t(language, title_key), "message": t(language, key)}


def dump_messages(messages: List[Message]) -> List[Dict[str, Any]]:
    return [m.model_dump(mode="json") for m in messages]


def speak_turn(session: InterviewStateMachine, message: Message) -> Dict[str, Any]:
    """
    Voice an interviewer message in voice mode.

    Returns:
        {"audio": data URI or None, "warning": localized error or None}
    """
    if not session.is_voice:
        return {"audio": None, "warning": None}

    audio = agents.agent_controller.speak(message.content, session.language)
    if audio is None:
        # Nothing will play, so the candidate may answer right away
        session.playback_ended()
        return {"audio": None, "warning": localized_error(session.language, "tts_error", "tts_error_title")}
    return {"audio": audio.media, "warning": None}


def complete_answer(session: InterviewStateMachine, outcome: AnswerOutcome, answer: str) -> Dict[str, Any]:
    """Produce the interviewer's reaction to an accepted answer."""
    if not outcome.accepted:
        raise HTTPException(
            status_code=409,
            detail="Answer ignored: the interviewer is still responding or the interview is finishing."
        )

    new_messages = [outcome.user_message] if outcome.user_message else []

    if outcome.interview_ended:
        logger.info(f"Session {session.session_id}: last question answered")
        return {
            "messages": dump_messages(new_messages),
            "audio": None,
            "warning": None,
            "interview_ended": True,
            "status": session.get_status(),
        }

    ai_text, used_fallback = agents.agent_controller.next_message(
        job_role=session.job_role,
        previous_question=outcome.previous_question,
        user_answer=answer,
        next_question=outcome.next_question,
        language=session.language,
    )
    ai_message = session.advance(ai_text)
    new_messages.append(ai_message)

    spoken = speak_turn(session, ai_message)
    warning = spoken["warning"]
    if used_fallback:
        warning = localized_error(session.language, "response_error_toast")

    return {
        "messages": dump_messages(new_messages),
        "audio": spoken["audio"],
        "warning": warning,
        "interview_ended": False,
        "status": session.get_status(),
    }


# ================================================================
# API Endpoints
# ================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "running",
        "version": __version__,
        "service": "Mock Interview Coach",
        "active_sessions": session_store.count(),
        "llm_url": config.llm.completion_url,
    }


@app.get("/job-roles")
async def get_job_roles(language: Optional[Language] = Query(None)):
    """Job roles offered on the start form."""
    language = language or Language.default()
    return {"language": language.value, "job_roles": job_roles(language.value)}


@app.post("/cv/extract")
def extract_cv(file: UploadFile = File(...), language: Optional[Language] = Query(None)):
    """
    Read an uploaded CV and parse it into structured data.

    Returns:
        cv_data (structured) and cv_text (the JSON text used by the interview prompts)
    """
    language = language or Language.default()
    # One byte past the limit is enough to reject an oversized file
    data = file.file.read(config.interview.max_cv_bytes + 1)

    try:
        text = extract_cv_text(data, file.filename, file.content_type)
    except CvError as e:
        status = {"max_file_size": 413, "unsupported_file": 415}.get(e.code, 422)
        logger.warning(f"Rejected CV {file.filename!r}: {e}")
        raise HTTPException(status_code=status, detail=localized_error(language, e.code))

    try:
        cv_data = agents.agent_controller.extract_cv(text)
    except FlowError as e:
        logger.error(f"CV extraction failed: {e}")
        raise HTTPException(status_code=502, detail=localized_error(language, "start_error"))

    return {"cv_data": cv_data.model_dump(), "cv_text": cv_data_to_text(cv_data)}


@app.post("/interviews")
def start_interview(request: StartInterviewRequest):
    """
    Start a new interview session.

    Generates the question list and asks the first question.
    """
    if not request.job_role:
        raise HTTPException(
            status_code=422,
            detail=localized_error(request.language, "job_role_required"),
        )

    session = session_store.create(
        job_role=request.job_role,
        interview_mode=request.interview_mode,
        language=request.language,
        cv_text=request.cv_text,
    )
    session.begin_question_generation()

    try:
        questions = agents.agent_controller.generate_questions(
            session.job_role, session.language, session.cv_text
        )
        first_question = session.questions_ready(questions)
    except (FlowError, InterviewStateError) as e:
        logger.error(f"Failed to generate questions for session {session.session_id}: {e}")
        if session.phase != InterviewPhase.FAILED:
            session.fail()
        session_store.delete(session.session_id)
        raise HTTPException(
            status_code=502,
            detail=localized_error(session.language, "question_generation_error_toast"),
        )

    spoken = speak_turn(session, first_question)

    return {
        "status": "Interview started",
        "session_id": session.session_id,
        "messages": dump_messages(session.messages),
        "audio": spoken["audio"],
        "warning": spoken["warning"],
        "interview": session.get_status(),
    }


@app.get("/interviews/{session_id}")
async def get_interview_status(session_id: str):
    """Current phase, voice state and full conversation."""
    return get_session(session_id).get_status()


@app.post("/interviews/{session_id}/answer")
def submit_answer(session_id: str, request: AnswerRequest):
    """Submit a typed answer to the current question."""
    session = get_session(session_id)
    if not request.answer.strip():
        raise HTTPException(status_code=422, detail="Answer must not be empty.")

    outcome = session.submit_answer(request.answer)
    return complete_answer(session, outcome, request.answer.strip())


@app.post("/interviews/{session_id}/playback-ended")
async def playback_ended(session_id: str):
    """The browser finished playing the interviewer's audio."""
    session = get_session(session_id)
    session.playback_ended()
    return session.get_status()


@app.post("/interviews/{session_id}/recording/start")
async def start_recording(session_id: str):
    """Begin recording an answer, interrupting the interviewer if needed."""
    session = get_session(session_id)
    interrupted = session.start_recording()
    return {"interrupted_playback": interrupted, "status": session.get_status()}


@app.post("/interviews/{session_id}/recording/stop")
async def stop_recording(session_id: str):
    """Recording finished; audio upload follows."""
    session = get_session(session_id)
    session.stop_recording()
    return session.get_status()


@app.post("/interviews/{session_id}/recording/cancel")
async def cancel_recording(session_id: str):
    """Microphone unavailable or recording abandoned."""
    session = get_session(session_id)
    session.cancel_recording()
    return session.get_status()


@app.post("/interviews/{session_id}/audio")
def submit_audio(session_id: str, request: AudioAnswerRequest):
    """
    Transcribe a recorded answer and open the review countdown.

    The answer is committed by /review/confirm (the client calls it when the
    countdown ends, or earlier) and can be thrown away by /review/discard
    while the countdown runs.
    """
    session = get_session(session_id)
    session.begin_transcription()

    try:
        result = agents.agent_controller.transcribe(request.audio_data_uri, session.language)
    except InvalidAudio as e:
        session.transcription_failed()
        logger.warning(f"Session {session_id}: invalid audio: {e}")
        raise HTTPException(
            status_code=422,
            detail=localized_error(session.language, "transcription_failed", "transcription_error_title"),
        )
    except SpeechError as e:
        session.transcription_failed()
        logger.error(f"Session {session_id}: transcription error: {e}")
        raise HTTPException(
            status_code=502,
            detail=localized_error(session.language, "transcription_failed", "transcription_error_title"),
        )

    if not session.transcription_complete(result.transcript):
        return {
            "transcript": "",
            "reviewing": False,
            "review_seconds_remaining": 0,
            "warning": localized_error(session.language, "transcription_unclear", "transcription_error_title"),
            "status": session.get_status(),
        }

    return {
        "transcript": session.pending_answer,
        "reviewing": True,
        "review_seconds_remaining": session.review_seconds_remaining(),
        "warning": None,
        "status": session.get_status(),
    }


@app.post("/interviews/{session_id}/review/discard")
async def discard_recorded_answer(session_id: str):
    """Throw away the transcribed answer so it can be recorded again."""
    session = get_session(session_id)
    session.discard_pending_answer()
    return session.get_status()


@app.post("/interviews/{session_id}/review/confirm")
def confirm_recorded_answer(session_id: str):
    """Commit the transcribed answer."""
    session = get_session(session_id)
    answer = session.pending_answer or ""
    outcome = session.confirm_pending_answer()
    return complete_answer(session, outcome, answer)


@app.post("/interviews/{session_id}/finish")
def finish_interview(session_id: str):
    """
    Generate the feedback summary once every question is answered.
    """
    session = get_session(session_id)
    transcript = session.begin_finish()

    try:
        summary, report = agents.agent_controller.summarize(
            transcript, session.job_role, session.language, session.cv_text
        )
    except FlowError as e:
        logger.error(f"Summary generation failed for session {session_id}: {e}")
        session.finish_failed()
        raise HTTPException(
            status_code=502,
            detail=localized_error(session.language, "summary_error_toast"),
        )

    session.finish(summary)
    return {"status": "Interview finished", "session_id": session_id, "summary": report}


@app.get("/interviews/{session_id}/summary")
async def get_interview_summary(session_id: str):
    """Feedback: strengths, improvements, competency chart and suggested answers."""
    session = get_session(session_id)
    if session.summary is None:
        raise HTTPException(
            status_code=409,
            detail=localized_error(session.language, "summary_not_ready"),
        )

    return {
        "session_id": session_id,
        "job_role": session.job_role,
        "language": session.language.value,
        **SummaryScorer.build_report(session.summary),
    }


@app.delete("/interviews/{session_id}")
async def reset_interview(session_id: str):
    """Start over: drop the session and its summary."""
    session_store.delete(session_id)
    return {"status": "Interview reset successfully"}


@app.get("/debug/flows")
async def debug_flows():
    """Registered flows and interview phases."""
    return {"flows": list_flows(), "phases": InterviewPhases.get_all_phases_info()}


@app.get("/debug/llm")
def debug_llm():
    """Check that the LLM server answers."""
    return {"llm_url": config.llm.completion_url, "healthy": llm_client.health_check()}


@app.get("/debug/conversation/{session_id}")
async def debug_conversation(session_id: str):
    """Question list and transcript for a session."""
    session = get_session(session_id)
    return {
        "session_id": session.session_id,
        "questions": session.questions,
        "current_question_index": session.current_question_index,
        "transcript": session.build_transcript(),
    }


# ================================================================
# Main Entry Point
# ================================================================

def run(host: Optional[str] = None, port: Optional[int] = None):
    """Serve the API with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=host or config.server.host, port=port or config.server.port)


if __name__ == "__main__":
    run()
