# Interview module
from .phases import InterviewPhases, InterviewStateError, PHASE_ORDER
from .state import AnswerOutcome, InterviewStateMachine
from .scoring import SummaryScorer
from .sessions import SessionNotFound, SessionStore, session_store
