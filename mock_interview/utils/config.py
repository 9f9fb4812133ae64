"""
Configuration settings for the mock interview coach.
All settings can be overridden via environment variables.
"""
import os
from typing import List
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class LLMConfig:
    """LLM server configuration."""
    base_url: str = field(default_factory=lambda: os.getenv("LLM_URL", "http://localhost:9000"))
    completion_endpoint: str = "/completion"
    timeout: int = field(default_factory=lambda: int(os.getenv("LLM_TIMEOUT", "60")))
    max_retries: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_RETRIES", "3")))

    # Default generation parameters
    default_temperature: float = 0.7
    default_top_p: float = 0.9
    default_repeat_penalty: float = 1.1

    @property
    def completion_url(self) -> str:
        return f"{self.base_url}{self.completion_endpoint}"


@dataclass
class WhisperConfig:
    """Whisper STT configuration."""
    model_path: str = field(default_factory=lambda: os.getenv("WHISPER_MODEL_PATH", "small"))
    device: str = field(default_factory=lambda: os.getenv("WHISPER_DEVICE", "cuda"))
    compute_type: str = field(default_factory=lambda: os.getenv("WHISPER_COMPUTE_TYPE", "float16"))


@dataclass
class SpeechConfig:
    """Text-to-speech configuration (gTTS)."""
    tld: str = field(default_factory=lambda: os.getenv("TTS_TLD", "com"))
    slow: bool = field(default_factory=lambda: _env_bool("TTS_SLOW", False))


@dataclass
class InterviewConfig:
    """Interview flow configuration."""
    question_count: int = field(default_factory=lambda: int(os.getenv("INTERVIEW_QUESTION_COUNT", "5")))
    voice_review_seconds: float = field(
        default_factory=lambda: float(os.getenv("VOICE_REVIEW_SECONDS", "5"))
    )
    max_cv_bytes: int = 5 * 1024 * 1024
    default_language: str = field(default_factory=lambda: os.getenv("DEFAULT_LANGUAGE", "vi"))
    session_ttl_minutes: int = field(default_factory=lambda: int(os.getenv("SESSION_TTL_MINUTES", "120")))
    # Ask static questions instead of failing when generation breaks
    fallback_questions: bool = field(default_factory=lambda: _env_bool("FALLBACK_QUESTIONS", False))

    # Competencies the summary is rated on
    competencies: List[str] = field(default_factory=lambda: [
        "Communication",
        "Problem Solving",
        "Technical Knowledge",
        "Role Fit",
    ])


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: int(os.getenv("PORT", "8000")))
    cors_origins: List[str] = field(
        default_factory=lambda: [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
    )


class Config:
    """Main configuration class combining all config sections."""

    def __init__(self):
        self.llm = LLMConfig()
        self.whisper = WhisperConfig()
        self.speech = SpeechConfig()
        self.interview = InterviewConfig()
        self.server = ServerConfig()


# Global config instance
config = Config()
