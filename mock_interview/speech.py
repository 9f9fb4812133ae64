"""
Speech services: Whisper transcription and gTTS synthesis.
Audio travels to and from the browser as data URIs.
"""
import io
import logging
import mimetypes
import os
import tempfile
import threading
from typing import Optional

from gtts import gTTS

from mock_interview.models.schemas import SpeechAudio, TranscriptionResult
from mock_interview.utils.cleaning import ResponseCleaner
from mock_interview.utils.config import config
from mock_interview.utils.datauri import parse_data_uri, to_data_uri

logger = logging.getLogger(__name__)


class SpeechError(Exception):
    """Raised when audio cannot be transcribed or synthesized."""


class InvalidAudio(SpeechError):
    """Raised when the uploaded audio cannot be decoded."""


# Lazy loading of Whisper model to avoid startup delay
_whisper_model = None
_whisper_lock = threading.Lock()


def get_whisper_model():
    """Lazy load the Whisper model."""
    global _whisper_model
    with _whisper_lock:
        if _whisper_model is None:
            from faster_whisper import WhisperModel
            logger.info(f"Loading Whisper model {config.whisper.model_path} on {config.whisper.device}")
            _whisper_model = WhisperModel(
                config.whisper.model_path,
                device=config.whisper.device,
                compute_type=config.whisper.compute_type
            )
    return _whisper_model


def _suffix_for(mime_type: str) -> str:
    base = mime_type.split(";")[0].strip().lower()
    if base in ("audio/webm", "video/webm"):
        return ".webm"
    return mimetypes.guess_extension(base) or ".audio"


class SpeechService:
    """Transcribes recorded answers and voices interviewer messages."""

    def transcribe_audio(self, audio_data_uri: str, language: Optional[str] = None) -> TranscriptionResult:
        """
        Transcribe a recorded answer.

        Args:
            audio_data_uri: data:audio/...;base64,... from the browser recorder
            language: Optional language hint ("vi", "en")

        Raises:
            SpeechError: on undecodable input or transcription failure
        """
        try:
            mime_type, audio = parse_data_uri(audio_data_uri)
        except ValueError as e:
            raise InvalidAudio(f"Invalid audio data: {e}") from e

        if not (mime_type.startswith("audio/") or mime_type.startswith("video/")):
            raise InvalidAudio(f"Expected audio data, got {mime_type}")
        if not audio:
            raise InvalidAudio("Audio recording is empty")

        with tempfile.NamedTemporaryFile(delete=False, suffix=_suffix_for(mime_type)) as tmp:
            tmp.write(audio)
            audio_path = tmp.name

        try:
            whisper = get_whisper_model()
            segments, _ = whisper.transcribe(audio_path, language=language)
            transcript = " ".join(s.text.strip() for s in segments).strip()
        except Exception as e:
            logger.error(f"Transcription failed: {e}")
            raise SpeechError(f"Transcription failed: {e}") from e
        finally:
            try:
                os.unlink(audio_path)
            except OSError:
                logger.warning(f"Could not remove temp audio file {audio_path}")

        logger.info(f"Transcribed {len(audio)} bytes into {len(transcript.split())} words")
        return TranscriptionResult(transcript=transcript)

    def text_to_speech(self, text: str, language: str = "vi") -> SpeechAudio:
        """
        Synthesize an interviewer message as an MP3 data URI.

        Raises:
            SpeechError: if there is nothing to say or synthesis fails
        """
        spoken = ResponseCleaner.clean_spoken_text(text)
        if not spoken:
            raise SpeechError("Nothing to synthesize")

        try:
            tts = gTTS(text=spoken, lang=language, tld=config.speech.tld, slow=config.speech.slow)
            buffer = io.BytesIO()
            tts.write_to_fp(buffer)
        except Exception as e:
            logger.error(f"TTS failed: {e}")
            raise SpeechError(f"Speech synthesis failed: {e}") from e

        return SpeechAudio(media=to_data_uri("audio/mpeg", buffer.getvalue()))


# Global speech service
speech_service = SpeechService()
