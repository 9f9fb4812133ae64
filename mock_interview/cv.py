"""
CV upload handling: file validation and plain-text extraction.
The structured parse itself is done by the extractCvDataFlow.
"""
import io
import json
import logging
import os
from typing import Optional

import docx2txt
import pdfplumber

from mock_interview.models.schemas import CvData
from mock_interview.utils.config import config

logger = logging.getLogger(__name__)

PDF_TYPES = {"application/pdf"}
DOCX_TYPES = {"application/vnd.openxmlformats-officedocument.wordprocessingml.document"}
TEXT_TYPES = {"text/plain"}


class CvError(ValueError):
    """Raised for CV files that cannot be accepted or read."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


def detect_kind(filename: Optional[str], content_type: Optional[str]) -> str:
    """Classify an upload as 'pdf', 'docx' or 'txt'."""
    ext = os.path.splitext(filename or "")[1].lower()
    ctype = (content_type or "").split(";")[0].strip().lower()

    if ext == ".pdf" or ctype in PDF_TYPES:
        return "pdf"
    if ext == ".docx" or ctype in DOCX_TYPES:
        return "docx"
    if ext == ".txt" or ctype in TEXT_TYPES:
        return "txt"
    raise CvError("unsupported_file", f"Unsupported CV file type: {filename or ctype or 'unknown'}")


def extract_text_from_pdf_bytes(data: bytes) -> str:
    text_parts = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            txt = page.extract_text() or ""
            if txt:
                text_parts.append(txt)
    return "\n".join(text_parts)


def extract_text_from_docx_bytes(data: bytes) -> str:
    return docx2txt.process(io.BytesIO(data)) or ""


def extract_cv_text(data: bytes, filename: Optional[str] = None, content_type: Optional[str] = None) -> str:
    """
    Validate an uploaded CV and return its text.

    Raises:
        CvError: for oversized, unsupported, unreadable or empty files
    """
    if len(data) > config.interview.max_cv_bytes:
        raise CvError("max_file_size", f"CV is {len(data)} bytes, limit is {config.interview.max_cv_bytes}")

    kind = detect_kind(filename, content_type)

    try:
        if kind == "pdf":
            text = extract_text_from_pdf_bytes(data)
        elif kind == "docx":
            text = extract_text_from_docx_bytes(data)
        else:
            text = data.decode("utf-8", errors="replace")
    except Exception as e:
        logger.warning(f"Could not read {kind} CV {filename!r}: {e}")
        raise CvError("empty_cv", f"Could not read CV: {e}") from e

    text = text.strip()
    if not text:
        raise CvError("empty_cv", "CV contains no extractable text")

    logger.info(f"Extracted {len(text)} characters from {kind} CV")
    return text


def cv_data_to_text(cv_data: CvData) -> str:
    """Serialize parsed CV data the way it is handed to the interview prompts."""
    return json.dumps(cv_data.model_dump(), indent=2, ensure_ascii=False)
