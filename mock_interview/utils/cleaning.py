"""
Response cleaning utilities for LLM outputs.
Strips reasoning blocks and code fences so flow outputs parse as JSON,
and tidies text that is read aloud or shown to the candidate.
"""
import re
import json
from typing import Any, Optional, Tuple


class ResponseCleaner:
    """
    Cleans raw LLM completions before they are parsed or displayed.
    """

    THINK_BLOCK = re.compile(r'<think>.*?</think>', flags=re.DOTALL | re.IGNORECASE)
    DANGLING_THINK = re.compile(r'^.*?</think>', flags=re.DOTALL | re.IGNORECASE)
    CODE_FENCE = re.compile(r'```(?:json)?', flags=re.IGNORECASE)

    @classmethod
    def strip_reasoning(cls, text: str) -> str:
        """Remove <think> blocks, including an unterminated leading one."""
        if not text:
            return ""

        cleaned = cls.THINK_BLOCK.sub('', text)
        # Some models drop the opening tag and only emit the closing one
        if re.search(r'</think>', cleaned, flags=re.IGNORECASE):
            cleaned = cls.DANGLING_THINK.sub('', cleaned)
        cleaned = re.sub(r'<think>.*$', '', cleaned, flags=re.DOTALL | re.IGNORECASE)
        return cleaned.strip()

    @classmethod
    def clean_json_response(cls, text: str) -> str:
        """Clean response and extract JSON content."""
        cleaned = cls.CODE_FENCE.sub('', cls.strip_reasoning(text))

        start = cleaned.find('{')
        if start == -1:
            return "{}"

        # Prefer a real decode so arbitrarily nested objects survive
        try:
            _, end = json.JSONDecoder().raw_decode(cleaned[start:])
            return cleaned[start:start + end]
        except json.JSONDecodeError:
            pass

        json_match = re.search(r'\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}', cleaned[start:], re.DOTALL)
        if json_match:
            return json_match.group()

        # Unbalanced output, let the caller attempt repairs on the tail
        return cleaned[start:].strip()

    @classmethod
    def parse_json(cls, text: str) -> Tuple[Optional[Any], bool]:
        """
        Parse a JSON object out of an LLM completion.

        Returns:
            Tuple of (parsed_json, is_valid)
        """
        cleaned = cls.clean_json_response(text)

        try:
            return json.loads(cleaned), True
        except json.JSONDecodeError:
            # Try to fix common issues
            try:
                fixed = re.sub(r',\s*([}\]])', r'\1', cleaned)
                return json.loads(fixed), True
            except json.JSONDecodeError:
                return None, False

    @classmethod
    def clean_spoken_text(cls, text: str) -> str:
        """Drop markdown headers, emphasis markers and blank lines before speech synthesis."""
        lines = [line.strip() for line in (text or "").splitlines()]
        kept = [line for line in lines if line and not line.startswith('#')]
        spoken = ' '.join(kept)
        spoken = re.sub(r'[*_`]+', '', spoken)
        return re.sub(r'\s+', ' ', spoken).strip()

    @classmethod
    def clean_message(cls, text: str) -> str:
        """Normalize an AI message for display."""
        cleaned = cls.strip_reasoning(text)
        cleaned = cleaned.strip().strip('"').strip()
        return re.sub(r'[ \t]+', ' ', cleaned)
