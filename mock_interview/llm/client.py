"""
LLM Client wrapper for llama.cpp REST API.
Handles communication with the LLM server, JSON extraction, and retries.
"""
import time
import requests
import logging
from typing import Dict, Any, Optional, Tuple
from dataclasses import dataclass

from mock_interview.utils.config import config
from mock_interview.utils.cleaning import ResponseCleaner

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Structured response from LLM."""
    content: str
    is_valid: bool
    raw_response: Dict[str, Any]
    tokens_used: int = 0


class LLMClient:
    """
    Client for interacting with llama.cpp /completion endpoint.
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        self.base_url = base_url or config.llm.base_url
        self.completion_url = f"{self.base_url}{config.llm.completion_endpoint}"
        self.timeout = config.llm.timeout
        self.max_retries = config.llm.max_retries
        self.http = session or requests.Session()
        logger.info(f"LLM Client initialized: {self.completion_url} (timeout={self.timeout}s)")

    def _make_request(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Make HTTP request to LLM server with retries."""
        last_error = None

        for attempt in range(self.max_retries + 1):
            try:
                response = self.http.post(
                    self.completion_url,
                    json=payload,
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()
            except requests.exceptions.Timeout as e:
                last_error = e
                logger.warning(f"LLM request timed out (attempt {attempt + 1}/{self.max_retries + 1})")
                if attempt < self.max_retries:
                    time.sleep(1 * (attempt + 1))
            except requests.exceptions.RequestException as e:
                last_error = e
                logger.warning(f"LLM request failed (attempt {attempt + 1}/{self.max_retries + 1}): {e}")
                if attempt < self.max_retries:
                    time.sleep(0.5 * (attempt + 1))

        raise ConnectionError(f"Failed to connect to LLM server after {self.max_retries + 1} attempts: {last_error}")

    def generate(
        self,
        prompt: str,
        max_tokens: int = 200,
        temperature: float = None,
        top_p: float = None,
        repeat_penalty: float = None,
        stop_sequences: Optional[list] = None,
        json_schema: Optional[Dict[str, Any]] = None,
    ) -> LLMResponse:
        """
        Generate completion from LLM.

        Args:
            prompt: The input prompt
            max_tokens: Maximum tokens to generate (n_predict)
            temperature: Sampling temperature (None uses default)
            top_p: Top-p sampling (None uses default)
            repeat_penalty: Repetition penalty (None uses default)
            stop_sequences: List of strings that stop generation
            json_schema: Optional JSON schema constraining the output

        Returns:
            LLMResponse with raw content
        """
        payload = {
            "prompt": prompt,
            "n_predict": max_tokens,
            "temperature": config.llm.default_temperature if temperature is None else temperature,
            "top_p": top_p or config.llm.default_top_p,
            "repeat_penalty": repeat_penalty or config.llm.default_repeat_penalty,
        }

        if stop_sequences:
            payload["stop"] = stop_sequences

        if json_schema:
            payload["json_schema"] = json_schema

        try:
            response = self._make_request(payload)
            content = response.get("content", "")
            tokens = response.get("tokens_predicted", 0)

            return LLMResponse(
                content=content,
                is_valid=bool(content.strip()),
                raw_response=response,
                tokens_used=tokens
            )
        except Exception as e:
            logger.error(f"LLM generation failed: {e}")
            return LLMResponse(
                content="",
                is_valid=False,
                raw_response={"error": str(e)},
                tokens_used=0
            )

    def generate_json(
        self,
        prompt: str,
        max_tokens: int = 400,
        temperature: float = 0.3,
        json_schema: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Optional[Dict], bool]:
        """
        Generate JSON response from LLM.

        Returns:
            Tuple of (parsed_json, is_valid)
        """
        response = self.generate(
            prompt=prompt,
            max_tokens=max_tokens,
            temperature=temperature,
            json_schema=json_schema,
        )

        if not response.is_valid:
            logger.warning(f"LLM response invalid: {response.raw_response}")
            return None, False

        parsed, is_valid = ResponseCleaner.parse_json(response.content)
        if not is_valid or not isinstance(parsed, dict) or not parsed:
            logger.warning(f"Could not parse JSON from LLM output: {response.content[:200]}...")
            return None, False

        return parsed, True

    def health_check(self) -> bool:
        """Check if LLM server is responding."""
        try:
            response = self.generate("Hello", max_tokens=5)
            return response.is_valid
        except Exception:
            return False


# Global client instance
llm_client = LLMClient()
