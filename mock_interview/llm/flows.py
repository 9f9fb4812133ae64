"""
Flows: named, schema-typed wrappers around a single LLM call.

A flow validates its input model, renders a prompt, asks the LLM for JSON
constrained by the output model's schema, and validates the result.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ValidationError

from mock_interview.llm.client import llm_client
from mock_interview.llm.prompts import Prompts
from mock_interview.interview.scoring import SummaryScorer
from mock_interview.models.schemas import (
    ConversationalResponseInput,
    ConversationalResponseOutput,
    CvData,
    CvDataExtractionInput,
    InterviewSummaryInput,
    InterviewSummaryOutput,
    QuestionGenerationInput,
    QuestionGenerationOutput,
)
from mock_interview.utils.config import config

logger = logging.getLogger(__name__)


class FlowError(Exception):
    """Raised when a flow cannot produce valid output."""

    def __init__(self, flow_name: str, message: str):
        super().__init__(f"{flow_name}: {message}")
        self.flow_name = flow_name


@dataclass
class Flow:
    """A single prompt-in, structured-JSON-out call."""
    name: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    template: Callable[[Any], str]
    max_tokens: int = 400
    temperature: float = 0.3
    normalize: Optional[Callable[[Dict[str, Any]], Dict[str, Any]]] = None

    def render(self, data: Union[BaseModel, Dict[str, Any]]) -> str:
        """Validate input and build the prompt."""
        return self.template(self._coerce_input(data))

    def run(self, data: Union[BaseModel, Dict[str, Any]], llm=None) -> BaseModel:
        """
        Execute the flow.

        Args:
            data: Input model instance or a dict matching it
            llm: Client exposing generate_json (defaults to the global client)

        Returns:
            Instance of the output model

        Raises:
            FlowError: if the model output is missing or does not match the schema
        """
        llm = llm or llm_client
        prompt = self.render(data)

        logger.info(f"Running flow {self.name}")
        result, is_valid = llm.generate_json(
            prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            json_schema=self.output_model.model_json_schema(),
        )

        if not is_valid or result is None:
            raise FlowError(self.name, "model returned no usable JSON")

        if self.normalize:
            result = self.normalize(result)

        try:
            return self.output_model.model_validate(result)
        except ValidationError as e:
            logger.warning(f"Flow {self.name} output failed validation: {e}")
            raise FlowError(self.name, "model output did not match the schema") from e

    def _coerce_input(self, data: Union[BaseModel, Dict[str, Any]]) -> BaseModel:
        if isinstance(data, self.input_model):
            return data
        if isinstance(data, BaseModel):
            data = data.model_dump()
        try:
            return self.input_model.model_validate(data)
        except ValidationError as e:
            raise FlowError(self.name, f"invalid input: {e}") from e


# ================================================================
# Registry
# ================================================================

_FLOWS: Dict[str, Flow] = {}


def define_flow(
    name: str,
    input_model: Type[BaseModel],
    output_model: Type[BaseModel],
    template: Callable[[Any], str],
    **options: Any,
) -> Flow:
    """Create a flow and register it by name."""
    if name in _FLOWS:
        raise ValueError(f"Flow already defined: {name}")
    flow = Flow(name=name, input_model=input_model, output_model=output_model, template=template, **options)
    _FLOWS[name] = flow
    return flow


def get_flow(name: str) -> Flow:
    try:
        return _FLOWS[name]
    except KeyError:
        raise KeyError(f"Unknown flow: {name}") from None


def list_flows() -> List[str]:
    return sorted(_FLOWS)


# ================================================================
# Flow definitions
# ================================================================

generate_interview_questions_flow = define_flow(
    "generateInterviewQuestionsFlow",
    QuestionGenerationInput,
    QuestionGenerationOutput,
    lambda i: Prompts.generate_questions(i.job_role, i.language, i.question_count, i.cv_text),
    max_tokens=800,
    temperature=0.7,
)

generate_conversational_response_flow = define_flow(
    "generateConversationalResponseFlow",
    ConversationalResponseInput,
    ConversationalResponseOutput,
    lambda i: Prompts.conversational_response(
        i.job_role, i.previous_question, i.user_answer, i.next_question, i.language
    ),
    max_tokens=300,
    temperature=0.7,
)

generate_interview_summary_flow = define_flow(
    "generateInterviewSummaryFlow",
    InterviewSummaryInput,
    InterviewSummaryOutput,
    lambda i: Prompts.interview_summary(
        i.interview_transcript, i.job_role, i.language, config.interview.competencies, i.cv_text
    ),
    max_tokens=3000,
    temperature=0.3,
    normalize=SummaryScorer.normalize_payload,
)

extract_cv_data_flow = define_flow(
    "extractCvDataFlow",
    CvDataExtractionInput,
    CvData,
    lambda i: Prompts.cv_extraction(i.cv_text),
    max_tokens=1500,
    temperature=0.1,
)
