"""
Summary scoring and post-processing.
Normalizes model-produced feedback and derives the views the summary page shows.
"""
import logging
from typing import Dict, Any, List, Tuple

from mock_interview.models.schemas import CompetencyRating, InterviewSummaryOutput

logger = logging.getLogger(__name__)


class SummaryScorer:
    """
    Validates competency ratings and splits the written summary into sections.
    """

    STRENGTH_KEYWORDS = ["strengths:", "điểm mạnh:"]
    IMPROVEMENT_KEYWORDS = ["areas for improvement:", "areas of improvement:", "điểm cần cải thiện:"]

    # Score interpretation thresholds
    INTERPRETATIONS = {
        (0, 3): "Poor - Significant improvement needed",
        (3, 5): "Below Average - Some gaps identified",
        (5, 6.5): "Average - Meets basic expectations",
        (6.5, 8): "Good - Above average performance",
        (8, 9): "Very Good - Strong candidate",
        (9, 10.1): "Excellent - Outstanding performance",
    }

    @staticmethod
    def clamp_rating(value: Any, min_val: int = 1, max_val: int = 10) -> float:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 5.0  # Default to middle score
        if number != number:  # NaN
            return 5.0
        return float(max(min_val, min(max_val, number)))

    @classmethod
    def normalize_payload(cls, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Clamp ratings and drop malformed entries from a raw summary dict.

        Accepts the camelCase keys some models echo back.
        """
        summary = payload.get("summary", "")
        if not isinstance(summary, str):
            summary = str(summary or "")

        raw_ratings = payload.get("competency_ratings", payload.get("competencyRatings")) or []
        ratings = []
        for entry in raw_ratings if isinstance(raw_ratings, list) else []:
            if not isinstance(entry, dict) or not str(entry.get("competency", "")).strip():
                logger.debug(f"Dropping malformed competency rating: {entry!r}")
                continue
            ratings.append({
                "competency": str(entry["competency"]).strip(),
                "rating": cls.clamp_rating(entry.get("rating")),
                "justification": str(entry.get("justification") or ""),
            })

        raw_suggestions = payload.get("suggested_answers", payload.get("suggestedAnswers")) or []
        suggestions = []
        for entry in raw_suggestions if isinstance(raw_suggestions, list) else []:
            if not isinstance(entry, dict) or not str(entry.get("question", "")).strip():
                continue
            suggestions.append({
                "question": str(entry["question"]),
                "user_answer": str(entry.get("user_answer", entry.get("userAnswer")) or ""),
                "answer_analysis": str(entry.get("answer_analysis", entry.get("answerAnalysis")) or ""),
                "suggested_answer": str(entry.get("suggested_answer", entry.get("suggestedAnswer")) or ""),
            })

        return {
            "summary": summary,
            "competency_ratings": ratings,
            "suggested_answers": suggestions,
        }

    @classmethod
    def validate_summary(cls, payload: Dict[str, Any]) -> InterviewSummaryOutput:
        """Normalize and validate a raw summary dict."""
        return InterviewSummaryOutput.model_validate(cls.normalize_payload(payload))

    @classmethod
    def parse_summary_sections(cls, summary: str) -> Tuple[List[str], List[str]]:
        """
        Split summary text into (strengths, improvements).

        Headings are matched case-insensitively; bullet lines ("-" or "*")
        belong to the most recent heading. If no section is found the whole
        summary is returned as a single strength.
        """
        if not summary:
            return [], []

        strengths: List[str] = []
        improvements: List[str] = []
        current = None

        for line in (l for l in summary.split("\n") if l.strip()):
            lower = line.lower()
            stripped = line.strip()

            if any(k in lower for k in cls.STRENGTH_KEYWORDS):
                current = strengths
                content = line[line.index(":") + 1:].strip().strip("*").strip()
                if content and not content.startswith("-"):
                    strengths.append(content)
                continue
            if any(k in lower for k in cls.IMPROVEMENT_KEYWORDS):
                current = improvements
                content = line[line.index(":") + 1:].strip().strip("*").strip()
                if content and not content.startswith("-"):
                    improvements.append(content)
                continue

            if current is not None and stripped.startswith(("-", "*")):
                current.append(stripped[1:].strip())

        if not strengths and not improvements:
            return [summary], []

        return strengths, improvements

    @staticmethod
    def overall_rating(ratings: List[CompetencyRating]) -> float:
        """Mean competency rating, 0 when there are none."""
        if not ratings:
            return 0.0
        return round(sum(r.rating for r in ratings) / len(ratings), 1)

    @classmethod
    def get_score_interpretation(cls, score: float) -> str:
        """Get human-readable interpretation of a score."""
        for (low, high), interpretation in cls.INTERPRETATIONS.items():
            if low <= score < high:
                return interpretation
        return "Score out of range"

    @staticmethod
    def chart_rows(ratings: List[CompetencyRating]) -> List[Dict[str, Any]]:
        """Rows for the competency bar chart."""
        return [{"competency": r.competency, "rating": r.rating} for r in ratings]

    @classmethod
    def build_report(cls, summary: InterviewSummaryOutput) -> Dict[str, Any]:
        """Everything the summary page renders."""
        strengths, improvements = cls.parse_summary_sections(summary.summary)
        overall = cls.overall_rating(summary.competency_ratings)
        return {
            "summary": summary.summary,
            "strengths": strengths,
            "improvements": improvements,
            "competency_ratings": [r.model_dump() for r in summary.competency_ratings],
            "chart": cls.chart_rows(summary.competency_ratings),
            "suggested_answers": [s.model_dump() for s in summary.suggested_answers],
            "overall_rating": overall,
            "interpretation": cls.get_score_interpretation(overall),
        }
