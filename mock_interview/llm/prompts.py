"""
Prompt templates for every flow in the interview coach.
Each prompt is designed to:
1. Keep the model in its role (interviewer, coach, or parser)
2. Answer in the requested language
3. Produce a single JSON object matching the flow's output schema
"""
from typing import List, Optional

JSON_ONLY = "Respond with ONLY the JSON object, no other text."


class Prompts:
    """Collection of all flow prompts."""

    # ============================================================
    # QUESTION GENERATION
    # ============================================================

    @staticmethod
    def generate_questions(job_role: str, language: str, question_count: int, cv_text: Optional[str] = None) -> str:
        """Prompt for the up-front list of interview questions."""
        cv_block = ""
        if cv_text:
            cv_block = f"""
CANDIDATE CV:
{cv_text}

Tailor some questions to the experience and skills in the CV.
"""

        return f"""You are an expert hiring manager preparing a mock interview in {language}.

JOB ROLE: {job_role}
{cv_block}
YOUR TASK:
- Write exactly {question_count} interview questions for this role, in {language}.
- Start with an easy opener about the candidate's background.
- Mix behavioral, situational and role-specific technical questions.
- Each question must be a single, clear question a candidate can answer aloud.
- Do not number the questions and do not add answers or commentary.

{JSON_ONLY}

{{
    "questions": ["<question 1>", "<question 2>"]
}}"""

    # ============================================================
    # CONVERSATIONAL RESPONSE
    # ============================================================

    @staticmethod
    def conversational_response(
        job_role: str,
        previous_question: str,
        user_answer: str,
        next_question: str,
        language: str,
    ) -> str:
        """Prompt for the transition between two questions."""
        return f"""You are an expert hiring manager conducting an interview in {language}.
Your goal is to make the conversation feel natural and engaging.

You just asked the candidate this question for the role of {job_role}:
"{previous_question}"

The candidate responded with:
"{user_answer}"

Your task is to generate a brief, encouraging, and conversational transition before asking the next question.
Acknowledge their answer in 1-2 sentences, then seamlessly introduce the next question.

The next question you need to ask is:
"{next_question}"

Keep your transition natural and brief. For example:
- "Thank you for sharing. That gives me a clearer picture. Now, let's move on: {next_question}"
- "I see. It's interesting that you mentioned that. Next, could you tell me: {next_question}"

Do not ask for more details unless the next question itself asks for them.
Your entire output should be just the conversational response containing the next question, in {language}.

{JSON_ONLY}

{{
    "ai_response": "<your transition followed by the next question>"
}}"""

    # ============================================================
    # INTERVIEW SUMMARY
    # ============================================================

    @staticmethod
    def interview_summary(
        interview_transcript: str,
        job_role: str,
        language: str,
        competencies: List[str],
        cv_text: Optional[str] = None,
    ) -> str:
        """Prompt for the end-of-interview feedback."""
        localized = {
            "Communication": "Giao tiếp",
            "Problem Solving": "Giải quyết vấn đề",
            "Technical Knowledge": "Kiến thức chuyên môn",
            "Role Fit": "Sự phù hợp với vai trò",
        }
        if language == "Vietnamese":
            competency_lines = "\n".join(
                f"    * {localized.get(c, c)} ({c})" for c in competencies
            )
        else:
            competency_lines = "\n".join(f"    * {c}" for c in competencies)

        return f"""You are an AI career coach providing feedback on a mock interview in {language}.

Based on the interview transcript, the candidate's CV, and the target job role, please provide:

1. A written summary: it must be structured with a "Strengths:" section and an "Areas for improvement:" section,
   using bullet points ("- ") for each. The feedback should be constructive and actionable.
2. A competency evaluation: rate the candidate on a scale of 1 to 10 for each of the following competencies:
{competency_lines}
   For each competency, provide a numerical rating and a brief justification based on specific examples from the interview.
3. Answer improvement suggestions: for each question the AI asked in the transcript, extract the question and the
   user's answer. Then provide:
   a. An analysis of the user's answer: critique it for correctness, completeness, and relevance to the question
      and job role. Explain what was good and what could be improved.
   b. A more ideal, well-structured sample answer that highlights the candidate's skills, serving as a learning example.

Interview Transcript:
{interview_transcript}

Job Role: {job_role}

CV Text (Optional):
{cv_text or ""}

{JSON_ONLY}

{{
    "summary": "Strengths:\\n- ...\\nAreas for improvement:\\n- ...",
    "competency_ratings": [
        {{"competency": "<name>", "rating": <1-10>, "justification": "<why>"}}
    ],
    "suggested_answers": [
        {{"question": "<question>", "user_answer": "<answer>", "answer_analysis": "<analysis>", "suggested_answer": "<better answer>"}}
    ]
}}"""

    # ============================================================
    # CV EXTRACTION
    # ============================================================

    @staticmethod
    def cv_extraction(cv_text: str) -> str:
        """Prompt for structured CV parsing."""
        return f"""You are an expert CV parser. Extract the following information from the CV:
name, email, phone, skills, experience, and education.
Use an empty string or empty list when a field is not present. Do not invent information.

CV:
{cv_text}

{JSON_ONLY}

{{
    "name": "<full name>",
    "email": "<email>",
    "phone": "<phone>",
    "skills": ["<skill>"],
    "experience": [
        {{"title": "<job title>", "company": "<company>", "years": "<years>", "description": "<description>"}}
    ],
    "education": [
        {{"degree": "<degree>", "university": "<university>", "years": "<years>"}}
    ]
}}"""


# ============================================================
# FALLBACK QUESTIONS (used when generation returns nothing usable)
# ============================================================

FALLBACK_QUESTIONS = {
    "vi": [
        "Bạn có thể giới thiệu ngắn gọn về bản thân và kinh nghiệm của mình không?",
        "Điều gì khiến bạn quan tâm đến vị trí {job_role}?",
        "Hãy kể về một dự án khó khăn mà bạn đã tham gia và cách bạn vượt qua thử thách.",
        "Bạn xử lý thế nào khi có nhiều ưu tiên cạnh tranh và thời hạn gấp?",
        "Bạn muốn phát triển bản thân như thế nào trong vài năm tới?",
    ],
    "en": [
        "Could you briefly introduce yourself and your experience?",
        "What draws you to the {job_role} position?",
        "Tell me about a challenging project you worked on and how you overcame the obstacles.",
        "How do you handle competing priorities and tight deadlines?",
        "Where do you see yourself growing over the next few years?",
    ],
}


def fallback_questions(language: str, job_role: str, count: int) -> List[str]:
    """Static questions for a role, cycling if more are requested than exist."""
    templates = FALLBACK_QUESTIONS.get(language, FALLBACK_QUESTIONS["vi"])
    questions = [q.format(job_role=job_role) for q in templates]
    return [questions[i % len(questions)] for i in range(count)]
