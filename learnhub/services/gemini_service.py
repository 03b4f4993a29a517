"""
Gemini AI service for drafting quiz questions from course content
"""
import google.generativeai as genai
from learnhub.config import settings
from learnhub.exceptions import NotFound, ServiceUnavailable, UpstreamError, ValidationError
from learnhub.models import Course, Unit
from learnhub.models.enums import QuestionType, UnitType
from sqlalchemy.orm import Session
import json
import logging
from typing import List, Dict, Any, Optional
from uuid import UUID

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = (
    "You are an expert quiz creator. Generate clear, fair questions that test "
    "understanding. Always respond with valid JSON only, no markdown formatting."
)

DEFAULT_TYPES = [
    QuestionType.MULTIPLE_CHOICE.value,
    QuestionType.TRUE_FALSE.value,
    QuestionType.FILL_BLANK.value,
]


class GeminiService:
    """Service for Gemini question drafting"""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        self.model = None
        api_key = api_key or settings.GEMINI_API_KEY
        if api_key:
            genai.configure(api_key=api_key)
            self.model = genai.GenerativeModel(
                model_name or settings.GEMINI_MODEL,
                system_instruction=SYSTEM_INSTRUCTION,
            )

    @property
    def configured(self) -> bool:
        return self.model is not None

    def build_course_content(self, db: Session, course_id: UUID) -> str:
        """Concatenate a course's text units, truncated to the prompt budget"""
        if not db.query(Course.id).filter(Course.id == course_id).first():
            raise NotFound("Course not found")

        units = (
            db.query(Unit)
            .filter(Unit.course_id == course_id, Unit.type == UnitType.TEXT.value)
            .order_by(Unit.sort_order.asc())
            .all()
        )

        if not units:
            raise ValidationError(
                "No text content found in course. Please provide content or add text units."
            )

        content = "\n\n".join(f"{unit.name}\n{unit.content or ''}" for unit in units)
        return content[:settings.AI_MAX_CONTENT_CHARS]

    def generate_questions(
        self,
        content: str,
        count: int = 5,
        types: Optional[List[str]] = None
    ) -> List[Dict[str, Any]]:
        """
        Draft quiz questions from course content

        Args:
            content: Source text
            count: Number of questions to request
            types: Allowed question types

        Returns:
            List of validated question dictionaries (not persisted)
        """
        if not content or len(content.strip()) < settings.AI_MIN_CONTENT_CHARS:
            raise ValidationError(
                f"Content must be at least {settings.AI_MIN_CONTENT_CHARS} characters"
            )

        if not self.configured:
            raise ServiceUnavailable("AI service not configured", code="ai_not_configured")

        prompt = self._create_questions_prompt(content, count, types or DEFAULT_TYPES)

        try:
            response = self.model.generate_content(
                prompt,
                generation_config={"temperature": 0.7, "max_output_tokens": 2500},
            )
            response_text = response.text
        except Exception as e:
            logger.error(f"Gemini request failed: {str(e)}")
            raise UpstreamError("AI service error", code="ai_error")

        questions = self._validate_questions(self._parse_questions_response(response_text))

        logger.info(f"Drafted {len(questions)} questions ({count} requested)")

        return questions

    def _create_questions_prompt(self, content: str, count: int, types: List[str]) -> str:
        """Create structured prompt for question generation"""

        return f"""Based on the following course content, generate {count} quiz questions.

CONTENT:
{content}

Generate exactly {count} questions using these types: {', '.join(types)}

Return ONLY valid JSON (no markdown, no code blocks) in this exact format:
{{
  "questions": [
    {{
      "type": "multiple_choice",
      "question_text": "What is...?",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "correct_answer": "Option A",
      "points": 1
    }},
    {{
      "type": "true_false",
      "question_text": "Statement to evaluate as true or false",
      "correct_answer": "True",
      "points": 1
    }},
    {{
      "type": "fill_blank",
      "question_text": "The _____ is responsible for...",
      "correct_answer": "answer word",
      "points": 1
    }}
  ]
}}

Rules:
- multiple_choice: Must have exactly 4 options, correct_answer must be one of the options
- true_false: correct_answer must be exactly "True" or "False"
- fill_blank: Use _____ to indicate the blank, correct_answer is the missing word/phrase
- Questions should test understanding, not just memorization
- Each question is worth 1 point unless particularly complex (then 2)
"""

    def _strip_code_fences(self, text: str) -> str:
        cleaned = text.strip()
        if cleaned.startswith("```json"):
            cleaned = cleaned[7:]
        elif cleaned.startswith("```"):
            cleaned = cleaned[3:]
        if cleaned.endswith("```"):
            cleaned = cleaned[:-3]
        return cleaned.strip()

    def _parse_questions_response(self, response_text: Optional[str]) -> List[Any]:
        """Parse Gemini's JSON payload into a raw question list"""
        if not response_text:
            raise UpstreamError("No response from AI", code="ai_error")

        try:
            result = json.loads(self._strip_code_fences(response_text))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse AI response: {str(e)}")
            logger.error(f"Response text: {response_text[:500]}")
            raise UpstreamError("Failed to parse AI response", code="ai_error")

        if not isinstance(result, dict) or not isinstance(result.get("questions"), list):
            raise UpstreamError("Invalid response structure from AI", code="ai_error")

        return result["questions"]

    def _validate_questions(self, raw_questions: List[Any]) -> List[Dict[str, Any]]:
        """Drop malformed questions and normalize the rest"""
        allowed_types = {question_type.value for question_type in QuestionType}
        questions = []

        for question in raw_questions:
            if not isinstance(question, dict):
                continue

            q_type = question.get("type")
            if q_type not in allowed_types:
                continue
            if not question.get("question_text") or not question.get("correct_answer"):
                continue

            options = question.get("options")
            if q_type == QuestionType.MULTIPLE_CHOICE.value and (
                not isinstance(options, list) or len(options) != 4
            ):
                continue
            if q_type == QuestionType.TRUE_FALSE.value and question["correct_answer"] not in ("True", "False"):
                continue

            points = question.get("points")
            if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
                points = 1

            questions.append({
                "type": q_type,
                "question_text": question["question_text"],
                "options": options or None,
                "correct_answer": str(question["correct_answer"]),
                "points": points,
            })

        return questions


# Global instance
gemini_service = GeminiService()
