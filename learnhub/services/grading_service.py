"""
Quiz grading service
Exact match against stored answers after normalization
"""
import logging
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from learnhub.models import Question

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round .5 away from zero (Python's round() is banker's rounding)"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """Integer percentage of part/whole, 0 when whole is 0"""
    if whole <= 0:
        return 0
    return round_half_up(100 * part / whole)


@dataclass
class GradedAnswer:
    question_id: UUID
    answer: Optional[str]
    is_correct: bool
    points: int


@dataclass
class GradingResult:
    answers: List[GradedAnswer] = field(default_factory=list)
    earned_points: int = 0
    total_points: int = 0

    @property
    def score(self) -> int:
        return percentage(self.earned_points, self.total_points)


class GradingService:
    """
    Service for grading quiz submissions

    Strategy:
    - Every question type is graded by exact match after trimming and lowercasing
    - correct_answer may list comma-separated alternatives, any one is accepted
    - No partial credit; a correct answer earns the question's full points
    """

    ALTERNATIVE_SEPARATOR = ","

    @staticmethod
    def _normalize(value: str) -> str:
        return value.strip().lower()

    def is_correct(self, user_answer: Optional[str], correct_answer: Optional[str]) -> bool:
        """
        Compare a learner's answer with the stored correct answer

        Args:
            user_answer: Submitted answer text
            correct_answer: Stored answer, possibly "alt1, alt2"

        Returns:
            True iff the normalized answer is one of the accepted alternatives
        """
        if not user_answer or not correct_answer:
            return False

        accepted = {
            self._normalize(alt)
            for alt in correct_answer.split(self.ALTERNATIVE_SEPARATOR)
        }
        return self._normalize(user_answer) in accepted

    def grade_submission(
        self,
        questions: Iterable[Question],
        answers: Dict[UUID, Optional[str]],
    ) -> GradingResult:
        """
        Grade a submission against every question of a quiz unit

        Args:
            questions: All questions belonging to the unit
            answers: {question_id: answer_text}; ids outside the unit are ignored

        Returns:
            GradingResult with one graded answer per answered unit question.
            total_points spans all unit questions, answered or not.
        """
        result = GradingResult()

        for question in questions:
            points = question.points or 0
            result.total_points += points

            if question.id not in answers:
                continue

            answer = answers[question.id]
            correct = self.is_correct(answer, question.correct_answer)
            if correct:
                result.earned_points += points

            result.answers.append(GradedAnswer(
                question_id=question.id,
                answer=answer or None,
                is_correct=correct,
                points=points,
            ))

        logger.info(
            f"Submission graded: {result.earned_points}/{result.total_points} "
            f"({result.score}%), answered={len(result.answers)}"
        )

        return result


# Global instance
grading_service = GradingService()
