"""
Database models package
"""
from learnhub.models.user import User
from learnhub.models.session import UserSession
from learnhub.models.course import Course
from learnhub.models.unit import Unit
from learnhub.models.question import Question
from learnhub.models.enrollment import Enrollment
from learnhub.models.unit_progress import UnitProgress
from learnhub.models.quiz_attempt import QuizAttempt
from learnhub.models.quiz_answer import QuizAnswer
from learnhub.models.user_points import UserPoints
from learnhub.models.badge import Badge, UserBadge

__all__ = [
    "User", "UserSession",
    "Course", "Unit", "Question",
    "Enrollment", "UnitProgress",
    "QuizAttempt", "QuizAnswer",
    "UserPoints",
    "Badge", "UserBadge",
]
