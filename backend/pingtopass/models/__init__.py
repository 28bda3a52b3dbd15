# This file makes the 'models' directory a Python package.

from .user import User, UserProfile
from .daily_goal import DailyGoal
from .exam import Exam
from .objective import Objective
from .question import Question
from .study_session import StudySession
from .test_attempt import TestAttempt
from .user_answer import UserAnswer
from .user_progress import UserProgress
from .audit import AuditLog, AIGenerationLog
