"""Schema-driven SQL challenges.

Components:
    1. AnswerStore - session-scoped map of challenge id -> canonical solution
    2. ChallengeGenerator - builds beginner/intermediate/advanced problems from the schema
    3. AnswerValidator - decides pass/fail without revealing the solution
    4. ChallengeService - wires the three together for one session
"""

from querytutor.challenges.generator import ChallengeGenerator, RandomSource
from querytutor.challenges.service import ChallengeService
from querytutor.challenges.store import AnswerStore
from querytutor.challenges.validator import AnswerValidator, normalize_sql

__all__ = [
    "AnswerStore",
    "AnswerValidator",
    "ChallengeGenerator",
    "ChallengeService",
    "RandomSource",
    "normalize_sql",
]
