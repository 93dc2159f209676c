"""Answer validation for generated challenges.

A submission passes when any of these holds, checked in order:
1. Both queries parse as SELECT and their canonical forms are equal
2. The submission has the clauses the challenge tier requires
   (tier parameters are recovered from the stored solution text)
3. The whitespace-normalized texts are equal

Verdict messages never contain the stored solution.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from querytutor.core.types import ChallengeVerdict
from querytutor.exceptions import MissingChallengeIdError, MissingSqlError, UnknownChallengeIdError
from querytutor.query.inspector import canonical_sql, try_parse_select

if TYPE_CHECKING:
    from querytutor.challenges.store import AnswerStore

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "✅ Correct! You solved the challenge."
FAILURE_MESSAGE = (
    "❌ Not quite. Keep trying! "
    "Hint: compare your tables and clauses against the task requirements."
)

_WHITESPACE = re.compile(r"\s+")

# Shapes of the stored solutions, matched against normalized (lowercase) text
BEGINNER_EQUALS = re.compile(r"from\s+(\w+)\s+where\s+(\w+)\s*=\s*([^;]+)")
BEGINNER_IS_NULL = re.compile(r"from\s+(\w+)\s+where\s+(\w+)\s+is\s+null")
INTERMEDIATE_JOIN = re.compile(
    r"from\s+(\w+)\s+inner\s+join\s+(\w+)\s+on\s+(\w+)\.(\w+)\s*=\s*(\w+)\.(\w+)"
)
ADVANCED_FROM = re.compile(r"from\s+(\w+)")
ADVANCED_GROUP_BY = re.compile(r"group\s+by\s+(\w+)")

HAVING_COUNT_STAR = re.compile(r"\bhaving\b.*\bcount\s*\(\s*\*\s*\)")
ORDER_BY_DESC = re.compile(r"\border\s+by\b.*\bdesc\b")
IS_NULL = re.compile(r"\bis\s+null\b")
EQUALS = re.compile(r"(?<![<>!])=")


def normalize_sql(sql: str) -> str:
    """Lowercase, collapse whitespace runs to single spaces, trim."""
    return _WHITESPACE.sub(" ", sql.lower()).strip()


def _references(sql: str, keyword: str, table: str) -> bool:
    """True if ``<keyword> <table>`` appears with the table as a whole token."""
    return re.search(rf"\b{keyword}\s+{re.escape(table)}(?![\w.])", sql) is not None


def _mentions(text: str, identifier: str) -> bool:
    return re.search(rf"\b{re.escape(identifier)}\b", text) is not None


def _matches_beginner(submitted: str, expected: str) -> bool:
    match = BEGINNER_EQUALS.search(expected) or BEGINNER_IS_NULL.search(expected)
    if match is None:
        return False
    table, column = match.group(1), match.group(2)

    where = re.search(r"\bwhere\b(.*)", submitted)
    if not _references(submitted, "from", table) or where is None:
        return False
    where_text = where.group(1)
    if not _mentions(where_text, column):
        return False
    return IS_NULL.search(where_text) is not None or EQUALS.search(where_text) is not None


def _matches_intermediate(submitted: str, expected: str) -> bool:
    match = INTERMEDIATE_JOIN.search(expected)
    if match is None:
        return False
    left, right, t1, c1, t2, c2 = match.groups()

    if not (_references(submitted, "from", left) and _references(submitted, "join", right)):
        return False
    first = rf"{re.escape(t1)}\.{re.escape(c1)}"
    second = rf"{re.escape(t2)}\.{re.escape(c2)}"
    on_clause = re.compile(rf"\bon\s+(?:{first}\s*=\s*{second}|{second}\s*=\s*{first})\b")
    return on_clause.search(submitted) is not None


def _matches_advanced(submitted: str, expected: str) -> bool:
    from_match = ADVANCED_FROM.search(expected)
    group_match = ADVANCED_GROUP_BY.search(expected)
    if from_match is None or group_match is None:
        return False
    table, group_col = from_match.group(1), group_match.group(1)

    return (
        _references(submitted, "from", table)
        and re.search(rf"\bgroup\s+by\s+{re.escape(group_col)}\b", submitted) is not None
        and HAVING_COUNT_STAR.search(submitted) is not None
        and ORDER_BY_DESC.search(submitted) is not None
    )


class AnswerValidator:
    """Checks submitted SQL against the stored solution of a challenge.

    Read-only over the answer store; consuming a solved challenge is the
    caller's job (see ChallengeService).
    """

    def __init__(self, store: AnswerStore) -> None:
        """Initialize the validator.

        Args:
            store: Answer store holding the canonical solutions
        """
        self._store = store

    def validate(self, challenge_id: str | None, sql: str | None) -> ChallengeVerdict:
        """Validate a submission for a challenge.

        Args:
            challenge_id: Id returned with the challenge
            sql: Submitted SQL text

        Returns:
            ChallengeVerdict with passed flag and a message for the student

        Raises:
            MissingChallengeIdError: If the id is blank
            UnknownChallengeIdError: If no answer is stored for the id
            MissingSqlError: If the submitted SQL is blank
        """
        key = (challenge_id or "").strip()
        if not key:
            raise MissingChallengeIdError()

        expected = self._store.get(key)
        if expected is None:
            raise UnknownChallengeIdError(key)

        submitted = (sql or "").strip()
        if not submitted:
            raise MissingSqlError()

        passed = self.matches(submitted, expected)
        return ChallengeVerdict(
            id=key,
            passed=passed,
            message=SUCCESS_MESSAGE if passed else FAILURE_MESSAGE,
        )

    def matches(self, submitted: str, expected: str) -> bool:
        """Decide whether a submission answers the challenge behind ``expected``."""
        if self._canonical_equal(submitted, expected):
            logger.debug("Submission matched canonical form")
            return True

        user = normalize_sql(submitted)
        solution = normalize_sql(expected)

        for rule in (_matches_beginner, _matches_intermediate, _matches_advanced):
            if rule(user, solution):
                logger.debug(f"Submission accepted by {rule.__name__}")
                return True

        return user == solution

    def _canonical_equal(self, submitted: str, expected: str) -> bool:
        user_statement = try_parse_select(submitted)
        expected_statement = try_parse_select(expected)
        if user_statement is None or expected_statement is None:
            return False
        return normalize_sql(canonical_sql(user_statement)) == normalize_sql(
            canonical_sql(expected_statement)
        )
