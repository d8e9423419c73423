"""Append-only logs of stage attempts and questionnaire results."""
import json
import logging
import uuid
from numbers import Real

from caas_journey.db import Store
from caas_journey.errors import InvalidInput
from caas_journey.models import CATEGORIES, QuizResult, StageAttempt
from caas_journey.users import now_iso

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid.uuid4().hex


def is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def record_stage_attempt(
    store: Store,
    user_id: str,
    stage: str,
    answers: list,
    score: float,
    passed: bool,
) -> str:
    """Append one stage attempt and return its generated id."""
    if not user_id or not isinstance(user_id, str):
        raise InvalidInput("userId is required")
    if not stage or not isinstance(stage, str):
        raise InvalidInput("stage is required")
    if not isinstance(answers, (list, tuple)):
        raise InvalidInput("answers must be a list")
    if not is_number(score):
        raise InvalidInput("score must be a number")
    if not isinstance(passed, bool):
        raise InvalidInput("passed must be a boolean")
    attempt_id = new_id()
    with store.connection() as conn:
        conn.execute(
            "INSERT INTO stage_attempts (id, user_id, stage, answers, score, passed, created_at) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (attempt_id, user_id, stage, json.dumps(list(answers)), score, int(passed), now_iso()),
        )
    logger.info("Recorded %s attempt %s for %s (score=%s, passed=%s)", stage, attempt_id, user_id, score, passed)
    return attempt_id


def record_quiz_result(
    store: Store,
    user_id: str,
    answers: dict,
    scores: dict,
    total: float,
    percent: float,
    category: str,
    is_posttest: bool = False,
) -> str:
    """Append one CAAS questionnaire result and return its generated id."""
    if not user_id or not isinstance(user_id, str):
        raise InvalidInput("userId is required")
    if not isinstance(answers, dict):
        raise InvalidInput("answers must map each category to its ratings")
    if not isinstance(scores, dict):
        raise InvalidInput("scores must map each category to its score")
    if not is_number(total) or not is_number(percent):
        raise InvalidInput("total and percent must be numbers")
    if not isinstance(is_posttest, bool):
        raise InvalidInput("isPosttest must be a boolean")
    for name in CATEGORIES:
        if answers.get(name) is not None and not isinstance(answers[name], (list, tuple)):
            raise InvalidInput(f"answers.{name} must be a list")
        if scores.get(name) is not None and not is_number(scores[name]):
            raise InvalidInput(f"scores.{name} must be a number")
    stored_answers = {name: list(answers.get(name) or []) for name in CATEGORIES}
    stored_scores = {name: scores.get(name) or 0 for name in CATEGORIES}
    quiz_id = new_id()
    with store.connection() as conn:
        conn.execute(
            """INSERT INTO quiz_results
            (id, user_id, answers, scores, total, percent, category, is_posttest, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                quiz_id, user_id, json.dumps(stored_answers), json.dumps(stored_scores),
                total, percent, category or "", int(is_posttest), now_iso(),
            ),
        )
    logger.info("Recorded %s result %s for %s (total=%s)",
                "posttest" if is_posttest else "pretest", quiz_id, user_id, total)
    return quiz_id


def list_attempts(store: Store, user_id: str | None = None, stage: str | None = None) -> list[StageAttempt]:
    """Stage attempts newest first. Omitting user_id lists every user's attempts."""
    clauses, params = [], []
    if user_id:
        clauses.append("user_id = ?")
        params.append(user_id)
    if stage:
        clauses.append("stage = ?")
        params.append(stage)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with store.connection() as conn:
        rows = conn.execute(
            f"SELECT * FROM stage_attempts {where} ORDER BY created_at DESC, rowid DESC",
            params,
        ).fetchall()
    return [StageAttempt.from_row(r) for r in rows]


def list_quiz_results(
    store: Store, user_id: str | None = None, is_posttest: bool | None = None
) -> list[QuizResult]:
    """Questionnaire results newest first, optionally filtered."""
    clauses, params = [], []
    if user_id:
        clauses.append("user_id = ?")
        params.append(user_id)
    if is_posttest is not None:
        clauses.append("is_posttest = ?")
        params.append(int(is_posttest))
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with store.connection() as conn:
        rows = conn.execute(
            f"SELECT * FROM quiz_results {where} ORDER BY created_at DESC, rowid DESC",
            params,
        ).fetchall()
    return [QuizResult.from_row(r) for r in rows]
