"""Request handlers: JSON-like payload in, (status_code, body) out.

Every handler reports journey errors as ``{"success": False, "error": ...}``
with the error's status code. Anything else propagates to the caller.
"""
import functools
import logging

from caas_journey.attempts import is_number, list_quiz_results, record_quiz_result
from caas_journey.db import Store
from caas_journey.errors import InvalidInput, JourneyError
from caas_journey.evaluations import record_evaluation
from caas_journey.leaderboard import DEFAULT_LIMIT, compute_leaderboard
from caas_journey.models import CATEGORIES
from caas_journey.progress import get_progress, upsert_progress
from caas_journey.scoring import calc_percent, category_for_percent
from caas_journey.stages import get_stage_status, submit_stage_attempt

logger = logging.getLogger(__name__)


def handler(func):
    @functools.wraps(func)
    def wrapper(store: Store, payload: dict | None = None) -> tuple[int, dict]:
        try:
            return func(store, payload or {})
        except JourneyError as e:
            logger.info("%s rejected (%s): %s", func.__name__, e.status, e.message)
            return e.status, {"success": False, "error": e.message}
    return wrapper


@handler
def handle_submit_stage_attempt(store: Store, payload: dict) -> tuple[int, dict]:
    attempt_id = submit_stage_attempt(
        store,
        payload.get("userId"),
        payload.get("stage"),
        payload.get("answers"),
        payload.get("score"),
        payload.get("passed"),
    )
    return 200, {"success": True, "attemptId": attempt_id}


@handler
def handle_stage_status(store: Store, payload: dict) -> tuple[int, dict]:
    status = get_stage_status(store, payload.get("userId"))
    return 200, {
        "success": True,
        "attempts": [a.to_dict() for a in status["attempts"]],
        "latest": {stage: s.to_dict() for stage, s in status["latest"].items()},
    }


@handler
def handle_submit_quiz(store: Store, payload: dict) -> tuple[int, dict]:
    if not payload.get("userId") or not payload.get("answers") or not payload.get("scores"):
        raise InvalidInput("userId, answers and scores are required")
    scores = payload["scores"]
    if not isinstance(scores, dict) or not all(is_number(v) for v in scores.values()):
        raise InvalidInput("scores must map each category to a number")
    # Omitted totals are derived from the category scores.
    total = payload.get("total")
    if total is None:
        total = sum(scores.get(name, 0) for name in CATEGORIES)
    percent = payload.get("percent")
    if percent is None and is_number(total):
        percent = calc_percent(total)
    category = payload.get("category") or (
        category_for_percent(percent) if is_number(percent) else ""
    )
    quiz_id = record_quiz_result(
        store,
        payload["userId"],
        payload["answers"],
        scores,
        total,
        percent,
        category,
        payload.get("isPosttest", False),
    )
    return 200, {"success": True, "quizId": quiz_id}


@handler
def handle_list_quiz_results(store: Store, payload: dict) -> tuple[int, dict]:
    if not payload.get("userId"):
        raise InvalidInput("userId is required")
    results = list_quiz_results(store, user_id=payload["userId"])
    return 200, {"success": True, "results": [r.to_dict() for r in results]}


@handler
def handle_get_progress(store: Store, payload: dict) -> tuple[int, dict]:
    if not payload.get("userId"):
        raise InvalidInput("userId is required")
    progress = get_progress(store, payload["userId"])
    return 200, {"success": True, "progress": [p.to_dict() for p in progress]}


@handler
def handle_upsert_progress(store: Store, payload: dict) -> tuple[int, dict]:
    progress = upsert_progress(
        store,
        payload.get("userId"),
        payload.get("levelId"),
        payload.get("score"),
        payload.get("completed"),
    )
    return 200, {"success": True, "progress": [p.to_dict() for p in progress]}


@handler
def handle_leaderboard(store: Store, payload: dict) -> tuple[int, dict]:
    entries = compute_leaderboard(store, payload.get("limit", DEFAULT_LIMIT))
    return 200, {"success": True, "leaderboard": [e.to_dict() for e in entries]}


@handler
def handle_submit_evaluation(store: Store, payload: dict) -> tuple[int, dict]:
    eval_id = record_evaluation(store, payload.get("userId"), payload.get("type"), payload.get("answers"))
    return 200, {"success": True, "evalId": eval_id}
