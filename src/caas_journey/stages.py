"""Stage progression: recording stage attempts and reading back their outcome.

The attempt log and the level-progress list are separate collections. A plain
stage submission only appends to the log; callers that also want to mark the
level as completed use record_stage_completion, which writes both in order.
"""
from caas_journey.attempts import (
    is_number, list_attempts, record_quiz_result, record_stage_attempt,
)
from caas_journey.db import Store
from caas_journey.errors import InvalidInput
from caas_journey.models import CATEGORIES, StageAttempt, StageStatus
from caas_journey.progress import upsert_progress
from caas_journey.scoring import (
    CATEGORY_BANDS, ITEMS_PER_CATEGORY, MAX_RATING, evaluate_answers, is_passing,
)
from caas_journey.users import get_user

STAGE_ORDER = ("concern", "control", "curiosity", "confidence")


def next_stage(stage: str) -> str | None:
    """The stage after ``stage`` in the journey, or None after the last one."""
    if stage not in STAGE_ORDER:
        raise InvalidInput(f"Unknown stage: {stage}")
    index = STAGE_ORDER.index(stage)
    if index + 1 < len(STAGE_ORDER):
        return STAGE_ORDER[index + 1]
    return None


def validate_submission(user_id, stage, answers, score, passed) -> None:
    missing = []
    if not user_id:
        missing.append("userId")
    if not stage:
        missing.append("stage")
    if not isinstance(answers, (list, tuple)) or not answers:
        missing.append("answers")
    if not is_number(score):
        missing.append("score")
    if not isinstance(passed, bool):
        missing.append("passed")
    if missing:
        raise InvalidInput(f"Missing or invalid fields: {', '.join(missing)}")


def submit_stage_attempt(
    store: Store, user_id: str, stage: str, answers: list, score: float, passed: bool
) -> str:
    """Validate and append a stage attempt. Progress is left untouched."""
    validate_submission(user_id, stage, answers, score, passed)
    return record_stage_attempt(store, user_id, stage, answers, score, passed)


def latest_per_stage(attempts: list[StageAttempt]) -> dict[str, StageStatus]:
    """Reduce newest-first attempts to the first one seen for each stage."""
    latest = {}
    for attempt in attempts:
        if attempt.stage not in latest:
            latest[attempt.stage] = StageStatus(
                score=attempt.score, passed=attempt.passed, created_at=attempt.created_at
            )
    return latest


def get_latest_status_per_stage(store: Store, user_id: str) -> dict[str, StageStatus]:
    if not user_id:
        raise InvalidInput("userId is required")
    return latest_per_stage(list_attempts(store, user_id=user_id))


def get_stage_status(store: Store, user_id: str) -> dict:
    """Full attempt history plus the latest outcome per stage."""
    if not user_id:
        raise InvalidInput("userId is required")
    attempts = list_attempts(store, user_id=user_id)
    return {"attempts": attempts, "latest": latest_per_stage(attempts)}


def record_stage_completion(
    store: Store,
    user_id: str,
    stage: str,
    answers: list,
    score: float,
    threshold: float,
) -> dict:
    """Record an attempt, then store the level outcome in the user's progress.

    Pass/fail is ``score >= threshold``. The user must already exist. If the
    attempt cannot be written the progress update is never attempted.
    """
    if not is_number(threshold):
        raise InvalidInput("threshold must be a number")
    passed = is_number(score) and is_passing(score, threshold)
    validate_submission(user_id, stage, answers, score, passed)
    get_user(store, user_id)
    attempt_id = record_stage_attempt(store, user_id, stage, answers, score, passed)
    progress = upsert_progress(store, user_id, stage, score, passed)
    return {"attemptId": attempt_id, "passed": passed, "progress": progress}


def validate_ratings(category: str, ratings) -> None:
    """A category's ratings: at most six whole numbers from 1 to 5. None means not answered."""
    if ratings is None:
        return
    if not isinstance(ratings, (list, tuple)):
        raise InvalidInput(f"answers.{category} must be a list")
    if len(ratings) > ITEMS_PER_CATEGORY:
        raise InvalidInput(f"answers.{category} has more than {ITEMS_PER_CATEGORY} ratings")
    for rating in ratings:
        if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= MAX_RATING:
            raise InvalidInput(f"answers.{category} ratings must be whole numbers from 1 to {MAX_RATING}")


def submit_caas_quiz(
    store: Store, user_id: str, answers: dict, is_posttest: bool = False, bands: tuple = CATEGORY_BANDS
) -> dict:
    """Score raw questionnaire ratings and append the result."""
    if not user_id:
        raise InvalidInput("userId is required")
    if not isinstance(answers, dict):
        raise InvalidInput("answers must map each category to its ratings")
    unknown = set(answers) - set(CATEGORIES)
    if unknown:
        raise InvalidInput(f"Unknown categories: {', '.join(sorted(unknown))}")
    for name, ratings in answers.items():
        validate_ratings(name, ratings)
    result = evaluate_answers(answers, bands)
    quiz_id = record_quiz_result(
        store,
        user_id,
        answers,
        result["scores"],
        result["total"],
        result["percent"],
        result["category"],
        is_posttest,
    )
    return {"quizId": quiz_id, **result}
