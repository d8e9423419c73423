"""Pretest vs posttest comparison for a single student."""
from caas_journey.attempts import list_quiz_results
from caas_journey.db import Store
from caas_journey.models import CATEGORIES, QuizResult
from caas_journey.scoring import ITEMS_PER_CATEGORY, MAX_RATING, category_for_percent

MAX_CATEGORY_SCORE = ITEMS_PER_CATEGORY * MAX_RATING


def _latest(results: list[QuizResult], posttest: bool) -> QuizResult | None:
    for result in results:
        if result.is_posttest == posttest:
            return result
    return None


def compare_pre_post(store: Store, user_id: str) -> dict:
    """Compare the latest pretest and posttest questionnaire of a user.

    A side with no result yet has ``None`` scores; improvement is only given
    when both sides exist.
    """
    results = list_quiz_results(store, user_id=user_id)
    pre = _latest(results, posttest=False)
    post = _latest(results, posttest=True)

    rows = []
    for name in CATEGORIES:
        pre_score = getattr(pre.scores, name) if pre else None
        post_score = getattr(post.scores, name) if post else None
        improvement = None
        if pre_score is not None and post_score is not None:
            improvement = post_score - pre_score
        rows.append({
            "category": name,
            "pre": pre_score,
            "post": post_score,
            "prePercent": pre_score / MAX_CATEGORY_SCORE * 100 if pre else None,
            "postPercent": post_score / MAX_CATEGORY_SCORE * 100 if post else None,
            "improvement": improvement,
        })

    overall = {
        "prePercent": pre.percent if pre else None,
        "postPercent": post.percent if post else None,
        "preCategory": category_for_percent(pre.percent) if pre else None,
        "postCategory": category_for_percent(post.percent) if post else None,
        "improvement": post.percent - pre.percent if pre and post else None,
    }
    return {
        "userId": user_id,
        "pretestAt": pre.created_at if pre else None,
        "posttestAt": post.created_at if post else None,
        "categories": rows,
        "overall": overall,
    }
