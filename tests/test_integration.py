# tests/test_integration.py
"""End-to-end test of a student's journey."""
from caas_journey.leaderboard import compute_leaderboard
from caas_journey.progress import get_progress
from caas_journey.reports import compare_pre_post
from caas_journey.stages import (
    STAGE_ORDER, get_latest_status_per_stage, next_stage, record_stage_completion,
    submit_caas_quiz,
)
from caas_journey.users import create_or_update_user, get_user


def test_full_journey(store):
    create_or_update_user(store, "ayu", username="Ayu")
    create_or_update_user(store, "budi", username="Budi")

    # Pretest
    pre = submit_caas_quiz(store, "ayu", {name: [3] * 6 for name in STAGE_ORDER})
    assert pre["category"] == "Medium"

    # Fail concern once, then pass every stage in order
    outcome = record_stage_completion(store, "ayu", "concern", [2] * 6, 12, threshold=18)
    assert outcome["passed"] is False
    stage = "concern"
    while stage:
        outcome = record_stage_completion(store, "ayu", stage, [4] * 6, 24, threshold=18)
        assert outcome["passed"] is True
        stage = next_stage(stage)

    latest = get_latest_status_per_stage(store, "ayu")
    assert set(latest) == set(STAGE_ORDER)
    assert all(s.passed for s in latest.values())
    progress = get_progress(store, "ayu")
    assert [p.level_id for p in progress] == list(STAGE_ORDER)
    assert all(p.completed for p in progress)
    assert len(get_user(store, "ayu").progress) == 4

    # Posttests
    submit_caas_quiz(store, "ayu", {name: [5] * 6 for name in STAGE_ORDER}, is_posttest=True)
    submit_caas_quiz(store, "ayu", {name: [4] * 6 for name in STAGE_ORDER}, is_posttest=True)
    submit_caas_quiz(store, "budi", {name: [4] * 6 for name in STAGE_ORDER}, is_posttest=True)

    board = compute_leaderboard(store)
    assert [(e.rank, e.username, e.total) for e in board] == [(1, "Ayu", 120), (2, "Budi", 96)]

    report = compare_pre_post(store, "ayu")
    # latest posttest (all 4s) against the pretest (all 3s)
    assert all(row["improvement"] == 6 for row in report["categories"])
    assert report["overall"]["postCategory"] == "High"
