# tests/test_progress.py
import threading

import pytest

from caas_journey.errors import InvalidInput, UserNotFound
from caas_journey.progress import get_progress, upsert_progress
from caas_journey.users import create_or_update_user


def test_get_progress_empty_for_new_user(store, student):
    assert get_progress(store, "u1") == []


def test_get_progress_unknown_user_is_empty(store):
    assert get_progress(store, "nobody") == []


def test_upsert_progress_appends(store, student):
    progress = upsert_progress(store, "u1", "concern", 20, True)
    assert len(progress) == 1
    assert progress[0].level_id == "concern"
    assert progress[0].score == 20
    assert progress[0].completed is True
    assert progress[0].completed_at is not None


def test_upsert_progress_incomplete_has_no_timestamp(store, student):
    progress = upsert_progress(store, "u1", "concern", 10, False)
    assert progress[0].completed_at is None


def test_upsert_progress_replaces_same_level(store, student):
    upsert_progress(store, "u1", "concern", 10, False)
    progress = upsert_progress(store, "u1", "concern", 22, True)
    assert len(progress) == 1
    assert progress[0].score == 22
    assert progress[0].completed is True


def test_upsert_progress_is_idempotent(store, student):
    upsert_progress(store, "u1", "concern", 20, True)
    upsert_progress(store, "u1", "concern", 20, True)
    progress = get_progress(store, "u1")
    assert len(progress) == 1
    assert progress[0].score == 20


def test_upsert_progress_keeps_level_order(store, student):
    upsert_progress(store, "u1", "concern", 20, True)
    upsert_progress(store, "u1", "control", 19, True)
    upsert_progress(store, "u1", "concern", 25, True)
    assert [p.level_id for p in get_progress(store, "u1")] == ["concern", "control"]


def test_completed_then_failed_clears_timestamp(store, student):
    upsert_progress(store, "u1", "concern", 20, True)
    progress = upsert_progress(store, "u1", "concern", 12, False)
    assert progress[0].completed is False
    assert progress[0].completed_at is None


def test_upsert_progress_missing_user(store):
    with pytest.raises(UserNotFound):
        upsert_progress(store, "missingUser", "concern", 20, True)
    assert get_progress(store, "missingUser") == []


@pytest.mark.parametrize("level_id,score,completed", [
    ("", 20, True),
    ("concern", "20", True),
    ("concern", None, True),
    ("concern", 20, "true"),
])
def test_upsert_progress_invalid_input(store, student, level_id, score, completed):
    with pytest.raises(InvalidInput):
        upsert_progress(store, "u1", level_id, score, completed)
    assert get_progress(store, "u1") == []


def test_progress_is_per_user(store, student):
    create_or_update_user(store, "u2")
    upsert_progress(store, "u1", "concern", 20, True)
    upsert_progress(store, "u2", "concern", 5, False)
    assert get_progress(store, "u1")[0].score == 20
    assert get_progress(store, "u2")[0].score == 5


def test_concurrent_upserts_to_different_levels(store, student):
    """Parallel writers for one user must not drop each other's levels."""
    levels = ["concern", "control", "curiosity", "confidence"] * 3
    errors = []

    def worker(level, score):
        try:
            upsert_progress(store, "u1", level, score, True)
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(lvl, i)) for i, lvl in enumerate(levels)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []
    progress = get_progress(store, "u1")
    assert sorted(p.level_id for p in progress) == ["concern", "confidence", "control", "curiosity"]
