# tests/test_attempts.py
import pytest

from caas_journey.attempts import (
    list_attempts, list_quiz_results, record_quiz_result, record_stage_attempt,
)
from caas_journey.db import Store
from caas_journey.errors import InvalidInput, StorageUnavailable


def test_record_stage_attempt_returns_id(store):
    attempt_id = record_stage_attempt(store, "u1", "concern", [5, 4, 3, 2, 1, 5], 20, True)
    assert attempt_id
    attempts = list_attempts(store, "u1")
    assert len(attempts) == 1
    assert attempts[0].id == attempt_id
    assert attempts[0].answers == [5, 4, 3, 2, 1, 5]
    assert attempts[0].passed is True


def test_record_stage_attempt_never_overwrites(store):
    first = record_stage_attempt(store, "u1", "concern", [1], 10, False)
    second = record_stage_attempt(store, "u1", "concern", [1], 10, False)
    assert first != second
    assert len(list_attempts(store, "u1", "concern")) == 2


def test_record_stage_attempt_accepts_empty_answers(store):
    record_stage_attempt(store, "u1", "concern", [], 0, False)
    assert len(list_attempts(store, "u1")) == 1


@pytest.mark.parametrize("user_id,stage,answers,score,passed", [
    ("", "concern", [1], 10, True),
    ("u1", "", [1], 10, True),
    ("u1", "concern", "1,2,3", 10, True),
    ("u1", "concern", None, 10, True),
    ("u1", "concern", [1], "10", True),
    ("u1", "concern", [1], True, True),
    ("u1", "concern", [1], 10, "yes"),
    ("u1", "concern", [1], 10, 1),
])
def test_record_stage_attempt_invalid_input(store, user_id, stage, answers, score, passed):
    with pytest.raises(InvalidInput):
        record_stage_attempt(store, user_id, stage, answers, score, passed)
    assert list_attempts(store) == []


def test_record_stage_attempt_unavailable_store(tmp_db):
    with pytest.raises(StorageUnavailable):
        record_stage_attempt(Store(tmp_db), "u1", "concern", [1], 10, True)


def test_list_attempts_newest_first(store):
    first = record_stage_attempt(store, "u1", "concern", [1], 10, False)
    second = record_stage_attempt(store, "u1", "control", [2], 12, False)
    third = record_stage_attempt(store, "u1", "concern", [3], 20, True)
    assert [a.id for a in list_attempts(store, "u1")] == [third, second, first]


def test_list_attempts_filters(store):
    record_stage_attempt(store, "u1", "concern", [1], 10, False)
    record_stage_attempt(store, "u1", "control", [1], 10, False)
    record_stage_attempt(store, "u2", "concern", [1], 10, False)
    assert len(list_attempts(store)) == 3
    assert len(list_attempts(store, "u1")) == 2
    assert len(list_attempts(store, stage="concern")) == 2
    assert len(list_attempts(store, "u1", "control")) == 1
    assert list_attempts(store, "u3") == []


def test_record_quiz_result(store):
    answers = {"concern": [5] * 6, "control": [4] * 6, "curiosity": [3] * 6, "confidence": [2] * 6}
    scores = {"concern": 30, "control": 24, "curiosity": 18, "confidence": 12}
    quiz_id = record_quiz_result(store, "u1", answers, scores, 84, 70.0, "High", is_posttest=True)
    results = list_quiz_results(store, "u1")
    assert len(results) == 1
    assert results[0].id == quiz_id
    assert results[0].scores.control == 24
    assert results[0].is_posttest is True
    assert results[0].category == "High"


def test_record_quiz_result_defaults_missing_categories(store):
    record_quiz_result(store, "u1", {"concern": [5] * 6}, {"concern": 30}, 30, 25.0, "Very Low")
    result = list_quiz_results(store, "u1")[0]
    assert result.answers["confidence"] == []
    assert result.scores.confidence == 0
    assert result.is_posttest is False


@pytest.mark.parametrize("kwargs", [
    {"user_id": ""},
    {"answers": [1, 2]},
    {"scores": None},
    {"total": "84"},
    {"percent": None},
    {"is_posttest": "true"},
    {"answers": {"concern": "5,5,5"}},
    {"scores": {"concern": "30"}},
])
def test_record_quiz_result_invalid_input(store, kwargs):
    args = {
        "user_id": "u1", "answers": {"concern": [5] * 6}, "scores": {"concern": 30},
        "total": 30, "percent": 25.0, "category": "Very Low", "is_posttest": False,
    }
    args.update(kwargs)
    with pytest.raises(InvalidInput):
        record_quiz_result(store, **args)
    assert list_quiz_results(store) == []


def test_list_quiz_results_posttest_filter(store):
    record_quiz_result(store, "u1", {}, {}, 50, 41.6, "Low", is_posttest=False)
    record_quiz_result(store, "u1", {}, {}, 90, 75.0, "High", is_posttest=True)
    assert [r.total for r in list_quiz_results(store, "u1", is_posttest=True)] == [90]
    assert [r.total for r in list_quiz_results(store, "u1", is_posttest=False)] == [50]
    assert [r.total for r in list_quiz_results(store, "u1")] == [90, 50]
