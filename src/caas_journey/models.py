"""Data classes for the journey domain model.

Rows are decoded here once, so services never re-derive defaults from raw
columns.
"""
import json
import sqlite3
from dataclasses import dataclass, field
from typing import Optional

CATEGORIES = ("concern", "control", "curiosity", "confidence")

ROLES = ("student", "evaluator")


def _json_list(raw: Optional[str]) -> list:
    if not raw:
        return []
    value = json.loads(raw)
    return value if isinstance(value, list) else []


def _json_dict(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    value = json.loads(raw)
    return value if isinstance(value, dict) else {}


@dataclass
class Progress:
    level_id: str
    score: float
    completed: bool = False
    completed_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Progress":
        return cls(
            level_id=row["level_id"],
            score=row["score"],
            completed=bool(row["completed"]),
            completed_at=row["completed_at"] if row["completed"] else None,
        )

    def to_dict(self) -> dict:
        data = {"levelId": self.level_id, "score": self.score, "completed": self.completed}
        if self.completed_at is not None:
            data["completedAt"] = self.completed_at
        return data


@dataclass
class User:
    id: str
    role: str = "student"
    email: str = ""
    username: str = ""
    progress: list[Progress] = field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: sqlite3.Row, progress: Optional[list[Progress]] = None) -> "User":
        return cls(
            id=row["id"],
            role=row["role"] or "student",
            email=row["email"] or "",
            username=row["username"] or "",
            progress=progress or [],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @property
    def display_name(self) -> str:
        return self.username or self.email

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "role": self.role,
            "email": self.email,
            "username": self.username,
            "progress": [p.to_dict() for p in self.progress],
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class StageAttempt:
    id: str
    user_id: str
    stage: str
    answers: list
    score: float
    passed: bool
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "StageAttempt":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            stage=row["stage"],
            answers=_json_list(row["answers"]),
            score=row["score"],
            passed=bool(row["passed"]),
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "stage": self.stage,
            "answers": list(self.answers),
            "score": self.score,
            "passed": self.passed,
            "createdAt": self.created_at,
        }


@dataclass
class StageStatus:
    """Latest known outcome of one stage."""
    score: float
    passed: bool
    created_at: str

    def to_dict(self) -> dict:
        return {"score": self.score, "passed": self.passed, "createdAt": self.created_at}


@dataclass
class CategoryScores:
    concern: float = 0
    control: float = 0
    curiosity: float = 0
    confidence: float = 0

    @classmethod
    def from_mapping(cls, data: dict) -> "CategoryScores":
        return cls(**{name: data.get(name) or 0 for name in CATEGORIES})

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in CATEGORIES}


@dataclass
class QuizResult:
    id: str
    user_id: str
    answers: dict
    scores: CategoryScores
    total: float
    percent: float
    category: str
    is_posttest: bool
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "QuizResult":
        raw_answers = _json_dict(row["answers"])
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            answers={name: raw_answers.get(name) or [] for name in CATEGORIES},
            scores=CategoryScores.from_mapping(_json_dict(row["scores"])),
            total=row["total"] or 0,
            percent=row["percent"] or 0,
            category=row["category"] or "",
            is_posttest=bool(row["is_posttest"]),
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "answers": {name: list(self.answers[name]) for name in CATEGORIES},
            "scores": self.scores.to_dict(),
            "total": self.total,
            "percent": self.percent,
            "category": self.category,
            "isPosttest": self.is_posttest,
            "createdAt": self.created_at,
        }


@dataclass
class LeaderboardEntry:
    rank: int
    user_id: str
    username: str
    total: float
    percent: float

    def to_dict(self) -> dict:
        return {
            "rank": self.rank,
            "userId": self.user_id,
            "username": self.username,
            "total": self.total,
            "percent": self.percent,
        }


@dataclass
class Evaluation:
    id: str
    user_id: str
    eval_type: str
    answers: dict
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "Evaluation":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            eval_type=row["eval_type"],
            answers=json.loads(row["answers"]) if row["answers"] else {},
            created_at=row["created_at"],
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "type": self.eval_type,
            "answers": self.answers,
            "createdAt": self.created_at,
        }
