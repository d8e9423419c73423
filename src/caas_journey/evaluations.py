"""Teacher and self evaluations, stored as an append-only log."""
import json
import logging

from caas_journey.attempts import new_id
from caas_journey.db import Store
from caas_journey.errors import InvalidInput
from caas_journey.models import Evaluation
from caas_journey.users import now_iso

logger = logging.getLogger(__name__)


def record_evaluation(store: Store, user_id: str, eval_type: str, answers) -> str:
    if not user_id or not eval_type or not answers:
        raise InvalidInput("userId, type and answers are required")
    eval_id = new_id()
    with store.connection() as conn:
        conn.execute(
            "INSERT INTO evaluations (id, user_id, eval_type, answers, created_at) VALUES (?, ?, ?, ?, ?)",
            (eval_id, user_id, eval_type, json.dumps(answers), now_iso()),
        )
    logger.info("Recorded %s evaluation %s for %s", eval_type, eval_id, user_id)
    return eval_id


def list_evaluations(store: Store, user_id: str | None = None, eval_type: str | None = None) -> list[Evaluation]:
    clauses, params = [], []
    if user_id:
        clauses.append("user_id = ?")
        params.append(user_id)
    if eval_type:
        clauses.append("eval_type = ?")
        params.append(eval_type)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    with store.connection() as conn:
        rows = conn.execute(
            f"SELECT * FROM evaluations {where} ORDER BY created_at DESC, rowid DESC", params
        ).fetchall()
    return [Evaluation.from_row(r) for r in rows]
