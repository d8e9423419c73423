"""Per-user level progress: one entry per level, overwritten in place."""
import logging

from caas_journey.attempts import is_number
from caas_journey.db import Store
from caas_journey.errors import InvalidInput, UserNotFound
from caas_journey.models import Progress
from caas_journey.users import load_progress, now_iso

logger = logging.getLogger(__name__)


def get_progress(store: Store, user_id: str) -> list[Progress]:
    """The user's progress list; empty when nothing has been recorded yet."""
    with store.connection() as conn:
        return load_progress(conn, user_id)


def upsert_progress(store: Store, user_id: str, level_id: str, score: float, completed: bool) -> list[Progress]:
    """Replace the entry for level_id, or append one, and return the full list.

    The write is keyed on (user_id, level_id) inside an immediate transaction,
    so concurrent upserts to other levels of the same user are never lost.
    """
    if not user_id:
        raise InvalidInput("userId is required")
    if not level_id or not isinstance(level_id, str):
        raise InvalidInput("levelId is required")
    if not is_number(score):
        raise InvalidInput("score must be a number")
    if not isinstance(completed, bool):
        raise InvalidInput("completed must be a boolean")
    now = now_iso()
    completed_at = now if completed else None
    with store.connection() as conn:
        conn.execute("BEGIN IMMEDIATE")
        user = conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
        if user is None:
            raise UserNotFound(user_id)
        conn.execute(
            """INSERT INTO progress (user_id, level_id, score, completed, completed_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(user_id, level_id) DO UPDATE SET
                score = excluded.score,
                completed = excluded.completed,
                completed_at = excluded.completed_at""",
            (user_id, level_id, score, int(completed), completed_at),
        )
        conn.execute("UPDATE users SET updated_at = ? WHERE id = ?", (now, user_id))
        progress = load_progress(conn, user_id)
    logger.info("Progress for %s on %s: score=%s completed=%s", user_id, level_id, score, completed)
    return progress
