"""Posttest leaderboard: best result per student, ranked by total."""
import logging
import sqlite3

from caas_journey.db import Store
from caas_journey.errors import InvalidInput, PartialLookupFailure
from caas_journey.models import LeaderboardEntry, QuizResult

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
PLACEHOLDER_NAME = "Siswa"


def best_results(results: list[QuizResult]) -> list[QuizResult]:
    """One result per user: the highest total, the earliest one on a tie.

    ``results`` must be ordered oldest first. Returned best-first.
    """
    best = {}
    for result in results:
        if not result.user_id:
            continue
        current = best.get(result.user_id)
        if current is None or result.total > current.total:
            best[result.user_id] = result
    # equal totals: the result reached first ranks first
    return sorted(best.values(), key=lambda r: (-r.total, r.created_at))


def resolve_username(conn: sqlite3.Connection, user_id: str) -> str:
    try:
        row = conn.execute("SELECT username, email FROM users WHERE id = ?", (user_id,)).fetchone()
    except sqlite3.Error as e:
        raise PartialLookupFailure(f"Username lookup failed for {user_id}: {e}") from e
    if row is None:
        return PLACEHOLDER_NAME
    return row["username"] or row["email"] or PLACEHOLDER_NAME


def compute_leaderboard(store: Store, limit: int = DEFAULT_LIMIT) -> list[LeaderboardEntry]:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise InvalidInput("limit must be a positive integer")
    with store.connection() as conn:
        rows = conn.execute(
            "SELECT * FROM quiz_results WHERE is_posttest = 1 ORDER BY created_at ASC, rowid ASC"
        ).fetchall()
        ranked = best_results([QuizResult.from_row(r) for r in rows])[:limit]
        leaderboard = []
        for rank, result in enumerate(ranked, 1):
            try:
                username = resolve_username(conn, result.user_id)
            except PartialLookupFailure as e:
                logger.warning("%s; using placeholder", e)
                username = PLACEHOLDER_NAME
            leaderboard.append(LeaderboardEntry(
                rank=rank,
                user_id=result.user_id,
                username=username,
                total=result.total,
                percent=result.percent,
            ))
    return leaderboard
