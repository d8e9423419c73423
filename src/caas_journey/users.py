"""User records owned by registration; the journey reads them and their progress."""
import logging
import sqlite3
from datetime import datetime, timezone

from caas_journey.db import Store
from caas_journey.errors import InvalidInput, UserNotFound
from caas_journey.models import ROLES, Progress, User

logger = logging.getLogger(__name__)

USER_FIELDS = ("email", "username", "role")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def load_progress(conn: sqlite3.Connection, user_id: str) -> list[Progress]:
    rows = conn.execute(
        "SELECT * FROM progress WHERE user_id = ? ORDER BY id", (user_id,)
    ).fetchall()
    return [Progress.from_row(r) for r in rows]


def fetch_user(conn: sqlite3.Connection, user_id: str) -> User | None:
    row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
    if row is None:
        return None
    return User.from_row(row, load_progress(conn, user_id))


def get_user(store: Store, user_id: str) -> User:
    with store.connection() as conn:
        user = fetch_user(conn, user_id)
    if user is None:
        raise UserNotFound(user_id)
    return user


def create_or_update_user(store: Store, user_id: str, **fields) -> User:
    """Insert the user or update the given fields of an existing one."""
    if not user_id:
        raise InvalidInput("userId is required")
    unknown = set(fields) - set(USER_FIELDS)
    if unknown:
        raise InvalidInput(f"Unknown user fields: {', '.join(sorted(unknown))}")
    if "role" in fields and fields["role"] not in ROLES:
        raise InvalidInput(f"role must be one of: {', '.join(ROLES)}")
    now = now_iso()
    with store.connection() as conn:
        existing = conn.execute("SELECT id FROM users WHERE id = ?", (user_id,)).fetchone()
        if existing is None:
            conn.execute(
                "INSERT INTO users (id, email, username, role, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?)",
                (
                    user_id,
                    fields.get("email", ""),
                    fields.get("username", ""),
                    fields.get("role", "student"),
                    now,
                    now,
                ),
            )
            logger.info("Registered user %s", user_id)
        elif fields:
            assignments = ", ".join(f"{name} = ?" for name in fields)
            conn.execute(
                f"UPDATE users SET {assignments}, updated_at = ? WHERE id = ?",
                (*fields.values(), now, user_id),
            )
        user = fetch_user(conn, user_id)
    return user


def list_users(store: Store, role: str | None = None) -> list[User]:
    """All users, optionally only one role. Administrative view."""
    with store.connection() as conn:
        if role in ROLES:
            rows = conn.execute(
                "SELECT * FROM users WHERE role = ? ORDER BY created_at", (role,)
            ).fetchall()
        else:
            rows = conn.execute("SELECT * FROM users ORDER BY created_at").fetchall()
        return [User.from_row(r, load_progress(conn, r["id"])) for r in rows]
