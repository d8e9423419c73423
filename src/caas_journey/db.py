"""Database initialization and the storage client handed to every service."""
import logging
import sqlite3
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator

from caas_journey.errors import StorageUnavailable

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".caas_journey" / "journey.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT,
    username TEXT,
    role TEXT NOT NULL DEFAULT 'student',
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS progress (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL REFERENCES users(id),
    level_id TEXT NOT NULL,
    score REAL NOT NULL,
    completed INTEGER NOT NULL DEFAULT 0,
    completed_at TEXT,
    UNIQUE(user_id, level_id)
);

CREATE TABLE IF NOT EXISTS stage_attempts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    stage TEXT NOT NULL,
    answers TEXT NOT NULL,
    score REAL NOT NULL,
    passed INTEGER NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS quiz_results (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    answers TEXT NOT NULL,
    scores TEXT NOT NULL,
    total REAL NOT NULL,
    percent REAL NOT NULL,
    category TEXT,
    is_posttest INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS evaluations (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    eval_type TEXT NOT NULL,
    answers TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_stage_attempts_user ON stage_attempts(user_id, stage);
CREATE INDEX IF NOT EXISTS idx_quiz_results_posttest ON quiz_results(is_posttest);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class StoreState(Enum):
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"


class Store:
    """Storage client constructed once at startup and passed to each service.

    A new store is UNAVAILABLE until open() succeeds. Every call checks the
    state, so a store that failed to open raises StorageUnavailable instead of
    failing somewhere inside a query.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        self.state = StoreState.UNAVAILABLE
        self.reason = "store has not been opened"

    def open(self) -> "Store":
        try:
            init_db(self.db_path)
        except (OSError, sqlite3.Error) as e:
            self.state = StoreState.UNAVAILABLE
            self.reason = str(e)
            logger.error("Could not open database at %s: %s", self.db_path, e)
            return self
        self.state = StoreState.CONNECTED
        self.reason = ""
        logger.info("Database ready at %s", self.db_path)
        return self

    @property
    def available(self) -> bool:
        return self.state is StoreState.CONNECTED

    def ensure_available(self) -> None:
        if not self.available:
            raise StorageUnavailable(f"Database unavailable: {self.reason}")

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection; commit on success, roll back on error, always close."""
        self.ensure_available()
        try:
            conn = get_connection(self.db_path)
        except sqlite3.Error as e:
            logger.error("Connection to %s failed: %s", self.db_path, e)
            raise StorageUnavailable(f"Database unavailable: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.OperationalError as e:
            conn.rollback()
            logger.error("Database operation failed: %s", e)
            raise StorageUnavailable(f"Database unavailable: {e}") from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()
