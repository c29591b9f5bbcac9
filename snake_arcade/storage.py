"""SQLite key/value store for the persisted high score."""

import logging
import sqlite3
import threading
from typing import Optional

from .constants import DB_PATH, HIGH_SCORE_KEY

logger = logging.getLogger(__name__)


class HighScoreStore:
    """Best-effort persistence: read and write failures are logged, never raised.

    Saves may arrive from executor threads in any order, so a write never
    lowers the stored value.
    """

    def __init__(self, db_path: str = DB_PATH, key: str = HIGH_SCORE_KEY):
        self.db_path = db_path
        self.key = key
        self.conn: Optional[sqlite3.Connection] = None
        self.lock = threading.Lock()
        self._init_db()

    def _init_db(self):
        try:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self.conn.execute('''
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            ''')
            self.conn.commit()
        except sqlite3.Error:
            logger.warning("High score store unavailable at %s", self.db_path, exc_info=True)
            self.conn = None

    def load(self) -> int:
        """Stored high score; 0 if missing, unreadable or not a non-negative integer."""
        with self.lock:
            if self.conn is None:
                return 0
            try:
                row = self.conn.execute("SELECT value FROM settings WHERE key = ?", (self.key,)).fetchone()
            except sqlite3.Error:
                logger.warning("Could not read high score", exc_info=True)
                return 0
        if row is None:
            return 0
        try:
            value = int(row[0])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid stored high score %r", row[0])
            return 0
        return value if value >= 0 else 0

    def save(self, value: int):
        with self.lock:
            if self.conn is None:
                return
            try:
                self.conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value "
                    "WHERE CAST(settings.value AS INTEGER) < CAST(excluded.value AS INTEGER)",
                    (self.key, str(value)),
                )
                self.conn.commit()
            except sqlite3.Error:
                logger.warning("Could not save high score %d", value, exc_info=True)

    def close(self):
        with self.lock:
            if self.conn:
                self.conn.close()
                self.conn = None
