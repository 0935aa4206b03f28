import logging
import queue
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path

from ...errors import ConnectionPoolExhausted, DatabaseError

_LOGGER = logging.getLogger(__name__)


class ConnectionPool:
    """Lazily created, bounded pool of SQLite connections."""

    def __init__(self, db_path: Path, pool_size: int = 5, timeout: float = 30.0):
        self._db_path = db_path
        self._pool_size = pool_size
        self._timeout = timeout
        self._pool: queue.Queue = queue.Queue(maxsize=pool_size)
        self._created = 0
        self._lock = threading.Lock()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _create_connection(self) -> sqlite3.Connection:
        if str(self._db_path) != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
        except sqlite3.Error as exc:
            raise DatabaseError(f"Cannot open {self._db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def _acquire(self) -> sqlite3.Connection:
        try:
            return self._pool.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            if self._created < self._pool_size:
                self._created += 1
                try:
                    return self._create_connection()
                except Exception:
                    self._created -= 1
                    raise

        try:
            return self._pool.get(timeout=self._timeout)
        except queue.Empty:
            raise ConnectionPoolExhausted(
                f"No connections available within {self._timeout}s "
                f"(pool_size={self._pool_size})"
            )

    def _release(self, conn: sqlite3.Connection):
        try:
            self._pool.put_nowait(conn)
        except queue.Full:
            conn.close()

    @contextmanager
    def connection(self):
        """Yield a connection; commit on success and roll back on error."""
        conn = self._acquire()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            _LOGGER.error("SQLite operation failed on %s: %s", self._db_path, exc)
            raise DatabaseError(str(exc)) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)

    def close_all(self):
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except queue.Empty:
                break
        with self._lock:
            self._created = 0
