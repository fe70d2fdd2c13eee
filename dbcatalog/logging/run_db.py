"""Database operations for export run logging."""

import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# SQL schema for run logging
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS export_runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    run_id TEXT UNIQUE NOT NULL,
    timestamp TEXT NOT NULL,
    command TEXT NOT NULL,
    engine TEXT,
    server TEXT,
    databases TEXT,  -- JSON array
    output_mode TEXT,
    cached BOOLEAN DEFAULT FALSE,
    arguments TEXT,  -- JSON of all arguments
    status TEXT DEFAULT 'started',  -- 'started', 'success', 'error', 'interrupted'
    duration_ms INTEGER,

    -- Introspection results
    entries_count INTEGER,
    columns_count INTEGER,
    dependencies_count INTEGER,
    introspection_errors INTEGER,

    -- Export results
    artifacts_written INTEGER,
    artifact_errors INTEGER,

    -- Error information
    error_message TEXT,
    error_type TEXT,
    error_traceback TEXT,

    -- Environment info
    python_version TEXT,
    package_version TEXT,
    working_directory TEXT
);

CREATE INDEX IF NOT EXISTS idx_export_runs_timestamp ON export_runs(timestamp);
CREATE INDEX IF NOT EXISTS idx_export_runs_status ON export_runs(status);
CREATE INDEX IF NOT EXISTS idx_export_runs_engine ON export_runs(engine);
"""


def _utc_timestamp(delta: timedelta = timedelta(0)) -> str:
    return (datetime.now(timezone.utc) - delta).strftime(TIMESTAMP_FORMAT)


def get_default_run_db_path() -> str:
    """Get the default database path (~/.dbcatalog/runs.db)."""
    catalog_dir = Path.home() / ".dbcatalog"
    catalog_dir.mkdir(exist_ok=True)
    return str(catalog_dir / "runs.db")


class RunLogDatabase:
    """SQLite database for export run logging."""

    def __init__(self, db_path: Optional[str] = None):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file. If None, uses default.
        """
        self.db_path = db_path or get_default_run_db_path()
        self._connection: Optional[sqlite3.Connection] = None
        self._initialized = False

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                isolation_level=None,  # Auto-commit mode
            )
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        try:
            conn = self._get_connection()
            conn.executescript(SCHEMA_SQL)
            self._initialized = True
            logger.debug("Run log database initialized at %s", self.db_path)
        except sqlite3.Error as e:
            logger.error("Failed to initialize run log database: %s", e)
            raise

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            self._initialized = False

    def insert_run(
        self,
        run_id: str,
        command: str,
        engine: Optional[str] = None,
        server: Optional[str] = None,
        databases: Optional[List[str]] = None,
        output_mode: Optional[str] = None,
        cached: bool = False,
        arguments: Optional[Dict[str, Any]] = None,
        python_version: Optional[str] = None,
        package_version: Optional[str] = None,
        working_directory: Optional[str] = None,
    ) -> int:
        """Insert a new run entry.

        Args:
            run_id: Unique identifier for this run
            command: Command name (e.g., 'export')
            engine: Database engine of the configuration
            server: Server, account or file of the configuration
            databases: Configured database names
            output_mode: Selected output mode
            cached: Whether the catalog came from a snapshot
            arguments: Dictionary of all command arguments
            python_version: Python version
            package_version: dbcatalog version
            working_directory: Current working directory

        Returns:
            The row ID of the inserted entry
        """
        self.initialize()
        conn = self._get_connection()

        databases_json = json.dumps(databases) if databases else None
        arguments_json = json.dumps(arguments, default=str) if arguments else None

        cursor = conn.execute(
            """
            INSERT INTO export_runs (
                run_id, timestamp, command, engine, server, databases,
                output_mode, cached, arguments, status,
                python_version, package_version, working_directory
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, 'started', ?, ?, ?)
            """,
            (
                run_id, _utc_timestamp(), command, engine, server, databases_json,
                output_mode, cached, arguments_json,
                python_version, package_version, working_directory,
            ),
        )
        return cursor.lastrowid

    def update_introspection_results(
        self,
        run_id: str,
        entries_count: int,
        columns_count: int,
        dependencies_count: int,
        introspection_errors: int,
    ) -> None:
        """Update run with introspection results."""
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE export_runs
            SET entries_count = ?, columns_count = ?, dependencies_count = ?,
                introspection_errors = ?
            WHERE run_id = ?
            """,
            (entries_count, columns_count, dependencies_count, introspection_errors, run_id),
        )

    def update_export_results(
        self,
        run_id: str,
        artifacts_written: int,
        artifact_errors: int,
    ) -> None:
        """Update run with export results."""
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE export_runs
            SET artifacts_written = ?, artifact_errors = ?
            WHERE run_id = ?
            """,
            (artifacts_written, artifact_errors, run_id),
        )

    def update_success(self, run_id: str, duration_ms: int) -> None:
        """Mark run as successful."""
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE export_runs
            SET status = 'success', duration_ms = ?
            WHERE run_id = ?
            """,
            (duration_ms, run_id),
        )

    def update_error(
        self,
        run_id: str,
        error_message: str,
        error_type: Optional[str] = None,
        error_traceback: Optional[str] = None,
        duration_ms: Optional[int] = None,
    ) -> None:
        """Mark run as failed with error details.

        Args:
            run_id: Run identifier
            error_message: Error message
            error_type: Exception type
            error_traceback: Full traceback
            duration_ms: Duration until error
        """
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE export_runs
            SET status = 'error', error_message = ?, error_type = ?,
                error_traceback = ?, duration_ms = ?
            WHERE run_id = ?
            """,
            (error_message, error_type, error_traceback, duration_ms, run_id),
        )

    def update_interrupted(self, run_id: str, error_type: str, duration_ms: Optional[int] = None) -> None:
        """Mark run as interrupted (KeyboardInterrupt, SystemExit, cancellation)."""
        conn = self._get_connection()
        conn.execute(
            """
            UPDATE export_runs
            SET status = 'interrupted', error_type = ?, duration_ms = ?
            WHERE run_id = ?
            """,
            (error_type, duration_ms, run_id),
        )

    def query_runs(
        self,
        status: Optional[str] = None,
        engine: Optional[str] = None,
        since_hours: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Dict[str, Any]]:
        """Query run entries with optional filters, newest first.

        Args:
            status: Filter by status
            engine: Filter by engine
            since_hours: Look back N hours (default: no limit)
            limit: Maximum number of results
            offset: Offset for pagination

        Returns:
            List of run entries as dictionaries
        """
        self.initialize()
        conn = self._get_connection()

        conditions = []
        params: List[Any] = []

        if since_hours is not None:
            conditions.append("timestamp >= ?")
            params.append(_utc_timestamp(timedelta(hours=since_hours)))

        if status:
            conditions.append("status = ?")
            params.append(status)

        if engine:
            conditions.append("engine = ?")
            params.append(engine)

        where_clause = " AND ".join(conditions) if conditions else "1=1"
        params.extend([limit, offset])

        query = f"""
            SELECT * FROM export_runs
            WHERE {where_clause}
            ORDER BY timestamp DESC, id DESC
            LIMIT ? OFFSET ?
        """

        cursor = conn.execute(query, params)
        return [dict(row) for row in cursor.fetchall()]

    def get_run_by_id(self, run_id: str) -> Optional[Dict[str, Any]]:
        """Get a specific run by ID."""
        self.initialize()
        conn = self._get_connection()

        cursor = conn.execute(
            "SELECT * FROM export_runs WHERE run_id = ?",
            (run_id,),
        )
        row = cursor.fetchone()

        return dict(row) if row else None

    def cleanup_old_runs(self, retention_days: int = 30) -> int:
        """Delete runs older than retention period.

        Args:
            retention_days: Number of days to retain runs

        Returns:
            Number of deleted rows
        """
        self.initialize()
        conn = self._get_connection()

        cursor = conn.execute(
            "DELETE FROM export_runs WHERE timestamp < ?",
            (_utc_timestamp(timedelta(days=retention_days)),),
        )

        deleted = cursor.rowcount
        if deleted > 0:
            logger.info("Cleaned up %d old run log entries", deleted)

        return deleted

    def __enter__(self):
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
