"""Run logging service for dbcatalog.

Provides a high-level interface for recording export runs,
including automatic context capture and error handling.
"""

import logging
import os
import sqlite3
import sys
import time
import traceback
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .run_db import RunLogDatabase

logger = logging.getLogger(__name__)

# Global logger instance
_run_logger: Optional["RunLogger"] = None


def get_run_logger() -> "RunLogger":
    """Get or create the global run logger instance."""
    global _run_logger
    if _run_logger is None:
        from ..config import settings

        _run_logger = RunLogger(
            db_path=settings.run_logging_db_path,
            enabled=settings.run_logging_enabled,
            retention_days=settings.run_logging_retention_days,
        )
    return _run_logger


def reset_run_logger() -> None:
    """Drop the global instance so the next call re-reads settings."""
    global _run_logger
    if _run_logger is not None and _run_logger.db is not None:
        _run_logger.db.close()
    _run_logger = None


@dataclass
class RunContext:
    """Context for an export run."""

    run_id: str
    command: str
    engine: Optional[str] = None
    server: Optional[str] = None
    databases: List[str] = field(default_factory=list)
    output_mode: Optional[str] = None
    cached: bool = False
    arguments: Dict[str, Any] = field(default_factory=dict)
    start_time: float = field(default_factory=time.time)

    # Results that get populated during the run
    entries_count: int = 0
    columns_count: int = 0
    dependencies_count: int = 0
    error_count: int = 0
    artifacts_written: int = 0
    artifact_errors: int = 0


class RunLogger:
    """High-level logger for export runs.

    Example usage:
        run_logger = get_run_logger()

        with run_logger.log_run(
            command="export",
            engine="sqlite",
            databases=["main"],
            output_mode="json",
        ) as ctx:
            catalog, errors = run_introspection(config)
            ctx.entries_count = len(catalog)
            ctx.error_count = len(errors)

            # If an exception escapes, it's recorded and re-raised
    """

    def __init__(self, db_path: Optional[str] = None, enabled: bool = True, retention_days: int = 30):
        """Initialize the run logger.

        Args:
            db_path: Path to the SQLite database. If None, uses default.
            enabled: Whether logging is enabled.
            retention_days: Runs older than this are deleted on start.
        """
        self.enabled = enabled
        self._db: Optional[RunLogDatabase] = None

        if self.enabled:
            try:
                self._db = RunLogDatabase(db_path)
                self._db.initialize()
                # Clean up old logs on initialization
                self._db.cleanup_old_runs(retention_days)
            except (sqlite3.Error, OSError) as e:
                logger.warning("Failed to initialize run logging: %s", e)
                self._db = None
                self.enabled = False

    @property
    def db(self) -> Optional[RunLogDatabase]:
        """Get the database instance."""
        return self._db

    def _get_environment_info(self) -> Dict[str, str]:
        """Get environment information for logging."""
        from .. import __version__

        return {
            "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
            "package_version": __version__,
            "working_directory": os.getcwd(),
        }

    @contextmanager
    def log_run(
        self,
        command: str,
        engine: Optional[str] = None,
        server: Optional[str] = None,
        databases: Optional[List[str]] = None,
        output_mode: Optional[str] = None,
        cached: bool = False,
        arguments: Optional[Dict[str, Any]] = None,
    ):
        """Context manager for logging an export run.

        Args:
            command: Command name (e.g., 'export')
            engine: Database engine
            server: Server, account or database file
            databases: Configured database names
            output_mode: Selected output mode
            cached: Whether the catalog came from a snapshot
            arguments: All command arguments

        Yields:
            RunContext that can be updated during the run
        """
        run_id = str(uuid.uuid4())[:8]
        ctx = RunContext(
            run_id=run_id,
            command=command,
            engine=engine,
            server=server,
            databases=list(databases or []),
            output_mode=output_mode,
            cached=cached,
            arguments=arguments or {},
        )

        if not self.enabled or self._db is None:
            # If logging disabled, just yield context and return
            yield ctx
            return

        # Insert initial run entry
        try:
            env_info = self._get_environment_info()
            self._db.insert_run(
                run_id=run_id,
                command=command,
                engine=engine,
                server=server,
                databases=ctx.databases,
                output_mode=output_mode,
                cached=cached,
                arguments=arguments,
                python_version=env_info["python_version"],
                package_version=env_info["package_version"],
                working_directory=env_info["working_directory"],
            )
        except sqlite3.Error as e:
            logger.warning("Failed to log run start: %s", e)

        try:
            yield ctx
        except Exception as e:
            duration_ms = int((time.time() - ctx.start_time) * 1000)
            self._update_run_results(ctx)
            try:
                self._db.update_error(
                    run_id=run_id,
                    error_message=str(e),
                    error_type=type(e).__name__,
                    error_traceback=traceback.format_exc(),
                    duration_ms=duration_ms,
                )
            except sqlite3.Error as log_err:
                logger.warning("Failed to log run error: %s", log_err)

            logger.debug("Run %s failed after %dms: %s", run_id, duration_ms, e)

            # Re-raise the original exception
            raise
        except BaseException as e:
            # Ctrl-C, SystemExit or cancellation
            duration_ms = int((time.time() - ctx.start_time) * 1000)
            self._update_run_results(ctx)
            try:
                self._db.update_interrupted(run_id, type(e).__name__, duration_ms)
            except sqlite3.Error as log_err:
                logger.warning("Failed to log run interruption: %s", log_err)

            logger.debug("Run %s interrupted after %dms (%s)", run_id, duration_ms, type(e).__name__)
            raise

        # Update with final results
        self._update_run_results(ctx)

        duration_ms = int((time.time() - ctx.start_time) * 1000)
        try:
            self._db.update_success(run_id, duration_ms)
        except sqlite3.Error as e:
            logger.warning("Failed to log run completion: %s", e)

        logger.debug("Run %s completed successfully in %dms", run_id, duration_ms)

    def _update_run_results(self, ctx: RunContext) -> None:
        """Update the run entry with collected results."""
        if not self._db:
            return

        try:
            self._db.update_introspection_results(
                run_id=ctx.run_id,
                entries_count=ctx.entries_count,
                columns_count=ctx.columns_count,
                dependencies_count=ctx.dependencies_count,
                introspection_errors=ctx.error_count,
            )
            self._db.update_export_results(
                run_id=ctx.run_id,
                artifacts_written=ctx.artifacts_written,
                artifact_errors=ctx.artifact_errors,
            )
        except sqlite3.Error as e:
            logger.warning("Failed to update run results: %s", e)

    def query_runs(
        self,
        status: Optional[str] = None,
        engine: Optional[str] = None,
        since_hours: Optional[int] = None,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        """Query export runs with optional filters."""
        if not self.enabled or not self._db:
            return []

        return self._db.query_runs(
            status=status,
            engine=engine,
            since_hours=since_hours,
            limit=limit,
        )

    def get_run(self, run_id: str) -> Optional[Dict[str, Any]]:
        """Get a specific run by ID."""
        if not self.enabled or not self._db:
            return None

        return self._db.get_run_by_id(run_id)


def log_export_run(
    engine: Optional[str] = None,
    server: Optional[str] = None,
    databases: Optional[List[str]] = None,
    output_mode: Optional[str] = None,
    cached: bool = False,
    arguments: Optional[Dict[str, Any]] = None,
):
    """Convenience function to get a logging context manager.

    Example:
        with log_export_run("sqlite", "./app.db", ["main"], "files") as ctx:
            # Do work
            ctx.entries_count = 17
    """
    return get_run_logger().log_run(
        command="export",
        engine=engine,
        server=server,
        databases=databases,
        output_mode=output_mode,
        cached=cached,
        arguments=arguments,
    )
