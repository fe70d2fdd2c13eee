"""Run logging module for dbcatalog.

Records export runs in a local database to help with
debugging and auditing.
"""

from dbcatalog.logging.run_db import RunLogDatabase, get_default_run_db_path
from dbcatalog.logging.run_service import (
    RunContext,
    RunLogger,
    get_run_logger,
    log_export_run,
    reset_run_logger,
)

__all__ = [
    "RunLogDatabase",
    "get_default_run_db_path",
    "RunContext",
    "RunLogger",
    "get_run_logger",
    "log_export_run",
    "reset_run_logger",
]
