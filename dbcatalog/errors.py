"""Error types for dbcatalog."""

from typing import Optional, Dict, Any, List


class CatalogError(Exception):
    """Base exception for catalog errors."""

    def __init__(self, message: str, code: str = "CATALOG_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for reports and run logs."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigError(CatalogError):
    """Invalid or unreadable configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIG_ERROR", details=details)


class IntrospectionError(CatalogError):
    """Error while introspecting a database.

    Carries the database and (when known) the object being read, plus the
    underlying driver exception.
    """

    default_code = "INTROSPECTION_ERROR"

    def __init__(
        self,
        message: str,
        database: str,
        object_name: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        details = {"database": database}
        if object_name:
            details["object"] = object_name
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, code=self.default_code, details=details)
        self.database = database
        self.object_name = object_name
        self.cause = cause

    def __str__(self) -> str:
        location = self.database
        if self.object_name:
            location = f"{self.database}.{self.object_name}"
        if self.cause is not None:
            return f"[{location}] {self.message}: {self.cause}"
        return f"[{location}] {self.message}"


class ConnectionError(IntrospectionError):
    """Engine unreachable, authentication rejected or driver missing."""

    default_code = "CONNECTION_ERROR"


class QueryError(IntrospectionError):
    """Malformed or engine-incompatible query."""

    default_code = "QUERY_ERROR"


class DecodeError(IntrospectionError):
    """Result row does not match the expected shape."""

    default_code = "DECODE_ERROR"


class CatalogUnavailableError(CatalogError):
    """No configured database could be reached."""

    def __init__(self, errors: List[IntrospectionError]):
        databases = [e.database for e in errors]
        super().__init__(
            f"No database could be reached ({', '.join(databases)})",
            code="CATALOG_UNAVAILABLE",
            details={"errors": [e.to_dict() for e in errors]},
        )
        self.errors = errors


class WriteError(CatalogError):
    """An export artifact could not be written."""

    def __init__(self, message: str, path: str, cause: Optional[BaseException] = None):
        details = {"path": path}
        if cause is not None:
            details["cause"] = f"{type(cause).__name__}: {cause}"
        super().__init__(message, code="WRITE_ERROR", details=details)
        self.path = path
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message} ({self.path}): {self.cause}"
        return f"{self.message} ({self.path})"


class SnapshotError(CatalogError):
    """A catalog snapshot could not be read or decoded."""

    def __init__(self, message: str, path: str):
        super().__init__(message, code="SNAPSHOT_ERROR", details={"path": path})
        self.path = path
