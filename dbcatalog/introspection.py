"""Concurrent introspection of all configured databases."""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .config import CatalogConfig
from .database import create_adapter
from .database.base import EngineAdapter
from .database.models import Catalog, CatalogEntry
from .errors import CatalogUnavailableError, ConnectionError, IntrospectionError

logger = logging.getLogger(__name__)

AdapterFactory = Callable[[CatalogConfig, str], EngineAdapter]


@dataclass
class DatabaseResult:
    """Outcome of introspecting one database.

    ``entries`` holds everything produced before a failure, so a failed
    database still contributes its partial results.
    """
    database: str
    entries: List[CatalogEntry] = field(default_factory=list)
    error: Optional[IntrospectionError] = None
    cancelled: bool = False


class CatalogOrchestrator:
    """Fans out introspection, one task per configured database.

    Each task owns its adapter and connection and processes objects
    sequentially (columns, then definition, then dependencies). Tasks run
    concurrently without pooling or throttling; the blocking driver calls of
    a task run in a worker thread. Results are merged in completion order
    and errors are collected instead of raised.

    Cancellation is cooperative: once ``cancel()`` is called (or the awaiting
    coroutine is cancelled) no task starts another object, while queries
    already issued run to completion.
    """

    def __init__(self, config: CatalogConfig, adapter_factory: AdapterFactory = create_adapter):
        self.config = config
        self.adapter_factory = adapter_factory
        self._cancel_event = threading.Event()

    def cancel(self) -> None:
        """Stop starting new work."""
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    async def run(self) -> Tuple[Catalog, List[IntrospectionError]]:
        """Introspect every configured database.

        Returns:
            The merged catalog and every error raised along the way

        Raises:
            CatalogUnavailableError: If no database could be reached at all
        """
        databases = list(self.config.databases)
        logger.info("Introspecting %d database(s): %s", len(databases), ", ".join(databases))

        # One worker thread per database, never fewer
        loop = asyncio.get_running_loop()
        pool = ThreadPoolExecutor(max_workers=max(len(databases), 1), thread_name_prefix="dbcatalog")
        tasks = [
            loop.run_in_executor(pool, self._introspect_database, database)
            for database in databases
        ]

        catalog = Catalog()
        errors: List[IntrospectionError] = []
        interrupted = False
        try:
            for next_done in asyncio.as_completed(tasks):
                result = await next_done
                self._merge(result, catalog, errors)
        except asyncio.CancelledError:
            interrupted = True
            self.cancel()
            for task in tasks:
                task.cancel()
            raise
        finally:
            pool.shutdown(wait=not interrupted)

        connection_failures = [e for e in errors if isinstance(e, ConnectionError)]
        if databases and not catalog and len(connection_failures) == len(databases):
            raise CatalogUnavailableError(connection_failures)

        logger.info(
            "Introspection finished: %d entries, %d error(s)",
            len(catalog),
            len(errors),
        )
        return catalog, errors

    def _merge(self, result: DatabaseResult, catalog: Catalog, errors: List[IntrospectionError]) -> None:
        for entry in result.entries:
            if catalog.contains(*entry.identity):
                logger.warning("Skipping duplicate entry %s", entry.qualified_name)
                continue
            catalog.add(entry)
        if result.error is not None:
            errors.append(result.error)

    def _introspect_database(self, database: str) -> DatabaseResult:
        """Introspect one database; runs on a worker thread."""
        result = DatabaseResult(database=database)
        if self.cancelled:
            result.cancelled = True
            return result

        try:
            with self.adapter_factory(self.config, database) as adapter:
                adapter.connect()
                objects = adapter.list_objects(database)
                logger.info("Database %s: %d object(s)", database, len(objects))

                seen = set()
                for schema, name, kind in objects:
                    if self.cancelled:
                        logger.info("Database %s: cancelled, stopping", database)
                        result.cancelled = True
                        break
                    if (schema, name) in seen:
                        logger.warning("Database %s: duplicate object %s.%s skipped", database, schema, name)
                        continue
                    seen.add((schema, name))

                    logger.debug("Database %s, %s: %s.%s", database, kind.value, schema, name)
                    columns = adapter.describe_columns(database, schema, name)
                    definition = adapter.get_definition(database, schema, name)
                    dependencies = adapter.list_dependencies(database, schema, name)

                    result.entries.append(CatalogEntry(
                        database=database,
                        schema=schema,
                        name=name,
                        kind=kind,
                        definition=definition,
                        columns=columns,
                        dependencies=dependencies,
                    ))
        except IntrospectionError as e:
            logger.error("Database %s failed: %s", database, e)
            result.error = e
        except Exception as e:
            logger.exception("Database %s failed unexpectedly", database)
            result.error = IntrospectionError("Unexpected failure", database=database, cause=e)

        return result


def run_introspection(
    config: CatalogConfig,
    adapter_factory: AdapterFactory = create_adapter,
) -> Tuple[Catalog, List[IntrospectionError]]:
    """Synchronous entry point for callers without an event loop."""
    orchestrator = CatalogOrchestrator(config, adapter_factory)
    return asyncio.run(orchestrator.run())
