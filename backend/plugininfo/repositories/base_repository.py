"""
Base Repository for SQLAlchemy Tables

Provides session handling, common CRUD operations and slow-query logging
shared by all metadata repositories.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, List, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations for one mapped table.

    Features:
    - One short-lived session per operation, committed on success
    - Rollback and error logging on failure
    - Performance monitoring for slow queries

    Example:
        class MyRepository(BaseRepository[MyRecord]):
            def __init__(self, session_factory):
                super().__init__(MyRecord, session_factory)
    """

    def __init__(self, model: type, session_factory: sessionmaker):
        """
        Initialize repository with a mapped model class.

        Args:
            model: SQLAlchemy mapped class (e.g., PluginInfoRecord)
            session_factory: sessionmaker bound to the metadata database
        """
        self.model = model
        self.session_factory = session_factory
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")
        self._slow_query_threshold = 1.0  # seconds

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get(self, session: Session, key: Any) -> Optional[T]:
        """
        Load a single row by primary key.

        Args:
            session: Active session
            key: Primary key value

        Returns:
            Row if found, None otherwise
        """
        start_time = time.time()
        try:
            result = session.get(self.model, key)
            self._log_query_performance(
                operation="get", query={"key": key}, duration=time.time() - start_time
            )
            return result
        except Exception as e:
            self.logger.error(f"Error in get with key {key}: {e}")
            raise

    def find_many(self, session: Session, filters: Optional[Dict[str, Any]] = None) -> List[T]:
        """
        Load rows matching equality filters, ordered by primary key.

        Args:
            session: Active session
            filters: Column name to value mapping (default: no filter)

        Returns:
            List of rows

        Example:
            rows = repo.find_many(session, {"service": "orca"})
        """
        filters = filters or {}
        start_time = time.time()
        try:
            statement = select(self.model).filter_by(**filters)
            for column in self.model.__table__.primary_key.columns:
                statement = statement.order_by(column)
            result = list(session.scalars(statement))

            self._log_query_performance(
                operation="find_many",
                query=filters,
                duration=time.time() - start_time,
                result_count=len(result),
            )
            return result
        except Exception as e:
            self.logger.error(f"Error in find_many with filters {filters}: {e}")
            raise

    def add(self, session: Session, row: T) -> T:
        """Stage a new row and flush it so constraint errors surface here."""
        start_time = time.time()
        try:
            session.add(row)
            session.flush()
            self._log_query_performance(
                operation="add",
                query={"model": self.model.__name__},
                duration=time.time() - start_time,
            )
            return row
        except Exception as e:
            self.logger.error(f"Error adding {self.model.__name__}: {e}")
            raise

    def remove(self, session: Session, row: T) -> None:
        start_time = time.time()
        try:
            session.delete(row)
            session.flush()
            self._log_query_performance(
                operation="remove",
                query={"model": self.model.__name__},
                duration=time.time() - start_time,
            )
        except Exception as e:
            self.logger.error(f"Error removing {self.model.__name__}: {e}")
            raise

    def _log_query_performance(
        self,
        operation: str,
        query: Dict[str, Any],
        duration: float,
        result_count: Optional[int] = None,
    ) -> None:
        """
        Log query performance and warn about slow queries.

        Args:
            operation: Operation name (get, find_many, etc.)
            query: Filters or keys used
            duration: Query duration in seconds
            result_count: Number of results (if applicable)
        """
        log_msg = f"{operation} completed in {duration:.3f}s"

        if result_count is not None:
            log_msg += f" ({result_count} results)"

        if duration > self._slow_query_threshold:
            self.logger.warning(f"SLOW QUERY: {log_msg} - Query: {query}")
        else:
            self.logger.debug(log_msg)
