"""
Repository Errors.

============================================================
HIERARCHY
============================================================
PersistenceError (core)
  RepositoryException
    DuplicateRecordError   second candidate / connection row
    IntegrityError         orphan connection, cache or snapshot
    ConnectionError        database unreachable
    QueryError             any other failed statement
    TransactionError       commit failed in a unit of work
    ImmutableRecordError   score snapshot touched after insert

The engine and the update service treat every one of these
as fatal for the current operation; nothing is retried here.

============================================================
"""

from typing import Any, Optional

from core.exceptions import PersistenceError


class RepositoryException(PersistenceError):
    """Raised for any storage failure, tagged with repository and operation."""

    def __init__(
        self,
        message: str,
        repository_name: str,
        operation: str,
        details: Optional[dict] = None
    ) -> None:
        self.repository_name = repository_name
        self.operation = operation
        self.details = details or {}
        context = {"repository": repository_name, "operation": operation}
        context.update(self.details)
        super().__init__(f"[{repository_name}] {operation}: {message}", context=context)


class DuplicateRecordError(RepositoryException):

    def __init__(self, repository_name: str, constraint_field: str, value: Any) -> None:
        self.constraint_field = constraint_field
        self.value = value
        super().__init__(
            f"{constraint_field}={value} is already stored",
            repository_name,
            "create",
            {"field": constraint_field, "value": str(value)},
        )


class IntegrityError(RepositoryException):
    """Foreign key or check violation, typically a row for an unknown candidate."""

    def __init__(
        self,
        repository_name: str,
        operation: str,
        constraint_name: str,
        message: str
    ) -> None:
        self.constraint_name = constraint_name
        super().__init__(
            f"constraint {constraint_name} rejected the write: {message}",
            repository_name,
            operation,
            {"constraint": constraint_name},
        )


class ConnectionError(RepositoryException):

    def __init__(self, repository_name: str, operation: str, original_error: str) -> None:
        super().__init__(
            f"database unavailable ({original_error})",
            repository_name,
            operation,
            {"original_error": original_error},
        )


class QueryError(RepositoryException):

    def __init__(
        self,
        repository_name: str,
        operation: str,
        query_description: str,
        original_error: str
    ) -> None:
        super().__init__(
            f"{query_description} failed: {original_error}",
            repository_name,
            operation,
            {"query_description": query_description},
        )


class TransactionError(RepositoryException):
    """The unit of work could not be committed; nothing it wrote is visible."""

    def __init__(
        self,
        repository_name: str,
        operation: str,
        phase: str,
        original_error: str
    ) -> None:
        self.phase = phase
        super().__init__(
            f"{phase} failed: {original_error}",
            repository_name,
            operation,
            {"phase": phase},
        )


class ImmutableRecordError(RepositoryException):
    """Score snapshots are append-only; updates and deletes end up here."""

    def __init__(self, repository_name: str, record_id: Any, attempted_operation: str) -> None:
        self.record_id = record_id
        self.attempted_operation = attempted_operation
        super().__init__(
            f"snapshot {record_id} is append-only",
            repository_name,
            attempted_operation,
            {"record_id": str(record_id)},
        )
