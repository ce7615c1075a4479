"""
Base service class providing common functionality for all services.
"""

from abc import ABC
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ogs.core.exceptions import BaseAppException
from ogs.core.logging import get_logger
from ogs.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)

T = TypeVar("T")


class BaseService(ABC):
    """
    Base service with common behaviors:
    - Shared logger and db session
    - Consistent error handling via ServiceResult
    - Transaction management utilities
    - Best-effort execution of secondary effects
    """

    def __init__(self, db_session: Session):
        self.db: Session = db_session
        self._logger = get_logger(self.__class__.__name__)

    # -------------------------------------------------------------------------
    # Exception & Error Handling
    # -------------------------------------------------------------------------

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert an exception into a failed ServiceResult, logging it.

        Domain exceptions keep their own status; anything else is an
        unexpected failure and is logged with its traceback.
        """
        if isinstance(exception, BaseAppException):
            if exception.status_code >= 500:
                self._logger.error(
                    f"Error during {operation}: {exception.message}",
                    operation=operation,
                    entity_ref=str(entity_ref) if entity_ref is not None else None,
                    exc_info=exception,
                    **(additional_context or {}),
                )
            else:
                self._logger.info(
                    f"{operation} rejected: {exception.message}",
                    operation=operation,
                    entity_ref=str(entity_ref) if entity_ref is not None else None,
                    reason=exception.error_code.value,
                    **(additional_context or {}),
                )
            return ServiceResult.from_app_exception(exception)

        self._logger.error(
            f"Error during {operation}: {exception}",
            operation=operation,
            entity_ref=str(entity_ref) if entity_ref is not None else None,
            exception_type=type(exception).__name__,
            exc_info=exception,
            **(additional_context or {}),
        )

        code = ErrorCode.DATABASE_ERROR if isinstance(exception, SQLAlchemyError) else ErrorCode.INTERNAL_ERROR
        return ServiceResult.failure(
            ServiceError(
                code=code,
                message=f"Failed to {operation.replace('_', ' ')}",
                details={"entity_ref": str(entity_ref) if entity_ref is not None else None},
                severity=ErrorSeverity.CRITICAL,
            )
        )

    # -------------------------------------------------------------------------
    # Transaction Management
    # -------------------------------------------------------------------------

    @contextmanager
    def transaction(self, auto_commit: bool = True):
        """
        Context manager for database transactions with automatic rollback.

        Example:
            with self.transaction():
                self.visits.create(visit)
                # commit on success, rollback on exception
        """
        try:
            yield self.db
            if auto_commit:
                self._commit()
        except Exception:
            self._rollback()
            raise

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self._logger.error(f"Commit failed: {e}", exc_info=True)
            self._rollback()
            raise

    def _rollback(self) -> None:
        """Rollback the current transaction, logging rollback errors."""
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            # The original error is the one callers care about
            self._logger.warning(f"Rollback failed: {e}")

    # -------------------------------------------------------------------------
    # Secondary effects
    # -------------------------------------------------------------------------

    def _best_effort(
        self,
        operation: str,
        func: Callable[[], T],
        **context: Any,
    ) -> Optional[T]:
        """
        Run ``func`` in its own transaction. A failure is rolled back and
        logged as a warning; the caller continues with ``None``.
        """
        try:
            with self.transaction():
                return func()
        except (BaseAppException, SQLAlchemyError) as e:
            self._logger.warning(
                f"{operation} failed; continuing",
                operation=operation,
                error=str(e),
                exception_type=type(e).__name__,
                **context,
            )
            return None
