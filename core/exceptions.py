"""
Custom exceptions for the job execution engine with structured error context.

Each exception carries a context dictionary for debugging and for the
ledger's ``message`` field, and optionally chains the original exception.

Exception Hierarchy:
    JobError (base)
    ├── ConfigurationError
    ├── FetchError
    ├── StoreError
    ├── LedgerError
    │   ├── LedgerCreateError
    │   │   └── DuplicateJobError
    │   └── LedgerUpdateError
    └── SchedulerError
"""

from typing import Optional, Dict, Any
from datetime import datetime


class JobError(Exception):
    """
    Base exception for all job engine errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (job name, table, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.utcnow()

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


class ConfigurationError(JobError):
    """
    Raised when required configuration is missing or unusable.

    Context should include:
        - setting: Name of the missing or invalid setting
    """
    pass


# ============================================================================
# Fetch / Store Errors
# ============================================================================

class FetchError(JobError):
    """
    Raised by data sources when the remote fetch fails.

    Context should include:
        - source: Data source class name
        - job_date: Business date being fetched
        - site_id: Golf site id (golf sources only)
    """
    pass


class StoreError(JobError):
    """
    Raised when the idempotent store transaction fails and is rolled back.

    Context should include:
        - table_name: Destination table
        - records: Number of records in the rolled back batch
        - dialect: Database dialect name
    """
    pass


# ============================================================================
# Ledger Errors
# ============================================================================

class LedgerError(JobError):
    """Base exception for execution ledger failures."""
    pass


class LedgerCreateError(LedgerError):
    """
    Raised when the initial ledger row cannot be created.

    Context should include:
        - job_name: Logical job name
        - job_date: Business date of the execution
    """
    pass


class DuplicateJobError(LedgerCreateError):
    """Raised when a ledger row for the same (job_name, job_date, params) exists."""
    pass


class LedgerUpdateError(LedgerError):
    """
    Raised when a ledger status update cannot be persisted.

    Context should include:
        - job_id: Ledger row id
        - job_status: Status that failed to persist
    """
    pass


class SchedulerError(JobError):
    """Raised when trigger registration is attempted in an invalid state."""
    pass
