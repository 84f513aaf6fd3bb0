"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
NOT_FOUND = "NOT_FOUND"
DUPLICATE_RESOURCE = "DUPLICATE_RESOURCE"
VALIDATION_ERROR = "VALIDATION_ERROR"
CONFLICT = "CONFLICT"
RECORD_DELETED = "RECORD_DELETED"
PERSISTENCE_ERROR = "PERSISTENCE_ERROR"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class NotFoundError(DomainError):
    """Raised when no current version exists for a key (never existed or deleted)."""

    pass


class DuplicateResourceError(DomainError):
    """Raised when creating a record whose business key already has a current version."""

    pass


class RecordDeletedError(DomainError):
    """Raised when creating a record under a business key that was soft deleted.

    Deleted records are terminal: a business key whose last version was closed
    without a successor never acquires a new current version.
    """

    pass


class DomainValidationError(DomainError):
    """Raised when a payload fails entity-specific invariants."""

    pass


class ConflictError(DomainError):
    """Raised when a concurrent writer closed the expected current version first.

    Retryable, but only after reloading the current version: the patch may
    need to be derived again against the new state.
    """

    def __init__(self, message: str, business_key: str | None = None, expected_version: int | None = None):
        super().__init__(message)
        self.business_key = business_key
        self.expected_version = expected_version


class ImmutableVersionError(DomainError):
    """Raised when code attempts to change a persisted version row in place."""

    pass


class PersistenceError(DomainError):
    """Raised when the underlying storage fails. The transaction is always rolled back."""

    pass
