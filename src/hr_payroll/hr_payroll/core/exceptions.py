class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidTransitionError(ValidationError):
    """Raised when a workflow action is attempted from the wrong state."""


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, request or record does not exist."""


class AlreadyExistsError(DomainError):
    """Raised when creating a document whose id is already taken."""


class StoreError(DomainError):
    """Raised when the document store reports an unexpected failure.

    The store's original error is chained as ``__cause__``.
    """


class DocumentShapeError(StoreError):
    """Raised when a stored document does not have the expected shape."""
