"""Error taxonomy shared by services and adapters."""


class DopamineError(Exception):
    """Base class for expected application errors."""


class NotFoundError(DopamineError):
    """Raised when a referenced document does not exist."""


class EmptyCartError(DopamineError):
    """Raised when checkout is attempted without any orderable items."""


class StorageError(DopamineError):
    """Raised when the document store fails a read or write."""


class ValidationError(DopamineError):
    """Raised when a mutation receives malformed input."""
