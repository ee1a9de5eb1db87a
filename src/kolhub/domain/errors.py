"""Domain-specific exception classes for the KOL campaign backend."""


class KolHubError(Exception):
    """Base class for all domain errors in the backend."""


class GatewayError(KolHubError):
    """Raised when the persistence gateway fails to execute a statement."""


class RecordNotFoundError(GatewayError):
    """Raised when a write targets a record (or relation) that does not exist.

    Attributes:
        table: The table that was searched.
        key: The primary key that was not found.
    """

    def __init__(self, table: str, key: object) -> None:
        self.table = table
        self.key = key
        super().__init__(f"No record in '{table}' with id {key!r}")


class ConflictError(GatewayError):
    """Raised when a write violates a uniqueness or foreign-key constraint."""


class ApiError(KolHubError):
    """An error that maps directly onto an HTTP response envelope.

    Attributes:
        status_code: HTTP status code for the response.
        message: Human-readable message placed in the envelope.
        error: Optional underlying error text.
    """

    def __init__(self, status_code: int, message: str, error: str | None = None) -> None:
        self.status_code = status_code
        self.message = message
        self.error = error
        super().__init__(message)
