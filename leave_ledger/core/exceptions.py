from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self, 
        message: str, 
        status_code: int = 400, 
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

class ValidationError(AppException):
    """A required field is missing or structurally invalid. Raised before anything is persisted."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=422,
            error_code="VALIDATION_ERROR",
            details=details
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            message=f"{entity} '{entity_id}' not found",
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": entity_id}
        )

class BackendError(AppException):
    """The remote ledger rejected or failed to complete an operation. Never retried here."""
    DEFAULT_MESSAGE = "The ledger backend could not complete the operation."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message or self.DEFAULT_MESSAGE,
            status_code=502,
            error_code="BACKEND_ERROR",
            details=details
        )

class StaleQueryError(AppException):
    def __init__(self, message: str = "Query was superseded by a newer one"):
        super().__init__(
            message=message,
            status_code=409,
            error_code="STALE_QUERY"
        )

class CorruptStateError(Exception):
    """Snapshot storage is unreadable or structurally invalid.

    Only raised inside the snapshot loader, which recovers by reseeding.
    """
