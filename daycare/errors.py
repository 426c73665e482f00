"""Domain error taxonomy shared by the ownership engine and the HTTP layer.

Services raise these; ``daycare.main`` renders each one as
``{"detail": <message>, "reason": <reason>}`` with the class status code.
"""


class DomainError(Exception):
    status_code = 500
    default_reason = "error"

    def __init__(self, message: str, *, reason: str | None = None):
        super().__init__(message)
        self.message = message
        self.reason = reason or self.default_reason


class ValidationError(DomainError):
    status_code = 400
    default_reason = "validation_failed"


class ForbiddenError(DomainError):
    status_code = 403
    default_reason = "forbidden"


class NotFoundError(DomainError):
    status_code = 404
    default_reason = "not_found"


class ConflictError(DomainError):
    status_code = 409
    default_reason = "conflict"


class TransactionError(DomainError):
    status_code = 500
    default_reason = "transaction_failed"
