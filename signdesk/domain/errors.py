"""Domain exceptions surfaced to API callers."""

from __future__ import annotations


class DomainError(ValueError):
    """Base class for errors raised by the service layer.

    Each subclass carries the HTTP status the API layer answers with.
    """

    status_code = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(DomainError):
    status_code = 404


class PermissionDeniedError(DomainError):
    status_code = 403


class ConflictError(DomainError):
    status_code = 409


class ReviewValidationError(DomainError):
    status_code = 422


class BusinessRuleError(DomainError):
    """The request is well formed but refused by a business rule."""

    status_code = 400


class PaymentMethodInUseError(BusinessRuleError):
    def __init__(self) -> None:
        super().__init__(
            "Cannot delete the default payment method of an active subscription. "
            "Please set a new default first."
        )
