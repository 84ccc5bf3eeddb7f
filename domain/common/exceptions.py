"""Domain business exceptions, shared by domain and infrastructure.

The core layer only maps these to HTTP responses; the domain never imports
from core.
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """Base business exception"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


# --- Validation -----------------------------------------------------------

class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        code: int = BusinessCode.PARAM_VALIDATION_ERROR,
        error_type: str = "ValidationError",
    ):
        super().__init__(
            code=code,
            message=message,
            error_type=error_type,
            details=details,
            field=field,
        )


class PriceMismatchException(DomainValidationException):
    def __init__(self, price, expected):
        super().__init__(
            "Price does not match contest entry fee",
            field="price",
            details={"price": str(price), "expected": str(expected)},
            code=BusinessCode.PRICE_MISMATCH,
            error_type="PriceMismatch",
        )


class ContestNotConfirmedException(DomainValidationException):
    def __init__(self, contest_id: int):
        super().__init__(
            "Contest is not confirmed yet",
            details={"contest_id": contest_id},
            code=BusinessCode.CONTEST_NOT_CONFIRMED,
            error_type="ContestNotConfirmed",
        )


class DeadlinePassedException(DomainValidationException):
    def __init__(self, contest_id: int, message: str = "Contest deadline has passed"):
        super().__init__(
            message,
            details={"contest_id": contest_id},
            code=BusinessCode.CONTEST_DEADLINE_PASSED,
            error_type="DeadlinePassed",
        )


class DeadlineNotPassedException(DomainValidationException):
    def __init__(self, contest_id: int):
        super().__init__(
            "Cannot declare winner. Contest deadline has not passed yet",
            details={"contest_id": contest_id},
            code=BusinessCode.CONTEST_DEADLINE_NOT_PASSED,
            error_type="DeadlineNotPassed",
        )


class PaymentNotCompletedException(DomainValidationException):
    def __init__(self, payment_id: int, status: str):
        super().__init__(
            "Payment not completed",
            details={"payment_id": payment_id, "payment_status": status},
            code=BusinessCode.PAYMENT_NOT_COMPLETED,
            error_type="PaymentNotCompleted",
        )


# --- Conflict -------------------------------------------------------------

class ConflictException(BusinessException):
    """A business rule collides with existing state (duplicates, double actions)."""

    def __init__(self, code: int, message: str, error_type: str, details: Optional[dict] = None):
        super().__init__(code=code, message=message, error_type=error_type, details=details)


class PaymentAlreadyCompletedException(ConflictException):
    def __init__(self, user_id: int, contest_id: int):
        super().__init__(
            BusinessCode.PAYMENT_ALREADY_COMPLETED,
            "You have already paid for this contest",
            "PaymentAlreadyCompleted",
            {"user_id": user_id, "contest_id": contest_id},
        )


class AlreadyJoinedException(ConflictException):
    def __init__(self, user_id: int, contest_id: int):
        super().__init__(
            BusinessCode.ALREADY_JOINED,
            "You have already joined this contest",
            "AlreadyJoined",
            {"user_id": user_id, "contest_id": contest_id},
        )


class ContestFullException(ConflictException):
    def __init__(self, contest_id: int, limit: int):
        super().__init__(
            BusinessCode.CONTEST_FULL,
            "Participation limit reached for this contest",
            "ContestFull",
            {"contest_id": contest_id, "participation_limit": limit},
        )


class WinnerAlreadyDeclaredException(ConflictException):
    def __init__(self, contest_id: int):
        super().__init__(
            BusinessCode.WINNER_ALREADY_DECLARED,
            "Winner has already been declared for this contest",
            "WinnerAlreadyDeclared",
            {"contest_id": contest_id},
        )


class ContestHasPaymentsException(ConflictException):
    def __init__(self, contest_id: int):
        super().__init__(
            BusinessCode.CONTEST_HAS_PAYMENTS,
            "Contest has recorded payments and cannot be deleted",
            "ContestHasPayments",
            {"contest_id": contest_id},
        )


# --- Forbidden ------------------------------------------------------------

class ForbiddenException(BusinessException):
    def __init__(self, message: str = "Access denied", details: Optional[dict] = None):
        super().__init__(
            code=BusinessCode.FORBIDDEN,
            message=message,
            error_type="Forbidden",
            details=details,
        )


# --- Not found ------------------------------------------------------------

class NotFoundException(BusinessException):
    def __init__(self, message: str, code: int = BusinessCode.NOT_FOUND,
                 error_type: str = "NotFound", details: Optional[dict] = None):
        super().__init__(code=code, message=message, error_type=error_type, details=details)


class UserNotFoundException(NotFoundException):
    def __init__(self, user_id: Optional[int] = None, message: str = "User not found"):
        super().__init__(
            message,
            code=BusinessCode.USER_NOT_FOUND,
            error_type="UserNotFound",
            details={"user_id": user_id} if user_id is not None else None,
        )


class ContestNotFoundException(NotFoundException):
    def __init__(self, contest_id: int):
        super().__init__(
            "Contest not found",
            code=BusinessCode.CONTEST_NOT_FOUND,
            error_type="ContestNotFound",
            details={"contest_id": contest_id},
        )


class PaymentNotFoundException(NotFoundException):
    def __init__(self, payment_id: int, message: str = "Payment not found"):
        super().__init__(
            message,
            code=BusinessCode.PAYMENT_NOT_FOUND,
            error_type="PaymentNotFound",
            details={"payment_id": payment_id},
        )


class SubmissionNotFoundException(NotFoundException):
    def __init__(self, submission_id: int):
        super().__init__(
            "Submission not found",
            code=BusinessCode.SUBMISSION_NOT_FOUND,
            error_type="SubmissionNotFound",
            details={"submission_id": submission_id},
        )
