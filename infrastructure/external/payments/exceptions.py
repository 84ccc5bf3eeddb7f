"""
Gateway failures mapped onto BusinessException variants.

Provider errors render as 500 with the upstream message in ``details``; a
bad webhook signature renders as 400.
"""
from __future__ import annotations

from typing import Optional

from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


def _details(provider: str, message: str, provider_code: Optional[str], extra: Optional[dict]) -> dict:
    details = {"provider": provider, "provider_code": provider_code, "upstream_message": message}
    if extra:
        details.update(extra)
    return details


class PaymentProviderError(BusinessException):
    def __init__(self, message: str, *, provider: str, provider_code: str | None = None, details: Optional[dict] = None):
        super().__init__(
            code=PaymentCode.PROVIDER_ERROR,
            message="Payment gateway request failed",
            error_type="PaymentProviderError",
            details=_details(provider, message, provider_code, details),
        )


class PaymentRecoverableError(PaymentProviderError):
    """Timeouts, rate limits and connection failures; safe to retry with the same idempotency key."""

    def __init__(self, message: str, *, provider: str, provider_code: str | None = None, details: Optional[dict] = None):
        super().__init__(message, provider=provider, provider_code=provider_code, details=details)
        self.code = PaymentCode.TIMEOUT if provider_code == "timeout" else PaymentCode.PROVIDER_RECOVERABLE
        self.error_type = "PaymentRecoverableError"


class PaymentSignatureError(BusinessException):
    def __init__(self, message: str, *, provider: str, details: Optional[dict] = None):
        full_details = {"provider": provider, "reason": message}
        if details:
            full_details.update(details)
        super().__init__(
            code=PaymentCode.SIGNATURE_ERROR,
            message="Invalid webhook signature",
            error_type="PaymentSignatureError",
            details=full_details,
        )
