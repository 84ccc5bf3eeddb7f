"""
Payment specific codes and provider status mapping.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Provider/Network errors (6xxxx)
    PROVIDER_ERROR = 60000
    PROVIDER_RECOVERABLE = 60001
    SIGNATURE_ERROR = 60002
    TIMEOUT = 60003


# Provider intent status -> internal gateway status.
# Only "succeeded" ever completes a Payment; everything else is either
# still in flight ("pending") or dead ("failed").
PROVIDER_STATUS_TO_INTERNAL = {
    "stripe": {
        "requires_payment_method": "failed",
        "requires_confirmation": "pending",
        "requires_action": "pending",
        "processing": "pending",
        "requires_capture": "pending",
        "succeeded": "succeeded",
        "canceled": "failed",
    },
}

# Webhook event types the coordinator acts upon.
EVENT_INTENT_SUCCEEDED = "payment_intent.succeeded"
