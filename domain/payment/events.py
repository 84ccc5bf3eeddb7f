"""
Payment domain events.

Recorded by the coordinator when a payment leaves ``pending``; the domain
stays free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
import uuid


@dataclass
class PaymentEvent:
    payment_id: int
    user_id: int
    contest_id: int
    gateway_intent_ref: Optional[str] = None
    source: str = ""  # confirm / webhook / reconcile
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class PaymentCompleted(PaymentEvent):
    pass


@dataclass
class PaymentFailed(PaymentEvent):
    reason: Optional[str] = None
