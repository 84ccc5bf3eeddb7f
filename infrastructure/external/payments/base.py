"""
Base payment client implementing shared concerns: bounded calls, retry, logging, mapping.

Concrete providers subclass it and implement the provider-specific logic.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import PaymentRecoverableError
from shared.codes.payment_codes import PROVIDER_STATUS_TO_INTERNAL


logger = get_logger(__name__)

T = TypeVar("T")


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        timeouts: Optional[dict[str, float]] = None,
        retry: Optional[dict[str, Any]] = None,
    ) -> None:
        self._timeouts_cfg = timeouts or {"connect": 1.0, "read": 3.0, "write": 3.0, "total": 5.0}
        self._retry_cfg = retry or {"max": 2, "base": 0.2}

    @property
    def total_timeout(self) -> float:
        return float(self._timeouts_cfg["total"])

    async def _bounded(self, fn: Callable[..., T], *args, **kwargs) -> T:
        """Run a blocking SDK call off the event loop, giving up after ``total`` seconds."""
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(fn, *args, **kwargs),
                timeout=self.total_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise PaymentRecoverableError(
                f"Gateway call timed out after {self.total_timeout}s",
                provider=self.provider,
                provider_code="timeout",
            ) from exc

    async def _retry(self, fn: Callable[[], Awaitable[T]]) -> T:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(int(self._retry_cfg["max"]) + 1),
            wait=wait_exponential(multiplier=self._retry_cfg["base"], min=0.1, max=2.0),
            retry=retry_if_exception_type(PaymentRecoverableError),
            reraise=True,
        ):
            with attempt:
                return await fn()

    async def aclose(self) -> None:
        """Nothing pooled by default."""

    # Helpers
    def _map_status(self, provider_status: str) -> str:
        mapping = PROVIDER_STATUS_TO_INTERNAL.get(self.provider, {})
        return mapping.get(provider_status, provider_status)

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )
