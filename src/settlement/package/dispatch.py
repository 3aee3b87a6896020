"""Bounded retry around a single carrier send.

Only retryable transport errors are retried. A rejection or a success ends
the loop. Delays double after each failed attempt (1s, 2s, ... by default)
and there is no delay after the last attempt.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from settlement.carrier import get_gateway
from settlement.carrier.port import GatewayResult, GatewayTransportError
from settlement.config import get_settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    result: GatewayResult
    attempts: int


def send_with_retry(
    endpoint: str,
    token: str,
    payload: dict[str, str],
    max_attempts: int | None = None,
    backoff_seconds: float | None = None,
    sleep: Callable[[float], None] | None = None,
) -> DispatchOutcome:
    sleep = sleep or time.sleep
    settings = get_settings()
    max_attempts = max_attempts or settings.carrier_max_attempts
    delay = settings.carrier_backoff_seconds if backoff_seconds is None else backoff_seconds
    gateway = get_gateway()

    attempt = 0
    while True:
        attempt += 1
        result = gateway.send(endpoint, token, payload)

        if not isinstance(result, GatewayTransportError) or not result.retryable:
            return DispatchOutcome(result=result, attempts=attempt)

        if attempt >= max_attempts:
            logger.warning(
                "Carrier send failed after all attempts",
                endpoint=endpoint,
                attempts=attempt,
                status_code=result.status_code,
                error=result.message,
            )
            return DispatchOutcome(result=result, attempts=attempt)

        logger.info(
            "Retrying carrier send",
            endpoint=endpoint,
            attempt=attempt,
            status_code=result.status_code,
            delay=delay,
        )
        sleep(delay)
        delay *= 2
