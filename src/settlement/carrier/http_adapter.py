"""HTTP carrier gateway built on requests."""

import requests
import structlog

from settlement.carrier.port import (
    CarrierGateway,
    GatewayRejected,
    GatewayResult,
    GatewaySuccess,
    GatewayTransportError,
)

logger = structlog.get_logger(__name__)

_RETRYABLE_CLIENT_ERRORS = {408, 429}

_STATUS_MESSAGES = {
    502: "Shipping service gateway error. Please try again later.",
    503: "Shipping service is temporarily unavailable. Please try again later.",
    504: "Shipping service timed out. Please try again later.",
}


def authorization_header(token: str) -> str:
    token = token.strip()
    if token.lower().startswith("bearer "):
        return token
    return f"Bearer {token}"


def status_message(status_code: int) -> str:
    if status_code in _STATUS_MESSAGES:
        return _STATUS_MESSAGES[status_code]
    if status_code >= 500:
        return f"Shipping service error (HTTP {status_code}). Please try again later."
    return f"Shipping service returned HTTP {status_code}."


def is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in _RETRYABLE_CLIENT_ERRORS


def flatten_errors(body: dict) -> tuple[str, ...]:
    """Turn ``{"errors": {"field": ["msg", ...]}}`` (or ``data``) into ``"field: msg"`` strings."""
    details = body.get("errors") or body.get("data")
    if isinstance(details, str):
        return (details,)
    if not isinstance(details, dict):
        message = body.get("message")
        return (str(message),) if message else ()

    messages = []
    for field_name, value in details.items():
        if isinstance(value, list | tuple):
            messages.extend(f"{field_name}: {item}" for item in value)
        else:
            messages.append(f"{field_name}: {value}")
    return tuple(messages)


class HttpCarrierGateway(CarrierGateway):
    """Sends packages to a carrier's REST endpoint."""

    def __init__(self, timeout: float = 15, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()

    def send(self, endpoint: str, token: str, payload: dict[str, str]) -> GatewayResult:
        headers = {
            "Authorization": authorization_header(token),
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = self.session.post(endpoint, json=payload, headers=headers, timeout=self.timeout)
        except requests.Timeout:
            logger.warning("Carrier request timed out", endpoint=endpoint, timeout=self.timeout)
            return GatewayTransportError(message=status_message(504), retryable=True)
        except requests.RequestException as exc:
            logger.warning("Carrier request failed", endpoint=endpoint, error=str(exc))
            return GatewayTransportError(
                message="Could not reach the shipping service. Please try again later.",
                retryable=True,
            )

        return self.decode(response)

    def decode(self, response: requests.Response) -> GatewayResult:
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = None

        if not 200 <= status_code < 300:
            logger.warning(
                "Carrier returned an error status",
                status_code=status_code,
                content_type=response.headers.get("Content-Type"),
            )
            return GatewayTransportError(
                message=status_message(status_code),
                status_code=status_code,
                retryable=is_retryable_status(status_code),
                details=flatten_errors(body) if isinstance(body, dict) else (),
            )

        if not isinstance(body, dict):
            logger.warning(
                "Carrier returned a non-JSON response",
                status_code=status_code,
                content_type=response.headers.get("Content-Type"),
            )
            return GatewayTransportError(
                message="Shipping service returned an unreadable response.",
                status_code=status_code,
                retryable=False,
            )

        if body.get("code") == 200 and body.get("state") == "success":
            data = body.get("data") or {}
            tracking_id = data.get("package_id")
            if tracking_id is not None:
                return GatewaySuccess(
                    tracking_id=str(tracking_id),
                    delivery_cost=_to_float(data.get("delivery_cost")),
                    qr_code=data.get("qr_code"),
                )

        return GatewayRejected(
            code=body.get("code", status_code),
            state=body.get("state"),
            messages=flatten_errors(body),
        )


def _to_float(value) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
