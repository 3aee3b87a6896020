"""Carrier gateway port (abstract interface).

A gateway sends one package-creation request to a carrier endpoint and
decodes the response, once, into a closed set of results:

- ``GatewaySuccess``: the carrier accepted the package.
- ``GatewayRejected``: the carrier answered 2xx in JSON but refused the payload.
  Never retried.
- ``GatewayTransportError``: no usable answer (network failure, timeout,
  any non-2xx status, non-JSON body). ``retryable`` tells the caller whether
  to try again; messages from a JSON error body are kept in ``details``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class GatewaySuccess:
    tracking_id: str
    delivery_cost: float | None = None
    qr_code: str | None = None


@dataclass(frozen=True)
class GatewayRejected:
    code: int | None = None
    state: str | None = None
    messages: tuple[str, ...] = field(default_factory=tuple)

    @property
    def error(self) -> str:
        if not self.messages:
            return "Carrier rejected the package"
        return "; ".join(self.messages)


@dataclass(frozen=True)
class GatewayTransportError:
    message: str
    status_code: int | None = None
    retryable: bool = False
    details: tuple[str, ...] = field(default_factory=tuple)

    @property
    def error(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} ({'; '.join(self.details)})"


GatewayResult = GatewaySuccess | GatewayRejected | GatewayTransportError


class CarrierGateway(ABC):
    """Abstract carrier gateway interface."""

    @abstractmethod
    def send(self, endpoint: str, token: str, payload: dict[str, str]) -> GatewayResult:
        """POST a package-creation payload to ``endpoint`` with bearer auth."""
        ...
