"""Carrier gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- HttpCarrierGateway talks to the carrier's REST API (default)
- FakeCarrierGateway for development and testing (CARRIER_GATEWAY=fake)
"""

from settlement.carrier.port import CarrierGateway
from settlement.config import get_settings

_current_gateway: CarrierGateway | None = None


def get_gateway() -> CarrierGateway:
    """Return the current carrier gateway (singleton)."""
    global _current_gateway
    if _current_gateway is None:
        settings = get_settings()
        if settings.carrier_gateway == "fake":
            from settlement.carrier.fake_adapter import FakeCarrierGateway

            _current_gateway = FakeCarrierGateway()
        elif settings.carrier_gateway == "http":
            from settlement.carrier.http_adapter import HttpCarrierGateway

            _current_gateway = HttpCarrierGateway(timeout=settings.carrier_timeout_seconds)
        else:
            raise ValueError(f"Unknown carrier gateway: {settings.carrier_gateway}")
    return _current_gateway


def set_gateway(gateway: CarrierGateway) -> None:
    """Override the active carrier gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to the configured gateway."""
    global _current_gateway
    _current_gateway = None
