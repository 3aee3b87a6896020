"""Scriptable fake carrier gateway for development and testing.

Responses are served from a queue; once the queue is empty the default
response is repeated. Every call is recorded in ``calls``.
"""

from itertools import count

from settlement.carrier.port import CarrierGateway, GatewayResult, GatewaySuccess


class FakeCarrierGateway(CarrierGateway):
    def __init__(self) -> None:
        self.calls: list[dict] = []
        self.default: GatewayResult | None = None
        self._scripted: list[GatewayResult] = []
        self._tracking_ids = count(90001)

    def configure(self, *responses: GatewayResult, default: GatewayResult | None = None) -> None:
        """Queue ``responses`` for the next calls, then fall back to ``default``."""
        self._scripted = list(responses)
        self.default = default

    def send(self, endpoint: str, token: str, payload: dict[str, str]) -> GatewayResult:
        self.calls.append({"endpoint": endpoint, "token": token, "payload": dict(payload)})

        if self._scripted:
            return self._scripted.pop(0)
        if self.default is not None:
            return self.default
        return GatewaySuccess(
            tracking_id=f"EXT-{next(self._tracking_ids)}",
            delivery_cost=25.0,
            qr_code=payload.get("qr_code2"),
        )
