"""Carrier directory — the shipping companies orders can be dispatched with.

Maintained outside this context; read here to resolve the carrier for an
order. A company without both an API endpoint and a token is local-only:
packages are tracked internally and never pushed to its API.
"""

import json

from protean.fields import Boolean, String, Text

from settlement.domain import settlement


@settlement.aggregate
class ShippingCompany:
    name = String(required=True, max_length=200, unique=True)
    is_active = Boolean(default=True)
    api_endpoint = String(max_length=500)
    api_token = String(max_length=500)
    shipping_cities = Text()  # JSON: list of city names, empty means everywhere

    @property
    def has_api_credentials(self) -> bool:
        return bool(self.api_endpoint and self.api_token)

    @property
    def cities(self) -> list[str]:
        if not self.shipping_cities:
            return []
        return json.loads(self.shipping_cities)

    def serves_city(self, city: str | None) -> bool:
        """True when the company has no allow-list, or the city is on it."""
        cities = self.cities
        if not cities or not city:
            return True
        return city.strip().lower() in {c.strip().lower() for c in cities}
