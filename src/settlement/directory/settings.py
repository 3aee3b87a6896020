"""Runtime shipping settings."""

from protean.fields import Identifier, String

from settlement.domain import settlement

DEFAULT_SETTINGS_KEY = "shipping"


@settlement.aggregate
class ShippingSettings:
    key = String(identifier=True, max_length=50, default=DEFAULT_SETTINGS_KEY)
    default_shipping_company_id = Identifier()
