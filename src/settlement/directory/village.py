"""Village directory — delivery destinations keyed by the carrier's village id."""

from protean.fields import Boolean, Integer, String

from settlement.domain import settlement


@settlement.aggregate
class Village:
    village_id = Integer(required=True, unique=True)
    name = String(required=True, max_length=200)
    city = String(max_length=100)
    governorate = String(max_length=100)
    is_active = Boolean(default=True)
