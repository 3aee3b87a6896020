"""Who gets paid what when an order settles."""

from dataclasses import dataclass
from enum import Enum

from settlement.config import get_settings
from settlement.errors import PlatformAccountNotConfigured
from settlement.order.order import Order


class Beneficiary(Enum):
    MARKETER = "marketer"
    PLATFORM = "platform"


@dataclass(frozen=True)
class ProfitShare:
    beneficiary: Beneficiary
    user_id: str
    amount: float

    @property
    def reference_prefix(self) -> str:
        return "order_profit" if self.beneficiary == Beneficiary.MARKETER else "admin_profit"

    def reference(self, order_id: str) -> str:
        return f"{self.reference_prefix}_{order_id}"

    def reversal_reference(self, order_id: str) -> str:
        return f"{self.reference_prefix}_reversal_{order_id}"

    def rollback_reference(self, order_id: str, entry_id: str) -> str:
        return f"{self.reference_prefix}_rollback_{order_id}_{entry_id}"


def profit_shares(order: Order) -> list[ProfitShare]:
    """Marketer share first, platform commission second.

    Raises ``PlatformAccountNotConfigured`` when a commission is due but no
    platform account is configured.
    """
    shares = []
    if order.marketer_payout > 0:
        shares.append(ProfitShare(Beneficiary.MARKETER, str(order.customer_id), order.marketer_payout))

    if order.platform_commission > 0:
        platform_account_id = get_settings().platform_account_id
        if not platform_account_id:
            raise PlatformAccountNotConfigured(
                {"platform_account_id": ["PLATFORM_ACCOUNT_ID must be set to settle platform commission"]}
            )
        shares.append(ProfitShare(Beneficiary.PLATFORM, platform_account_id, order.platform_commission))

    return shares
