"""Profit reversal on cancellation or return."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from settlement.config import get_settings
from settlement.domain import settlement
from settlement.errors import PlatformAccountNotConfigured
from settlement.locks import order_locks
from settlement.order.order import Order
from settlement.profits.shares import Beneficiary, ProfitShare
from settlement.wallet import ledger

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ReversalResult:
    order_id: str
    reversed: bool
    marketer_profit: float = 0.0
    commission: float = 0.0
    reason: str | None = None


def credited_shares(order: Order) -> list[ProfitShare]:
    """The shares actually credited for the order, read back from the wallets.

    Amounts come from the active credit entries, so edits to the order after
    distribution do not change what gets debited.
    """
    order_id = str(order.id)
    candidates = [ProfitShare(Beneficiary.MARKETER, str(order.customer_id), 0.0)]

    platform_account_id = get_settings().platform_account_id
    if platform_account_id:
        candidates.append(ProfitShare(Beneficiary.PLATFORM, platform_account_id, 0.0))
    elif order.platform_commission > 0:
        raise PlatformAccountNotConfigured(
            {"platform_account_id": ["PLATFORM_ACCOUNT_ID must be set to reverse platform commission"]}
        )

    shares = []
    for candidate in candidates:
        wallet = ledger.find_wallet(candidate.user_id)
        entry = wallet.active_entry(candidate.reference(order_id)) if wallet else None
        if entry is not None:
            shares.append(ProfitShare(candidate.beneficiary, candidate.user_id, entry.amount))
    return shares


def _debit(order: Order, share: ProfitShare) -> str:
    order_id = str(order.id)
    with settlement.domain_context():
        wallet = ledger.find_wallet(share.user_id)
        if wallet is None or not wallet.has_sufficient_balance(share.amount):
            logger.warning(
                "Insufficient balance for profit reversal, debiting anyway",
                order_id=order_id,
                user_id=share.user_id,
                amount=share.amount,
                balance=wallet.balance if wallet else 0.0,
            )
        return ledger.debit(
            share.user_id,
            share.amount,
            description=f"Reversal of {share.beneficiary.value} profit from order {order.barcode}",
            reference=share.reversal_reference(order_id),
            metadata={"order_id": order_id, "order_number": order.order_number},
        )


def reverse_order_profits(order_id: str) -> ReversalResult:
    """Debit what ``distribute_order_profits`` credited and clear the latch.

    The amounts are read from the active credit entries in the wallets, not
    recomputed from the order.

    Debits run concurrently. If any of them fails the latch stays set and the
    error propagates; a retry re-issues only the missing debit because debit
    references are idempotent.
    """
    with order_locks.hold(order_id):
        repo = current_domain.repository_for(Order)
        order = repo.get(order_id)

        if not order.profits_distributed:
            logger.info("No distributed profits to reverse", order_id=order_id, status=order.status)
            return ReversalResult(order_id=order_id, reversed=False, reason="not_distributed")

        shares = credited_shares(order)
        if shares:
            with ThreadPoolExecutor(max_workers=len(shares)) as pool:
                futures = [pool.submit(_debit, order, share) for share in shares]
            errors = [future.exception() for future in futures if future.exception() is not None]
            if errors:
                logger.error("Profit reversal failed", order_id=order_id, errors=[str(e) for e in errors])
                raise errors[0]

        order.clear_profits_distributed()
        repo.add(order)

    debited = {share.beneficiary: share.amount for share in shares}
    logger.info(
        "Profits reversed",
        order_id=order_id,
        marketer_profit=debited.get(Beneficiary.MARKETER, 0.0),
        commission=debited.get(Beneficiary.PLATFORM, 0.0),
    )
    return ReversalResult(
        order_id=order_id,
        reversed=True,
        marketer_profit=debited.get(Beneficiary.MARKETER, 0.0),
        commission=debited.get(Beneficiary.PLATFORM, 0.0),
    )
