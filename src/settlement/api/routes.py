"""FastAPI routes for the Settlement domain."""

from fastapi import APIRouter
from protean.utils.globals import current_domain

from settlement.api.schemas import (
    BatchSettlementResponse,
    ChangeOrderStatusRequest,
    DistributeProfitsRequest,
    LedgerEntryResponse,
    PackageCreationResponse,
    PackageResponse,
    PendingSettlementResponse,
    ResendOutcomeResponse,
    ResendSweepResponse,
    SettlementResponse,
    StatusChangeResponse,
    WalletSummaryResponse,
)
from settlement.errors import PackageNotFound
from settlement.order.workflow import change_order_status
from settlement.package.creation import PackageCreationResult, create_package_from_order
from settlement.package.package import Package
from settlement.package.resend import resend_package, resend_pending_packages
from settlement.profits.batch import distribute_pending_profits, pending_settlements
from settlement.profits.distribution import distribute_order_profits
from settlement.profits.reversal import reverse_order_profits
from settlement.utils.logging import bind_order_context
from settlement.wallet.ledger import get_wallet_summary


def _package_creation_response(result: PackageCreationResult) -> PackageCreationResponse:
    return PackageCreationResponse(
        tracking_number=result.tracking_number,
        carrier_accepted=result.carrier_accepted,
        error=result.error,
        can_retry=result.retryable,
        already_exists=result.already_existed,
        sent_to_carrier=result.sent_to_carrier,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.put("/{order_id}/status", response_model=StatusChangeResponse)
def update_order_status(order_id: str, body: ChangeOrderStatusRequest) -> StatusChangeResponse:
    """Change an order's status and run what the new status triggers."""
    bind_order_context(order_id, status=body.status)
    outcome = change_order_status(order_id, body.status)
    return StatusChangeResponse(
        order_id=order_id,
        previous_status=outcome.previous_status,
        status=outcome.status,
        package=_package_creation_response(outcome.package) if outcome.package else None,
        profits_distributed=outcome.distribution.distributed if outcome.distribution else None,
        errors=outcome.errors,
    )


@order_router.post("/{order_id}/package", response_model=PackageCreationResponse)
def create_package(order_id: str) -> PackageCreationResponse:
    """Create the order's package and send it to the shipping company."""
    bind_order_context(order_id)
    return _package_creation_response(create_package_from_order(order_id))


@order_router.post("/{order_id}/package/resend", response_model=PackageCreationResponse)
def resend_order_package(order_id: str) -> PackageCreationResponse:
    """Send a pending package to its shipping company again."""
    bind_order_context(order_id)
    return _package_creation_response(resend_package(order_id))


@order_router.get("/{order_id}/package", response_model=PackageResponse)
def get_order_package(order_id: str) -> PackageResponse:
    package = current_domain.repository_for(Package).find_by_order_id(order_id)
    if package is None:
        raise PackageNotFound({"package": [f"No package exists for order {order_id}"]})
    return PackageResponse(
        package_id=package.package_id,
        order_id=str(package.order_id),
        shipping_company_id=str(package.shipping_company_id),
        status=package.status,
        barcode=package.barcode,
        village_id=package.village_id,
        to_name=package.to_name,
        to_phone=package.to_phone,
        street=package.street,
        description=package.description,
        total_cost=package.total_cost,
        external_package_id=package.external_package_id,
        delivery_cost=package.delivery_cost,
        qr_code=package.qr_code,
        send_attempts=package.send_attempts or 0,
        last_error=package.last_error,
    )


@order_router.post("/{order_id}/profits/distribute", response_model=SettlementResponse)
def distribute_profits(order_id: str) -> SettlementResponse:
    bind_order_context(order_id)
    result = distribute_order_profits(order_id)
    return SettlementResponse(
        order_id=order_id,
        applied=result.distributed,
        marketer_profit=result.marketer_profit,
        commission=result.commission,
        reason=result.reason,
    )


@order_router.post("/{order_id}/profits/reverse", response_model=SettlementResponse)
def reverse_profits(order_id: str) -> SettlementResponse:
    bind_order_context(order_id)
    result = reverse_order_profits(order_id)
    return SettlementResponse(
        order_id=order_id,
        applied=result.reversed,
        marketer_profit=result.marketer_profit,
        commission=result.commission,
        reason=result.reason,
    )


# ---------------------------------------------------------------------------
# Settlement Router
# ---------------------------------------------------------------------------
settlement_router = APIRouter(prefix="/settlements", tags=["settlements"])


@settlement_router.get("/pending", response_model=list[PendingSettlementResponse])
def list_pending_settlements() -> list[PendingSettlementResponse]:
    """Delivered orders whose profits are not yet distributed."""
    return [
        PendingSettlementResponse(
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            total=order.total,
            commission=order.commission,
            marketer_profit=order.marketer_profit,
        )
        for order in pending_settlements()
    ]


@settlement_router.post("/distribute", response_model=BatchSettlementResponse)
def distribute_pending(body: DistributeProfitsRequest) -> BatchSettlementResponse:
    """Distribute profits for the given orders, or for every pending one."""
    batch = distribute_pending_profits(body.order_ids)
    return BatchSettlementResponse(
        succeeded=batch.succeeded,
        skipped=batch.skipped,
        failed=batch.failed,
    )


# ---------------------------------------------------------------------------
# Package Router
# ---------------------------------------------------------------------------
package_router = APIRouter(prefix="/packages", tags=["packages"])


@package_router.post("/resend-pending", response_model=ResendSweepResponse)
def resend_pending() -> ResendSweepResponse:
    sweep = resend_pending_packages()
    return ResendSweepResponse(
        outcomes=[
            ResendOutcomeResponse(
                order_id=outcome.order_id,
                tracking_number=outcome.tracking_number,
                carrier_accepted=outcome.carrier_accepted,
                error=outcome.error,
            )
            for outcome in sweep.outcomes
        ],
        confirmed=len(sweep.confirmed),
        failed=len(sweep.failed),
        skipped=sweep.skipped,
    )


# ---------------------------------------------------------------------------
# Wallet Router
# ---------------------------------------------------------------------------
wallet_router = APIRouter(prefix="/wallets", tags=["wallets"])


@wallet_router.get("/{user_id}", response_model=WalletSummaryResponse)
def get_wallet(user_id: str) -> WalletSummaryResponse:
    summary = get_wallet_summary(user_id)
    return WalletSummaryResponse(
        user_id=summary.user_id,
        balance=summary.balance,
        total_earnings=summary.total_earnings,
        total_withdrawals=summary.total_withdrawals,
        pending_withdrawals=summary.pending_withdrawals,
        available_balance=summary.available_balance,
        minimum_withdrawal=summary.minimum_withdrawal,
        can_withdraw=summary.can_withdraw,
        is_active=summary.is_active,
        recent_entries=[LedgerEntryResponse(**entry) for entry in summary.recent_entries],
    )
