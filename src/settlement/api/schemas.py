"""Pydantic API schemas for the Settlement domain.

These are the external API contracts — separate from domain commands.
The API layer translates between these schemas and domain results.
"""

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class ChangeOrderStatusRequest(BaseModel):
    status: str


class DistributeProfitsRequest(BaseModel):
    order_ids: list[str] | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class PackageCreationResponse(BaseModel):
    tracking_number: int | None = None
    carrier_accepted: bool
    error: str | None = None
    can_retry: bool = False
    already_exists: bool = False
    sent_to_carrier: bool = False


class StatusChangeResponse(BaseModel):
    order_id: str
    previous_status: str
    status: str
    package: PackageCreationResponse | None = None
    profits_distributed: bool | None = None
    errors: list[str] = []


class PackageResponse(BaseModel):
    package_id: int
    order_id: str
    shipping_company_id: str
    status: str
    barcode: str
    village_id: int
    to_name: str | None = None
    to_phone: str | None = None
    street: str | None = None
    description: str | None = None
    total_cost: float
    external_package_id: str | None = None
    delivery_cost: float | None = None
    qr_code: str | None = None
    send_attempts: int = 0
    last_error: str | None = None


class SettlementResponse(BaseModel):
    order_id: str
    applied: bool
    marketer_profit: float = 0.0
    commission: float = 0.0
    reason: str | None = None


class PendingSettlementResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    total: float
    commission: float
    marketer_profit: float | None = None


class BatchSettlementResponse(BaseModel):
    succeeded: list[str]
    skipped: list[dict]
    failed: list[dict]


class ResendOutcomeResponse(BaseModel):
    order_id: str
    tracking_number: int | None = None
    carrier_accepted: bool
    error: str | None = None


class ResendSweepResponse(BaseModel):
    outcomes: list[ResendOutcomeResponse]
    confirmed: int
    failed: int
    skipped: int


class LedgerEntryResponse(BaseModel):
    id: str
    kind: str
    amount: float
    description: str | None = None
    reference: str
    status: str
    metadata: dict = {}
    created_at: str | None = None


class WalletSummaryResponse(BaseModel):
    user_id: str
    balance: float
    total_earnings: float
    total_withdrawals: float
    pending_withdrawals: float
    available_balance: float
    minimum_withdrawal: float
    can_withdraw: bool
    is_active: bool
    recent_entries: list[LedgerEntryResponse]
