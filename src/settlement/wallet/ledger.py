"""Wallet ledger entry points.

Each call is a read-modify-write of one wallet, serialized per user.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from settlement.locks import wallet_locks
from settlement.wallet.transactions import AddWalletTransaction, CompensateWalletTransaction
from settlement.wallet.wallet import TransactionKind, Wallet

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class WalletSummary:
    user_id: str
    balance: float
    total_earnings: float
    total_withdrawals: float
    pending_withdrawals: float
    available_balance: float
    minimum_withdrawal: float
    can_withdraw: bool
    is_active: bool
    recent_entries: list[dict] = field(default_factory=list)


def add_transaction(
    user_id: str,
    kind: str,
    amount: float,
    description: str,
    reference: str,
    metadata: dict | None = None,
) -> str:
    """Record a credit or debit and return the id of the entry holding ``reference``."""
    with wallet_locks.hold(user_id):
        entry_id = current_domain.process(
            AddWalletTransaction(
                user_id=user_id,
                kind=kind,
                amount=amount,
                description=description,
                reference=reference,
                metadata=json.dumps(metadata) if metadata else None,
            ),
            asynchronous=False,
        )
    logger.info("Wallet transaction recorded", user_id=user_id, kind=kind, amount=amount, reference=reference)
    return entry_id


def credit(user_id: str, amount: float, description: str, reference: str, metadata: dict | None = None) -> str:
    return add_transaction(user_id, TransactionKind.CREDIT.value, amount, description, reference, metadata)


def debit(user_id: str, amount: float, description: str, reference: str, metadata: dict | None = None) -> str:
    return add_transaction(user_id, TransactionKind.DEBIT.value, amount, description, reference, metadata)


def compensate_transaction(user_id: str, reference: str, compensation_reference: str) -> str | None:
    with wallet_locks.hold(user_id):
        inverse_id = current_domain.process(
            CompensateWalletTransaction(
                user_id=user_id,
                reference=reference,
                compensation_reference=compensation_reference,
            ),
            asynchronous=False,
        )
    logger.info(
        "Wallet transaction compensated",
        user_id=user_id,
        reference=reference,
        compensation_reference=compensation_reference,
        replayed=inverse_id is None,
    )
    return inverse_id


def find_wallet(user_id: str) -> Wallet | None:
    try:
        return current_domain.repository_for(Wallet).get(user_id)
    except ObjectNotFoundError:
        return None


def get_wallet_summary(user_id: str, limit: int = 10) -> WalletSummary:
    wallet = current_domain.repository_for(Wallet).get(user_id)
    return WalletSummary(
        user_id=str(wallet.user_id),
        balance=wallet.balance,
        total_earnings=wallet.total_earnings,
        total_withdrawals=wallet.total_withdrawals,
        pending_withdrawals=wallet.pending_withdrawals,
        available_balance=wallet.available_balance,
        minimum_withdrawal=wallet.minimum_withdrawal,
        can_withdraw=wallet.can_withdraw,
        is_active=wallet.is_active,
        recent_entries=[
            {
                "id": str(entry.id),
                "kind": entry.kind,
                "amount": entry.amount,
                "description": entry.description,
                "reference": entry.reference,
                "status": entry.status,
                "metadata": entry.details,
                "created_at": entry.created_at.isoformat() if entry.created_at else None,
            }
            for entry in wallet.recent_entries(limit)
        ],
    )
