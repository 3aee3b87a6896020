"""Wallet aggregate — per-user balance with an append-only ledger.

Every balance change goes through ``add_transaction`` and is recorded as a
``LedgerEntry`` keyed by a reference string. At most one *completed* entry
may hold a given reference: replaying a reference returns the entry that
already holds it and changes nothing. ``compensate`` undoes an entry by
appending its inverse, which frees the reference for a later retry.

Balances may go negative when a reversal debits more than is available.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, String, Text

from settlement.domain import settlement
from settlement.wallet.events import (
    WalletCredited,
    WalletDebited,
    WalletOpened,
    WalletTransactionCompensated,
)

MINIMUM_WITHDRAWAL = 100.0


class TransactionKind(Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class EntryStatus(Enum):
    COMPLETED = "completed"
    COMPENSATED = "compensated"


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@settlement.entity(part_of="Wallet")
class LedgerEntry:
    kind = String(required=True, max_length=10, choices=TransactionKind)
    amount = Float(required=True)
    description = String(max_length=500)
    reference = String(required=True, max_length=255)
    metadata = Text()  # JSON
    status = String(
        max_length=20,
        choices=EntryStatus,
        default=EntryStatus.COMPLETED.value,
    )
    compensates = String(max_length=255)
    compensated_by = String(max_length=255)
    created_at = DateTime(required=True)

    @property
    def is_active(self) -> bool:
        return self.status == EntryStatus.COMPLETED.value and not self.compensates

    @property
    def details(self) -> dict:
        return json.loads(self.metadata) if self.metadata else {}


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@settlement.aggregate
class Wallet:
    user_id = Identifier(identifier=True)
    balance = Float(default=0.0)
    total_earnings = Float(default=0.0)
    total_withdrawals = Float(default=0.0)
    pending_withdrawals = Float(default=0.0)
    minimum_withdrawal = Float(default=MINIMUM_WITHDRAWAL)
    is_active = Boolean(default=True)
    entries = HasMany(LedgerEntry)
    last_transaction_at = DateTime()
    created_at = DateTime()

    @classmethod
    def open(cls, user_id: str):
        now = datetime.now(UTC)
        wallet = cls(user_id=user_id, created_at=now)
        wallet.raise_(WalletOpened(user_id=user_id, opened_at=now))
        return wallet

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def available_balance(self) -> float:
        return (self.balance or 0.0) - (self.pending_withdrawals or 0.0)

    @property
    def can_withdraw(self) -> bool:
        return bool(self.is_active) and self.available_balance >= (self.minimum_withdrawal or 0.0)

    def has_sufficient_balance(self, amount: float) -> bool:
        return self.available_balance >= amount

    def active_entry(self, reference: str) -> LedgerEntry | None:
        for entry in self.entries or []:
            if entry.reference == reference and entry.is_active:
                return entry
        return None

    def recent_entries(self, limit: int = 10) -> list[LedgerEntry]:
        entries = sorted(self.entries or [], key=lambda e: e.created_at, reverse=True)
        return entries[:limit]

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_transaction(
        self,
        kind: str,
        amount: float,
        description: str,
        reference: str,
        metadata: dict | None = None,
    ) -> LedgerEntry:
        """Append one entry and adjust the balance; a replayed reference is a no-op."""
        try:
            kind = TransactionKind(kind)
        except ValueError:
            raise ValidationError({"kind": [f"Unknown transaction kind: {kind}"]}) from None
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Transaction amount must be positive"]})
        if not reference:
            raise ValidationError({"reference": ["A transaction reference is required"]})

        existing = self.active_entry(reference)
        if existing is not None:
            return existing

        now = datetime.now(UTC)
        entry = LedgerEntry(
            kind=kind.value,
            amount=amount,
            description=description,
            reference=reference,
            metadata=json.dumps(metadata) if metadata else None,
            created_at=now,
        )
        self.add_entries(entry)
        self._apply(kind, amount)
        self.last_transaction_at = now

        if kind == TransactionKind.CREDIT:
            self.raise_(
                WalletCredited(
                    user_id=str(self.user_id),
                    amount=amount,
                    reference=reference,
                    balance=self.balance,
                    credited_at=now,
                )
            )
        else:
            self.raise_(
                WalletDebited(
                    user_id=str(self.user_id),
                    amount=amount,
                    reference=reference,
                    balance=self.balance,
                    debited_at=now,
                )
            )
        return entry

    def compensate(self, reference: str, compensation_reference: str) -> LedgerEntry | None:
        """Undo the active entry holding ``reference``.

        Returns the inverse entry, or None when the compensation was already
        applied.
        """
        for entry in self.entries or []:
            if entry.reference == compensation_reference and entry.compensates == reference:
                return None

        original = self.active_entry(reference)
        if original is None:
            raise ValidationError({"reference": [f"No active transaction with reference {reference}"]})

        kind = TransactionKind(original.kind)
        inverse_kind = TransactionKind.DEBIT if kind == TransactionKind.CREDIT else TransactionKind.CREDIT

        now = datetime.now(UTC)
        original.status = EntryStatus.COMPENSATED.value
        original.compensated_by = compensation_reference
        inverse = LedgerEntry(
            kind=inverse_kind.value,
            amount=original.amount,
            description=f"Compensation for {reference}",
            reference=compensation_reference,
            compensates=reference,
            created_at=now,
        )
        self.add_entries(inverse)
        self._undo(kind, original.amount)
        self.last_transaction_at = now
        self.raise_(
            WalletTransactionCompensated(
                user_id=str(self.user_id),
                reference=reference,
                compensation_reference=compensation_reference,
                amount=original.amount,
                balance=self.balance,
                compensated_at=now,
            )
        )
        return inverse

    def _apply(self, kind: TransactionKind, amount: float) -> None:
        if kind == TransactionKind.CREDIT:
            self.balance = (self.balance or 0.0) + amount
            self.total_earnings = (self.total_earnings or 0.0) + amount
        else:
            self.balance = (self.balance or 0.0) - amount
            self.total_withdrawals = (self.total_withdrawals or 0.0) + amount

    def _undo(self, kind: TransactionKind, amount: float) -> None:
        if kind == TransactionKind.CREDIT:
            self.balance = (self.balance or 0.0) - amount
            self.total_earnings = (self.total_earnings or 0.0) - amount
        else:
            self.balance = (self.balance or 0.0) + amount
            self.total_withdrawals = (self.total_withdrawals or 0.0) - amount
