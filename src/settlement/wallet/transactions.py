"""Wallet transactions — commands and handlers."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from settlement.domain import settlement
from settlement.wallet.wallet import Wallet


@settlement.command(part_of="Wallet")
class AddWalletTransaction:
    user_id = Identifier(required=True)
    kind = String(required=True, max_length=10)
    amount = Float(required=True)
    description = String(max_length=500)
    reference = String(required=True, max_length=255)
    metadata = Text()  # JSON


@settlement.command(part_of="Wallet")
class CompensateWalletTransaction:
    user_id = Identifier(required=True)
    reference = String(required=True, max_length=255)
    compensation_reference = String(required=True, max_length=255)


def _load_or_open(user_id: str) -> Wallet:
    try:
        return current_domain.repository_for(Wallet).get(user_id)
    except ObjectNotFoundError:
        return Wallet.open(user_id)


@settlement.command_handler(part_of=Wallet)
class WalletTransactionHandler:
    @handle(AddWalletTransaction)
    def add_transaction(self, command):
        metadata = json.loads(command.metadata) if isinstance(command.metadata, str) else command.metadata
        wallet = _load_or_open(str(command.user_id))
        entry = wallet.add_transaction(
            kind=command.kind,
            amount=command.amount,
            description=command.description,
            reference=command.reference,
            metadata=metadata,
        )
        current_domain.repository_for(Wallet).add(wallet)
        return str(entry.id)

    @handle(CompensateWalletTransaction)
    def compensate_transaction(self, command):
        wallet = current_domain.repository_for(Wallet).get(str(command.user_id))
        inverse = wallet.compensate(command.reference, command.compensation_reference)
        current_domain.repository_for(Wallet).add(wallet)
        return str(inverse.id) if inverse else None
