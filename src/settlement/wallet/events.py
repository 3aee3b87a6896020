"""Domain events for the Wallet aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from settlement.domain import settlement


@settlement.event(part_of="Wallet")
class WalletOpened:
    __version__ = 1

    user_id = Identifier(required=True)
    opened_at = DateTime(required=True)


@settlement.event(part_of="Wallet")
class WalletCredited:
    __version__ = 1

    user_id = Identifier(required=True)
    amount = Float(required=True)
    reference = String(required=True, max_length=255)
    balance = Float(required=True)
    credited_at = DateTime(required=True)


@settlement.event(part_of="Wallet")
class WalletDebited:
    __version__ = 1

    user_id = Identifier(required=True)
    amount = Float(required=True)
    reference = String(required=True, max_length=255)
    balance = Float(required=True)
    debited_at = DateTime(required=True)


@settlement.event(part_of="Wallet")
class WalletTransactionCompensated:
    __version__ = 1

    user_id = Identifier(required=True)
    reference = String(required=True, max_length=255)
    compensation_reference = String(required=True, max_length=255)
    amount = Float(required=True)
    balance = Float(required=True)
    compensated_at = DateTime(required=True)
