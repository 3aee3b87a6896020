"""Settlement bounded context — Package Dispatch and Profit Settlement.

Turns orders that are ready for shipping into carrier packages, and settles
marketer and platform commissions into wallet ledgers once an order is
delivered (reversing them on cancellation or return). Uses CQRS aggregates
because the carrier owns tracking state and the ledger keeps its own
append-only history.
"""

from protean.domain import Domain

settlement = Domain(name="settlement")
