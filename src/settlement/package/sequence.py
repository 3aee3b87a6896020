"""Tracking-number allocation.

Package ids are handed out from a persistent named counter. Increments are
serialized by a process-wide lock so concurrent callers never observe the
same value.
"""

import threading

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer, String
from protean.utils.globals import current_domain

from settlement.domain import settlement

PACKAGE_SEQUENCE = "package_id"

_sequence_lock = threading.Lock()


@settlement.aggregate
class Counter:
    name = String(identifier=True, max_length=50)
    sequence = Integer(default=0)

    def increment(self) -> int:
        self.sequence = (self.sequence or 0) + 1
        return self.sequence


def next_value(name: str) -> int:
    with _sequence_lock:
        repo = current_domain.repository_for(Counter)
        try:
            counter = repo.get(name)
        except ObjectNotFoundError:
            counter = Counter(name=name, sequence=0)
        value = counter.increment()
        repo.add(counter)
        return value


def next_package_id() -> int:
    return next_value(PACKAGE_SEQUENCE)
