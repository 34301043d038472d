from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class ActionKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value):
        try:
            return cls(value.strip())
        except ValueError:
            return cls.UNKNOWN


class Outcome(Enum):
    ACCEPTED = "accepted"
    REJECTED_SHAPE = "rejected_shape"
    REJECTED_REFERENCE = "rejected_reference"
    REJECTED_INSUFFICIENT_FUNDS = "rejected_insufficient_funds"
    REJECTED_LOCKED = "rejected_locked"

    @property
    def accepted(self):
        return self is Outcome.ACCEPTED


@dataclass(frozen=True)
class IncomingAction:
    """One row of the input stream, already parsed into typed fields."""
    kind: ActionKind
    client: int
    tx: int
    amount: Optional[Decimal] = None
    # original type text, kept so unknown kinds can be reported as read
    raw_kind: Optional[str] = None

    @property
    def label(self):
        if self.kind is ActionKind.UNKNOWN and self.raw_kind:
            return self.raw_kind
        return self.kind.value
