from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from transaction_types import ActionKind, Outcome


@dataclass(frozen=True)
class TransactionRecord:
    tx: int
    client: int
    amount: Decimal
    kind: ActionKind = ActionKind.DEPOSIT


class TransactionJournal:
    """Original deposits and withdrawals, keyed by tx id, kept for the whole run."""

    def __init__(self):
        # we will have an issue if we dont have enough memory for all the tx tracking.
        self.tx_log = {}

    def __len__(self):
        return len(self.tx_log)

    def exists(self, tx_id):
        return tx_id in self.tx_log

    def lookup(self, tx_id) -> Optional[TransactionRecord]:
        return self.tx_log.get(tx_id)

    def record(self, tx_id, client_id, amount, kind=ActionKind.DEPOSIT):
        # tx ids are unique across all clients, not per client
        if tx_id in self.tx_log:
            return Outcome.REJECTED_REFERENCE
        if amount is None or amount < 0:
            return Outcome.REJECTED_SHAPE

        self.tx_log[tx_id] = TransactionRecord(tx=tx_id, client=client_id, amount=amount, kind=kind)
        return Outcome.ACCEPTED
