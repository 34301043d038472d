import csv
import sys
from collections import Counter

from account_ledger import AccountLedger
from engine_log import log_error, log_rejection
from engine_settings import get_settings
from transaction_journal import TransactionJournal
from transaction_reader import TransactionReader, write_account_totals
from transaction_types import ActionKind, Outcome


class PaymentEngine:
    """
    Applies incoming actions, strictly in the order given, to an account ledger and a transaction journal.

    Deposits and withdrawals are checked, applied to the ledger and only then journaled.
    Disputes, resolves and chargebacks look up the journaled tx first and then move its
    original amount between available/held on the acting client's account.
    A rejected action is logged and dropped; it never stops the run.
    """

    def __init__(self, ledger=None, journal=None, settings=None):
        self.ledger = ledger if ledger is not None else AccountLedger()
        self.journal = journal if journal is not None else TransactionJournal()
        self.settings = settings or get_settings()
        self.handlers = {
            ActionKind.DEPOSIT: self.process_deposit,
            ActionKind.WITHDRAWAL: self.process_withdrawal,
            ActionKind.DISPUTE: self.process_dispute,
            ActionKind.RESOLVE: self.process_resolve,
            ActionKind.CHARGEBACK: self.process_chargeback,
        }

    def process_actions(self, actions):
        outcomes = Counter()
        for action in actions:
            outcomes[self.process_action(action)] += 1
        return outcomes

    def process_action(self, action):
        handler = self.handlers.get(action.kind)
        if handler is None:
            return self.reject(Outcome.REJECTED_SHAPE, "invalid record_type", action)
        return handler(action)

    def process_deposit(self, action):
        return self.apply_transaction(action, self.ledger.deposit)

    def process_withdrawal(self, action):
        return self.apply_transaction(action, self.ledger.withdraw)

    def process_dispute(self, action):
        return self.apply_dispute_step(action, self.ledger.open_dispute, "insufficient available funds")

    def process_resolve(self, action):
        return self.apply_dispute_step(action, self.ledger.resolve_dispute, "insufficient held funds")

    def process_chargeback(self, action):
        # a chargeback must always come from the client that owns the tx
        return self.apply_dispute_step(
            action, self.ledger.chargeback, "insufficient held funds", require_same_client=True
        )

    def apply_transaction(self, action, apply_to_ledger):
        record_type = action.label
        amount = action.amount
        if amount is None or amount <= 0:
            return self.reject(Outcome.REJECTED_SHAPE, "amount missing or not positive", action, amount)

        if self.journal.exists(action.tx):
            return self.reject(
                Outcome.REJECTED_REFERENCE, f"{record_type} duplicates existing tx_id", action, amount
            )

        if self.is_locked_out(action.client):
            return self.reject(Outcome.REJECTED_LOCKED, "account is locked", action, amount)

        outcome = apply_to_ledger(action.client, amount)
        if outcome is Outcome.REJECTED_REFERENCE:
            return self.reject(outcome, "client not found", action, amount)
        if outcome is Outcome.REJECTED_INSUFFICIENT_FUNDS:
            return self.reject(outcome, "nsf", action, amount)

        # exists() was checked above and nothing touched the journal since, and the amount is
        # positive, so record() cannot fail here. If it ever does, the ledger change stands.
        recorded = self.journal.record(action.tx, action.client, amount, action.kind)
        if not recorded.accepted:
            self.log_rejection("balance applied but tx could not be journaled", action, amount)

        return Outcome.ACCEPTED

    def apply_dispute_step(self, action, apply_to_ledger, insufficient_message, require_same_client=False):
        if action.amount is not None:
            return self.reject(Outcome.REJECTED_SHAPE, "amount not allowed", action, action.amount)

        existing_tx = self.journal.lookup(action.tx)
        if existing_tx is None:
            return self.reject(Outcome.REJECTED_REFERENCE, "tx not found", action)

        if require_same_client or self.settings.dispute_requires_matching_account:
            if existing_tx.client != action.client:
                return self.reject(Outcome.REJECTED_REFERENCE, "tx client_id mismatch", action)

        if self.is_locked_out(action.client):
            return self.reject(Outcome.REJECTED_LOCKED, "account is locked", action)

        amount = existing_tx.amount
        outcome = apply_to_ledger(action.client, amount)
        if outcome is Outcome.REJECTED_REFERENCE:
            return self.reject(outcome, "client not found", action, amount)
        if outcome is Outcome.REJECTED_INSUFFICIENT_FUNDS:
            return self.reject(outcome, insufficient_message, action, amount)

        return Outcome.ACCEPTED

    def is_locked_out(self, client_id):
        return self.settings.reject_locked_accounts and self.ledger.is_locked(client_id)

    def reject(self, outcome, message, action, amount=None):
        self.log_rejection(message, action, amount)
        return outcome

    def log_rejection(self, message, action, amount=None):
        if self.settings.log_rejections:
            log_rejection(message, action, amount)

    def get_account_totals(self):
        return self.ledger.snapshot()


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("usage: payment-engine <transactions.csv>", file=sys.stderr)
        return 2

    settings = get_settings()
    engine = PaymentEngine(settings=settings)
    try:
        engine.process_actions(TransactionReader(args[0], settings))
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        # the source failed partway, so no summary is written for a partial run
        log_error(f"could not read {args[0]}: {e}")
        return 1

    write_account_totals(engine.get_account_totals())
    return 0


if __name__ == '__main__':
    sys.exit(main())
