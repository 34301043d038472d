from dataclasses import dataclass, replace
from decimal import Decimal

from transaction_types import Outcome


@dataclass
class AccountBalance:
    client: int
    available: Decimal = Decimal(0)
    held: Decimal = Decimal(0)
    total: Decimal = Decimal(0)
    locked: bool = False


class AccountLedger:
    """
    Per-client balances.

    Every operation either applies fully or leaves the account untouched, and
    always moves total together with available/held so that
    total == available + held holds after each call. The ledger does not look
    at the locked flag; whether locked accounts may still be acted upon is
    decided by the caller.
    """

    def __init__(self):
        self.account_totals = {}

    def get(self, client_id):
        return self.account_totals.get(client_id)

    def is_locked(self, client_id):
        account = self.get(client_id)
        return account is not None and account.locked

    def deposit(self, client_id, amount):
        account = self.account_totals.get(client_id)
        if account is None:
            account = self.account_totals[client_id] = AccountBalance(client=client_id)

        account.available += amount
        account.total += amount
        return Outcome.ACCEPTED

    def withdraw(self, client_id, amount):
        account = self.get(client_id)
        if account is None:
            return Outcome.REJECTED_REFERENCE
        if account.available < amount:
            return Outcome.REJECTED_INSUFFICIENT_FUNDS

        account.available -= amount
        account.total -= amount
        return Outcome.ACCEPTED

    def open_dispute(self, client_id, amount):
        account = self.get(client_id)
        if account is None:
            return Outcome.REJECTED_REFERENCE
        if account.available < amount:
            return Outcome.REJECTED_INSUFFICIENT_FUNDS

        account.available -= amount
        account.held += amount
        return Outcome.ACCEPTED

    def resolve_dispute(self, client_id, amount):
        account = self.get(client_id)
        if account is None:
            return Outcome.REJECTED_REFERENCE
        if account.held < amount:
            return Outcome.REJECTED_INSUFFICIENT_FUNDS

        account.held -= amount
        account.available += amount
        return Outcome.ACCEPTED

    def chargeback(self, client_id, amount):
        # available is left alone: the disputed funds leave held and total for good
        account = self.get(client_id)
        if account is None:
            return Outcome.REJECTED_REFERENCE
        if account.held < amount:
            return Outcome.REJECTED_INSUFFICIENT_FUNDS

        account.held -= amount
        account.total -= amount
        account.locked = True
        return Outcome.ACCEPTED

    def snapshot(self):
        return [replace(account) for account in self.account_totals.values()]
