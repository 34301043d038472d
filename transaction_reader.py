import csv
import sys
from decimal import Decimal, ROUND_DOWN, InvalidOperation

from engine_log import log_error, log_rejection
from engine_settings import get_settings
from transaction_types import ActionKind, IncomingAction

MAX_CLIENT_ID = 65535
MAX_TX_ID = 4294967295

OUTPUT_FIELDNAMES = ['client', 'available', 'held', 'total', 'locked']


class TransactionReader:
    """
    Reads transaction rows from a csv file and yields IncomingAction objects in file order.

    Rows that cannot be parsed (bad ints, bad decimals, negative amounts, out of range ids,
    missing columns) are logged to stderr and skipped. They never reach the engine.
    """

    def __init__(self, filename, settings=None):
        self.filename = filename
        self.settings = settings or get_settings()
        self.set_default_field_order()

    def __iter__(self):
        return self.read_transaction_data()

    def set_default_field_order(self):
        self.type_field_idx = 0
        self.client_field_idx = 1
        self.tx_field_idx = 2
        self.amount_field_idx = 3

    def discover_field_order(self, row):
        """
        Use the header row to locate the fields, if the row is a header.
        Columns we do not know about are ignored. Returns False (and keeps the default order)
        when the row does not name the required columns, meaning it is data.
        """
        names = [field.strip().lower() for field in row]
        if not all(name in names for name in ("type", "client", "tx")):
            self.set_default_field_order()
            return False

        self.type_field_idx = names.index("type")
        self.client_field_idx = names.index("client")
        self.tx_field_idx = names.index("tx")
        self.amount_field_idx = names.index("amount") if "amount" in names else None
        return True

    def read_transaction_data(self):
        if not self.filename:
            raise RuntimeError("no filename to read has been set. aborting.")
        return self._read_actions()

    def _read_actions(self):
        # utf-8-sig drops the byte order mark some spreadsheet exports put before the header
        with open(self.filename, newline="", encoding="utf-8-sig") as file:
            csvreader = csv.reader(file)
            first_row = next(csvreader, None)
            if first_row is None:
                return
            if not self.discover_field_order(first_row):
                # no header, the first row is already a transaction
                action = self.parse_record(first_row)
                if action is not None:
                    yield action

            for record in csvreader:
                if not record:
                    continue
                action = self.parse_record(record)
                if action is not None:
                    yield action

    def parse_record(self, record):
        try:
            action = self.normalize_record(record)
        except (ValueError, InvalidOperation) as e:
            log_error(f"field format error: {e} while attempting to normalize row like: {repr(record)}")
            return None
        except IndexError as e:
            log_error(f"{e} while attempting to normalize row like: {repr(record)}")
            return None

        if not self.validate_record(action):
            return None

        return action

    def normalize_record(self, record):
        raw_kind = record[self.type_field_idx].strip()
        return IncomingAction(
            kind=ActionKind.from_string(raw_kind),
            client=int(record[self.client_field_idx].strip()),
            tx=int(record[self.tx_field_idx].strip()),
            amount=self.get_normalized_amount(record),
            raw_kind=raw_kind,
        )

    def get_normalized_amount(self, record):
        if self.amount_field_idx is None or self.amount_field_idx >= len(record):
            return None
        raw_amount = record[self.amount_field_idx].strip()
        if not raw_amount:
            return None

        amount = Decimal(raw_amount)
        if not amount.is_finite():
            raise ValueError(f"amount {raw_amount} is not a finite number")
        if amount < 0:
            raise ValueError(f"amount {raw_amount} is negative")

        # chose to round down in all cases.
        quantum = Decimal(1).scaleb(-self.settings.amount_precision)
        amount = amount.quantize(quantum, rounding=ROUND_DOWN).normalize()
        if amount.as_tuple().exponent > 0:
            # normalize() turns 100 into 1E+2
            amount = amount.quantize(Decimal(1))
        return amount

    def validate_record(self, action):
        if not (0 <= action.tx <= MAX_TX_ID):
            log_rejection("invalid tx_id", action, action.amount)
            return False

        if not (0 <= action.client <= MAX_CLIENT_ID):
            log_rejection("invalid client_id", action, action.amount)
            return False

        return True


def format_amount(value):
    return f"{value.normalize():f}"


def write_account_totals(account_totals, stream=None):
    csvwriter = csv.writer(stream or sys.stdout, lineterminator="\n")
    csvwriter.writerow(OUTPUT_FIELDNAMES)
    for account in account_totals:
        csvwriter.writerow([
            account.client,
            format_amount(account.available),
            format_amount(account.held),
            format_amount(account.total),
            str(account.locked).lower(),
        ])
