import sys


def log_rejection(message, action, amount=None):
    """Report an action that was dropped, naming the tx, client and type as read."""
    amount_detail = ""
    if amount:
        amount_detail = f" of ${amount}"
    print(
        f"tx_id {action.tx}, client_id {action.client}, failed to apply {action.label}{amount_detail}: {message}",
        file=sys.stderr,
    )


def log_error(message):
    print(f"transaction error: {message}", file=sys.stderr)
