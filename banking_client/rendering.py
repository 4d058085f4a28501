"""
Transaction Rendering Module

Pure transformation from the API's transaction history into display rows.
Amounts are formatted from Decimal, never float.
"""

import locale
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple

from .logging_config import get_logger
from .schemas import TransactionRecord

logger = get_logger("banking_client.rendering")

TWO_PLACES = Decimal("0.01")
NO_TRANSACTIONS_TEXT = "No transactions found."


class TransactionKind(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"


@dataclass(frozen=True)
class DisplayRow:
    """One line of the transactions section"""
    type_label: str
    date_text: str
    amount_text: str
    kind: Optional[TransactionKind] = None
    amount_class: str = ""  # positive / negative
    is_placeholder: bool = False


PLACEHOLDER_ROW = DisplayRow(
    type_label=NO_TRANSACTIONS_TEXT,
    date_text="",
    amount_text="",
    is_placeholder=True
)


def format_amount(value: Decimal) -> str:
    """Exactly two decimal places, e.g. 150.00"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return f"{value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP):.2f}"


format_balance = format_amount


def classify(transaction_type: str) -> TransactionKind:
    """Substring heuristic over the free-text type: anything mentioning
    "deposit" is a deposit, everything else displays as a withdrawal."""
    if "deposit" in transaction_type.casefold():
        return TransactionKind.DEPOSIT
    return TransactionKind.WITHDRAWAL


def format_timestamp(raw: str) -> str:
    """Date and time in the current LC_TIME locale, or the raw string if it is not a date

    Python starts in the C locale; call use_system_locale() once at startup
    to format for the user.
    """
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (TypeError, ValueError):
        return raw
    return parsed.strftime("%c")


def use_system_locale() -> None:
    """Format dates for the user's environment locale"""
    try:
        locale.setlocale(locale.LC_TIME, "")
    except locale.Error as e:
        logger.warning(f"Environment locale unavailable, dates use the C locale: {e}")


def render_row(transaction: TransactionRecord) -> DisplayRow:
    kind = classify(transaction.type)
    is_deposit = kind == TransactionKind.DEPOSIT
    return DisplayRow(
        type_label=transaction.type,
        date_text=format_timestamp(transaction.timestamp),
        amount_text=f"{'+' if is_deposit else '-'}${format_amount(transaction.amount)}",
        kind=kind,
        amount_class="positive" if is_deposit else "negative"
    )


class RenderedTransactions:
    """Lazy, restartable sequence of display rows.

    Rows are computed on iteration; iterating twice yields the same rows.
    """

    def __init__(self, transactions: Iterable[TransactionRecord]):
        self._transactions: Tuple[TransactionRecord, ...] = tuple(transactions)

    def __iter__(self) -> Iterator[DisplayRow]:
        if not self._transactions:
            yield PLACEHOLDER_ROW
            return
        for transaction in self._transactions:
            yield render_row(transaction)

    def __len__(self) -> int:
        return max(1, len(self._transactions))


def render(transactions: Iterable[TransactionRecord]) -> RenderedTransactions:
    """Display model for a transaction history"""
    return RenderedTransactions(transactions)
