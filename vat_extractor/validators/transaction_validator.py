"""Per-transaction validation."""
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import List, Optional

from ..config.settings import (
    AMOUNT_CEILING,
    COUNTERPARTY_MAX_LENGTH,
    COUNTERPARTY_MIN_LENGTH,
    MIN_VALID_YEAR,
)
from ..models import Transaction, Violation

ZERO = Decimal("0")
ONE = Decimal("1")


def validate(transaction: Transaction, today: Optional[date] = None) -> List[Violation]:
    """
    Check a transaction against the plausibility rules.

    Never raises; an empty list means the transaction is valid.

    Args:
        transaction: Transaction to check
        today: Reference date for the future-date rule (defaults to today)

    Returns:
        List of violations in rule order
    """
    today = today or date.today()
    violations = []

    # Date
    if transaction.date is None:
        violations.append(Violation.DATE_MISSING)
    else:
        if transaction.date > today:
            violations.append(Violation.DATE_IN_FUTURE)
        if transaction.date.year < MIN_VALID_YEAR:
            violations.append(Violation.DATE_TOO_OLD)

    # Amount
    amount = transaction.amount
    if not amount.is_finite():
        violations.append(Violation.AMOUNT_NOT_FINITE)
    elif amount == 0:
        violations.append(Violation.AMOUNT_ZERO)
    elif abs(amount) > AMOUNT_CEILING:
        violations.append(Violation.AMOUNT_TOO_LARGE)

    # VAT rate
    rate = transaction.vat_rate
    if not rate.is_finite() or rate < ZERO or rate > ONE:
        violations.append(Violation.VAT_RATE_OUT_OF_RANGE)

    # VAT amount
    vat_amount = transaction.vat_amount
    if not vat_amount.is_finite():
        violations.append(Violation.VAT_AMOUNT_NOT_FINITE)
    elif vat_amount < 0:
        violations.append(Violation.VAT_AMOUNT_NEGATIVE)

    # Counterparty
    counterparty = transaction.counterparty
    if not counterparty:
        violations.append(Violation.COUNTERPARTY_MISSING)
    elif len(counterparty) < COUNTERPARTY_MIN_LENGTH:
        violations.append(Violation.COUNTERPARTY_TOO_SHORT)
    elif len(counterparty) > COUNTERPARTY_MAX_LENGTH:
        violations.append(Violation.COUNTERPARTY_TOO_LONG)
    elif counterparty.isdigit():
        violations.append(Violation.COUNTERPARTY_NUMERIC)

    return violations


class TransactionValidator:
    """Attaches violations to transactions and normalizes their VAT fields."""

    def __init__(self, today: Optional[date] = None):
        """
        Initialize validator.

        Args:
            today: Fixed reference date; the current date is used when omitted
        """
        self.today = today

    def validate(self, transaction: Transaction) -> List[Violation]:
        return validate(transaction, self.today)

    def finalize(self, transaction: Transaction) -> Transaction:
        """
        Return a validated copy of a transaction.

        Violations are computed on the record as built. The copy then gets its
        rate clamped into [0, 1] and a finite, non-negative VAT amount.
        """
        violations = tuple(self.validate(transaction))
        return replace(
            transaction,
            vat_rate=_clamp_rate(transaction.vat_rate),
            vat_amount=abs(transaction.vat_amount) if transaction.vat_amount.is_finite() else ZERO,
            violations=violations,
        )


def _clamp_rate(rate: Decimal) -> Decimal:
    if not rate.is_finite():
        return ZERO
    return min(max(rate, ZERO), ONE)
