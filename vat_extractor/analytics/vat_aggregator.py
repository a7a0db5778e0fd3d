"""
VAT aggregation over validated transactions.

Only valid transactions with a non-zero VAT amount contribute. Amounts are
summed as Decimals and rounded once, at the end, to 2 decimal places.
"""
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List

from ..models import Direction, MonthlyBucket, Totals, Transaction
from ..utils.number_parser import round_money

ZERO = Decimal("0")


def _contributes(transaction: Transaction) -> bool:
    return transaction.is_valid and transaction.has_vat


def _sum_by_direction(transactions: Iterable[Transaction]) -> Dict[Direction, Decimal]:
    sums = {Direction.INPUT: ZERO, Direction.OUTPUT: ZERO}
    for transaction in transactions:
        sums[transaction.direction] += abs(transaction.vat_amount)
    return sums


def _make_totals(sums: Dict[Direction, Decimal]) -> Totals:
    input_vat = round_money(sums[Direction.INPUT])
    output_vat = round_money(sums[Direction.OUTPUT])
    return Totals(
        input_vat=input_vat,
        output_vat=output_vat,
        net_vat=round_money(output_vat - input_vat),
    )


def totals(transactions: Iterable[Transaction]) -> Totals:
    """
    Compute input, output and net VAT.

    Args:
        transactions: Validated transactions

    Returns:
        Totals where net_vat == round(output_vat - input_vat, 2)
    """
    return _make_totals(_sum_by_direction(t for t in transactions if _contributes(t)))


def monthly(transactions: Iterable[Transaction]) -> List[MonthlyBucket]:
    """
    Group VAT by calendar month.

    Months without VAT-bearing transactions are omitted.

    Args:
        transactions: Validated transactions

    Returns:
        Buckets in ascending "YYYY-MM" order
    """
    by_month: Dict[str, List[Transaction]] = defaultdict(list)
    for transaction in transactions:
        if _contributes(transaction) and transaction.date is not None:
            by_month[f"{transaction.date.year:04d}-{transaction.date.month:02d}"].append(transaction)

    buckets = []
    for month in sorted(by_month):
        month_totals = _make_totals(_sum_by_direction(by_month[month]))
        buckets.append(MonthlyBucket(
            month=month,
            input_vat=month_totals.input_vat,
            output_vat=month_totals.output_vat,
            net_vat=month_totals.net_vat,
        ))
    return buckets
