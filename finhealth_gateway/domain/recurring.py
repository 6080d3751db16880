"""Recurring charge detection - infer subscriptions from transaction history"""

import re
from datetime import date, timedelta
from typing import Dict, List, Optional
from finhealth_gateway.domain.models import Category, RecurringCharge, RecurringFrequency, Transaction
from finhealth_gateway.utils.date_utils import add_months, days_between

AMOUNT_TOLERANCE = 0.10  # Max relative deviation from the group's mean amount
INTERVAL_TOLERANCE_DAYS = 5  # Max deviation of any gap from the mean gap

# Inclusive mean-gap ranges in days, checked in order
FREQUENCY_RANGES = [
    (RecurringFrequency.MONTHLY, 25, 35),
    (RecurringFrequency.BIWEEKLY, 12, 16),
    (RecurringFrequency.WEEKLY, 5, 9),
]

MONTHLY_MULTIPLIERS = {
    RecurringFrequency.WEEKLY: 4.33,  # ~4.33 weeks per month
    RecurringFrequency.BIWEEKLY: 2.17,
    RecurringFrequency.MONTHLY: 1.0,
}

_DOMAIN_SUFFIX = re.compile(r"\.(com|net|org|io)$", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_payee(payee: str) -> str:
    """
    Canonicalize a merchant name for grouping.

    "NETFLIX.COM" and "Netflix" both become "netflix".
    """
    payee = _DOMAIN_SUFFIX.sub("", payee.lower())
    return _WHITESPACE.sub(" ", payee).strip()


def group_transactions_by_payee(transactions: List[Transaction]) -> Dict[str, List[Transaction]]:
    """Group transactions by normalized payee, in first-seen order"""
    groups: Dict[str, List[Transaction]] = {}
    for txn in transactions:
        payee = normalize_payee(txn.payee_clean or txn.payee_original or "Unknown")
        groups.setdefault(payee, []).append(txn)
    return groups


def _sort_by_date(transactions: List[Transaction]) -> List[Transaction]:
    # Unparseable dates sort last; detect_frequency rejects them anyway
    return sorted(transactions, key=lambda t: (t.date is None, t.date or date.min))


def are_amounts_similar(transactions: List[Transaction]) -> bool:
    """True if every absolute amount is within 10% of the mean absolute amount"""
    if not transactions:
        return False

    amounts = [abs(t.amount) for t in transactions]
    avg = sum(amounts) / len(amounts)
    if avg == 0:
        return False

    return all(abs(amount - avg) / avg <= AMOUNT_TOLERANCE for amount in amounts)


def detect_frequency(transactions: List[Transaction]) -> Optional[RecurringFrequency]:
    """
    Classify the cadence of date-sorted transactions.

    Requirements:
    - At least two transactions, all with a valid date
    - Every gap within 5 days of the mean gap
    - Mean gap: 25-35 monthly, 12-16 biweekly, 5-9 weekly
    """
    if len(transactions) < 2:
        return None
    if any(t.date is None for t in transactions):
        return None

    intervals = [
        days_between(prev.date, curr.date)
        for prev, curr in zip(transactions, transactions[1:])
    ]
    avg_interval = sum(intervals) / len(intervals)

    if any(abs(interval - avg_interval) > INTERVAL_TOLERANCE_DAYS for interval in intervals):
        return None

    for frequency, low, high in FREQUENCY_RANGES:
        if low <= avg_interval <= high:
            return frequency

    return None


def calculate_next_date(last_date: date, frequency: RecurringFrequency) -> date:
    """Advance last_date by one cadence unit (monthly uses calendar months)"""
    if frequency == RecurringFrequency.MONTHLY:
        return add_months(last_date, 1)
    if frequency == RecurringFrequency.BIWEEKLY:
        return last_date + timedelta(days=14)
    return last_date + timedelta(days=7)


def get_most_common_category(transactions: List[Transaction]) -> Optional[str]:
    """Most frequent category_id; ties go to the first one encountered"""
    counts: Dict[str, int] = {}
    for txn in transactions:
        if txn.category_id:
            counts[txn.category_id] = counts.get(txn.category_id, 0) + 1

    most_common = None
    max_count = 0
    for category_id, count in counts.items():
        if count > max_count:
            max_count = count
            most_common = category_id

    return most_common


def detect_recurring_charges(
    transactions: List[Transaction],
    categories: List[Category],
) -> List[RecurringCharge]:
    """
    Main entry point: detect recurring charges without any user setup.

    Flow:
    1. Group by normalized payee
    2. Skip groups with fewer than 2 transactions
    3. Skip groups whose amounts vary more than 10%
    4. Skip groups without a consistent weekly/biweekly/monthly cadence
    5. Build the charge from the group's average amount and latest date
    6. Sort by amount, largest first
    """
    categories_by_id: Dict[str, Category] = {}
    for category in categories:
        categories_by_id.setdefault(category.id, category)

    recurring = []
    for payee, payee_transactions in group_transactions_by_payee(transactions).items():
        if len(payee_transactions) < 2:
            continue

        sorted_txns = _sort_by_date(payee_transactions)

        if not are_amounts_similar(sorted_txns):
            continue

        frequency = detect_frequency(sorted_txns)
        if frequency is None:
            continue

        avg_amount = sum(abs(t.amount) for t in sorted_txns) / len(sorted_txns)
        last_date = sorted_txns[-1].date

        category_id = get_most_common_category(sorted_txns)
        category = categories_by_id.get(category_id) if category_id else None

        recurring.append(
            RecurringCharge(
                payee=payee,
                amount=avg_amount,
                frequency=frequency,
                category=(category.name or None) if category else None,
                last_date=last_date,
                next_expected_date=calculate_next_date(last_date, frequency),
                transaction_count=len(sorted_txns),
                category_icon=category.icon if category else None,
                category_color=category.color if category else None,
            )
        )

    # Biggest charges first, equal amounts by payee
    return sorted(recurring, key=lambda charge: (-charge.amount, charge.payee))


def calculate_monthly_total(charges: List[RecurringCharge]) -> float:
    """Sum of monthly-equivalent amounts for all recurring charges"""
    return sum((charge.amount * MONTHLY_MULTIPLIERS[charge.frequency] for charge in charges), 0.0)
