"""Unit tests for recurring charge detection"""

import random
import pytest
from datetime import date, timedelta
from finhealth_gateway.domain.models import Category, RecurringCharge, RecurringFrequency, Transaction
from finhealth_gateway.domain.recurring import (
    are_amounts_similar,
    calculate_monthly_total,
    calculate_next_date,
    detect_frequency,
    detect_recurring_charges,
    get_most_common_category,
    group_transactions_by_payee,
    normalize_payee,
)


CATEGORIES = [
    Category(id="cat_entertainment", name="Entertainment", icon="🎬", color="#8b5cf6"),
    Category(id="cat_health", name="Health", icon="💪", color="#10b981"),
    Category(id="cat_utilities", name="Utilities", icon="💡", color="#f59e0b"),
]


def make_txn(txn_id, payee, amount, txn_date, category_id=None, payee_original=None):
    return Transaction(
        id=txn_id,
        payee_clean=payee,
        payee_original=payee_original,
        amount=amount,
        date=txn_date,
        category_id=category_id,
    )


def series(payee, amount, start, interval_days, count, category_id=None):
    """Evenly spaced charges from one payee"""
    return [
        make_txn(f"{payee}_{i}", payee, amount, start + timedelta(days=i * interval_days), category_id)
        for i in range(count)
    ]


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("NETFLIX.COM", "netflix"),
        ("Netflix", "netflix"),
        ("  Spotify   Premium  ", "spotify premium"),
        ("github.io", "github"),
        ("Example.Org", "example"),
        ("shop.com.au", "shop.com.au"),  # only a trailing suffix is stripped
    ],
)
def test_normalize_payee(raw, expected):
    """Case-folding, suffix stripping, whitespace collapsing"""
    assert normalize_payee(raw) == expected


def test_group_transactions_by_payee_falls_back_to_original_name():
    """payee_clean wins, then payee_original, then 'Unknown'"""
    transactions = [
        make_txn("1", "Netflix", -15.99, date(2024, 1, 1)),
        make_txn("2", None, -15.99, date(2024, 2, 1), payee_original="NETFLIX.COM"),
        make_txn("3", None, -4.00, date(2024, 2, 3)),
    ]

    groups = group_transactions_by_payee(transactions)

    assert list(groups) == ["netflix", "unknown"]
    assert [t.id for t in groups["netflix"]] == ["1", "2"]


def test_amounts_within_ten_percent_of_mean_are_similar():
    """Tolerance is measured against the group's mean absolute amount"""
    assert are_amounts_similar([make_txn("1", "a", -10.00, None), make_txn("2", "a", -10.90, None)])
    # 10.00 and 11.50 are each ~7% from their 10.75 mean
    assert are_amounts_similar([make_txn("1", "a", -10.00, None), make_txn("2", "a", -11.50, None)])
    # 10.00 and 12.50 are each ~11% from their 11.25 mean
    assert not are_amounts_similar([make_txn("1", "a", -10.00, None), make_txn("2", "a", -12.50, None)])


def test_zero_amounts_are_never_similar():
    """A zero mean cannot anchor a tolerance"""
    assert not are_amounts_similar([make_txn("1", "a", 0, None), make_txn("2", "a", 0, None)])


@pytest.mark.parametrize(
    "interval_days, expected",
    [
        (30, RecurringFrequency.MONTHLY),
        (25, RecurringFrequency.MONTHLY),
        (35, RecurringFrequency.MONTHLY),
        (14, RecurringFrequency.BIWEEKLY),
        (12, RecurringFrequency.BIWEEKLY),
        (7, RecurringFrequency.WEEKLY),
        (5, RecurringFrequency.WEEKLY),
        (20, None),
        (10, None),
        (60, None),
        (2, None),
    ],
)
def test_detect_frequency_buckets(interval_days, expected):
    """Mean gap classification"""
    transactions = series("a", -9.99, date(2024, 1, 1), interval_days, 2)
    assert detect_frequency(transactions) == expected


def test_detect_frequency_rejects_inconsistent_gaps():
    """Every gap must be within 5 days of the mean gap"""
    start = date(2024, 1, 1)
    transactions = [
        make_txn("1", "a", -5, start),
        make_txn("2", "a", -5, start + timedelta(days=20)),
        make_txn("3", "a", -5, start + timedelta(days=60)),
    ]
    # gaps 20 and 40, mean 30
    assert detect_frequency(transactions) is None


def test_detect_frequency_tolerates_calendar_month_lengths():
    """31/29/31 day gaps still read as monthly"""
    transactions = [
        make_txn(str(month), "a", -5, date(2024, month, 15))
        for month in (1, 2, 3, 4)
    ]
    assert detect_frequency(transactions) == RecurringFrequency.MONTHLY


def test_detect_frequency_rejects_unparseable_dates():
    """A missing date fails the consistency gate instead of raising"""
    transactions = series("a", -5, date(2024, 1, 1), 30, 3)
    transactions.append(make_txn("bad", "a", -5, None))
    assert detect_frequency(transactions) is None


def test_calculate_next_date():
    """One cadence unit past the last charge"""
    assert calculate_next_date(date(2024, 2, 1), RecurringFrequency.MONTHLY) == date(2024, 3, 1)
    assert calculate_next_date(date(2024, 12, 15), RecurringFrequency.MONTHLY) == date(2025, 1, 15)
    assert calculate_next_date(date(2024, 1, 31), RecurringFrequency.MONTHLY) == date(2024, 2, 29)
    assert calculate_next_date(date(2024, 2, 1), RecurringFrequency.BIWEEKLY) == date(2024, 2, 15)
    assert calculate_next_date(date(2024, 2, 1), RecurringFrequency.WEEKLY) == date(2024, 2, 8)


def test_get_most_common_category():
    """Highest count wins; ties go to the first seen; None when uncategorized"""
    start = date(2024, 1, 1)
    assert get_most_common_category(
        [
            make_txn("1", "a", -5, start, "cat_health"),
            make_txn("2", "a", -5, start, "cat_utilities"),
            make_txn("3", "a", -5, start, "cat_utilities"),
        ]
    ) == "cat_utilities"
    assert get_most_common_category(
        [
            make_txn("1", "a", -5, start, "cat_health"),
            make_txn("2", "a", -5, start, "cat_utilities"),
        ]
    ) == "cat_health"
    assert get_most_common_category([make_txn("1", "a", -5, start)]) is None


def test_detect_recurring_charges_netflix_variants():
    """Differently spelled payees collapse into one monthly charge"""
    transactions = [
        make_txn("1", "NETFLIX.COM", -15.99, date(2024, 1, 1), "cat_entertainment"),
        make_txn("2", "Netflix", -15.99, date(2024, 2, 1), "cat_entertainment"),
    ]

    charges = detect_recurring_charges(transactions, CATEGORIES)

    assert len(charges) == 1
    charge = charges[0]
    assert charge.payee == "netflix"
    assert charge.frequency == RecurringFrequency.MONTHLY
    assert charge.amount == pytest.approx(15.99)
    assert charge.last_date == date(2024, 2, 1)
    assert charge.next_expected_date == date(2024, 3, 1)
    assert charge.transaction_count == 2
    assert charge.category == "Entertainment"
    assert charge.category_icon == "🎬"
    assert charge.category_color == "#8b5cf6"


def test_detect_recurring_charges_single_occurrence_is_never_recurring():
    """At least two charges are needed for a cadence"""
    transactions = [make_txn("1", "Netflix", -15.99, date(2024, 1, 1))]
    assert detect_recurring_charges(transactions, CATEGORIES) == []


def test_detect_recurring_charges_empty_input():
    """No transactions, no charges, zero monthly total"""
    charges = detect_recurring_charges([], CATEGORIES)
    assert charges == []
    assert calculate_monthly_total(charges) == 0


def test_detect_recurring_charges_excludes_varying_amounts():
    """Groups failing the amount gate are dropped"""
    transactions = [
        make_txn("1", "Electric Co", -80.00, date(2024, 1, 10)),
        make_txn("2", "Electric Co", -120.00, date(2024, 2, 10)),
    ]
    assert detect_recurring_charges(transactions, CATEGORIES) == []


def test_detect_recurring_charges_excludes_unmatched_cadence():
    """Twenty days apart matches no bucket"""
    transactions = series("Coffee Club", -8.00, date(2024, 1, 1), 20, 3)
    assert detect_recurring_charges(transactions, CATEGORIES) == []


def test_detect_recurring_charges_sorted_by_amount(subscription_transactions):
    """Largest recurring charges first; one-offs excluded"""
    charges = detect_recurring_charges(subscription_transactions, CATEGORIES)

    assert [c.payee for c in charges] == ["netflix", "city gym"]
    netflix, gym = charges
    assert netflix.frequency == RecurringFrequency.MONTHLY
    assert netflix.transaction_count == 6
    assert netflix.last_date == date(2024, 6, 5)
    assert netflix.next_expected_date == date(2024, 7, 5)
    assert gym.frequency == RecurringFrequency.WEEKLY
    assert gym.transaction_count == 8
    assert gym.category == "Health"
    assert gym.next_expected_date == gym.last_date + timedelta(days=7)


def test_detect_recurring_charges_averages_amounts():
    """Charge amount is the mean absolute amount of the group"""
    transactions = [
        make_txn("1", "Water Utility", -40.00, date(2024, 1, 3), "cat_utilities"),
        make_txn("2", "Water Utility", -42.00, date(2024, 2, 2), "cat_utilities"),
        make_txn("3", "Water Utility", -44.00, date(2024, 3, 4), "cat_utilities"),
    ]

    charges = detect_recurring_charges(transactions, CATEGORIES)

    assert len(charges) == 1
    assert charges[0].amount == pytest.approx(42.00)
    assert charges[0].category == "Utilities"


def test_detect_recurring_charges_unknown_category():
    """Category ids missing from the lookup yield no display hints"""
    transactions = series("Cloud Storage", -2.99, date(2024, 1, 1), 30, 3, category_id="cat_missing")

    charge = detect_recurring_charges(transactions, CATEGORIES)[0]

    assert charge.category is None
    assert charge.category_icon is None
    assert charge.category_color is None


def test_detect_recurring_charges_is_order_independent(subscription_transactions):
    """Shuffled input yields the same charges in the same order"""
    expected = detect_recurring_charges(subscription_transactions, CATEGORIES)

    shuffled = list(subscription_transactions)
    random.Random(7).shuffle(shuffled)

    assert detect_recurring_charges(shuffled, CATEGORIES) == expected


def test_detect_recurring_charges_orders_equal_amounts_by_payee():
    """Charges with the same amount come out in the same order whatever the input order"""
    alpha = series("Alpha Cloud", -10.00, date(2024, 1, 3), 30, 3)
    beta = series("Beta Notes", -10.00, date(2024, 1, 9), 30, 3)

    forward = detect_recurring_charges(alpha + beta, CATEGORIES)
    backward = detect_recurring_charges(beta + alpha, CATEGORIES)

    assert [c.payee for c in forward] == ["alpha cloud", "beta notes"]
    assert backward == forward


def test_detect_recurring_charges_skips_group_with_bad_date():
    """An unparseable date excludes only its own payee group"""
    transactions = series("Music Stream", -9.99, date(2024, 1, 1), 30, 3)
    transactions += series("Podcast Plus", -4.99, date(2024, 1, 1), 30, 3)
    transactions.append(make_txn("bad", "Music Stream", -9.99, None))

    charges = detect_recurring_charges(transactions, CATEGORIES)

    assert [c.payee for c in charges] == ["podcast plus"]


def test_calculate_monthly_total():
    """Weekly and biweekly charges are converted to monthly equivalents"""
    charges = [
        RecurringCharge(
            payee="gym",
            amount=10.0,
            frequency=RecurringFrequency.WEEKLY,
            category=None,
            last_date=date(2024, 1, 1),
            next_expected_date=date(2024, 1, 8),
            transaction_count=4,
        ),
        RecurringCharge(
            payee="cleaner",
            amount=100.0,
            frequency=RecurringFrequency.BIWEEKLY,
            category=None,
            last_date=date(2024, 1, 1),
            next_expected_date=date(2024, 1, 15),
            transaction_count=3,
        ),
        RecurringCharge(
            payee="rent",
            amount=1500.0,
            frequency=RecurringFrequency.MONTHLY,
            category=None,
            last_date=date(2024, 1, 1),
            next_expected_date=date(2024, 2, 1),
            transaction_count=6,
        ),
    ]

    assert calculate_monthly_total(charges) == pytest.approx(43.3 + 217.0 + 1500.0)
