"""Financial health scoring engine - 0-1000 score with explainable sub-scores"""

import math
from dataclasses import dataclass
from typing import List, Tuple

from finhealth_gateway.domain.models import (
    BudgetDiscipline,
    DebtToIncome,
    DebtTrend,
    DebtVelocity,
    EmergencyBuffer,
    FinancialHealthScore,
    PaymentConsistency,
    SavingsRate,
    ScoreBreakdown,
    ScoreChange,
    ScoreInput,
)


@dataclass(frozen=True)
class ScoreFactor:
    """Static description of one scoring factor"""

    key: str
    label: str
    tip: str


# Declaration order drives tip tie-breaks and change reports
SCORE_FACTORS: List[ScoreFactor] = [
    ScoreFactor(
        "payment_consistency",
        "Payment Consistency",
        "Set up autopay for recurring bills to never miss a payment",
    ),
    ScoreFactor(
        "savings_rate",
        "Savings Rate",
        'Try the "pay yourself first" rule: save before spending',
    ),
    ScoreFactor(
        "debt_velocity",
        "Debt Progress",
        "Use the avalanche method: pay minimums on all, extra on highest interest",
    ),
    ScoreFactor(
        "emergency_buffer",
        "Emergency Fund",
        "Build your emergency fund: aim for $1,000, then 1 month expenses",
    ),
    ScoreFactor(
        "budget_discipline",
        "Budget Discipline",
        "Review overspent budgets - can you trim or reallocate?",
    ),
    ScoreFactor(
        "debt_to_income",
        "Debt-to-Income",
        "Focus on paying down high-interest debt first",
    ),
]

ENCOURAGEMENT_TIP = "You're doing amazing! Keep up the great work 🌟"
MAX_TIPS = 3

# (minimum total, level, title), checked top-down
SCORE_LEVELS: List[Tuple[int, int, str]] = [
    (900, 5, "Financial Freedom"),
    (750, 4, "Wealth Builder"),
    (600, 3, "Solid Ground"),
    (400, 2, "Foundation"),
    (200, 1, "Getting Started"),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def calculate_payment_consistency(bills_paid_on_time: int, total_bills: int) -> PaymentConsistency:
    """
    Payment Consistency (250 points max): share of bills paid on time.

    No tracked bills is not penalized.
    """
    if total_bills == 0:
        return PaymentConsistency(score=250, percentage=100.0, detail="No bills tracked yet")

    percentage = bills_paid_on_time * 100 / total_bills
    score = _round_half_up(bills_paid_on_time * 250 / total_bills)

    if percentage == 100:
        detail = "Perfect payment history! 🎯"
    elif percentage >= 95:
        detail = f"{percentage:.0f}% on-time - Excellent!"
    elif percentage >= 90:
        detail = f"{percentage:.0f}% on-time - Good, room to improve"
    elif percentage >= 80:
        detail = f"{percentage:.0f}% on-time - Needs attention"
    else:
        detail = f"{percentage:.0f}% on-time - Priority: Set up autopay"

    return PaymentConsistency(score=score, percentage=percentage, detail=detail)


def calculate_savings_rate(monthly_savings: float, monthly_income: float) -> SavingsRate:
    """
    Savings Rate (200 points max): share of income saved this month.

    Benchmark: 20%+ is excellent (the "pay yourself first" rule).
    """
    if monthly_income == 0:
        return SavingsRate(score=0, rate=0.0, detail="No income recorded")

    rate = monthly_savings * 100 / monthly_income

    if rate >= 20:
        score, detail = 200, f"{rate:.0f}% savings rate - Crushing it! 🚀"
    elif rate >= 15:
        score, detail = 175, f"{rate:.0f}% savings rate - Great progress!"
    elif rate >= 10:
        score, detail = 150, f"{rate:.0f}% savings rate - Solid foundation"
    elif rate >= 5:
        score, detail = 100, f"{rate:.0f}% savings rate - Building momentum"
    elif rate > 0:
        score, detail = 50, f"{rate:.0f}% savings rate - Every bit counts!"
    else:
        score, detail = 0, "No savings this month - Let's change that!"

    return SavingsRate(score=score, rate=rate, detail=detail)


def calculate_debt_velocity(total_debt: float, debt_three_months_ago: float) -> DebtVelocity:
    """
    Debt Velocity (200 points max): is total debt going up or down?

    Thresholds are on the 3-month percent change:
    - <= -15%: paying down 5%+ per month
    - <= -6%:  paying down 2-5% per month
    - < 0%:    paying down slowly
    - <= 2%:   roughly stable
    - <= 10%:  slowly increasing
    - > 10%:   rapidly increasing
    """
    if total_debt == 0 and debt_three_months_ago == 0:
        return DebtVelocity(score=200, trend=DebtTrend.NO_DEBT, change_percent=0.0, detail="Debt-free! 🏆")

    if total_debt == 0 and debt_three_months_ago > 0:
        return DebtVelocity(
            score=200,
            trend=DebtTrend.DECREASING,
            change_percent=-100.0,
            detail="You paid off all your debt! 🎉",
        )

    change = total_debt - debt_three_months_ago
    if debt_three_months_ago > 0:
        change_percent = change * 100 / debt_three_months_ago
    else:
        # New debt counts as a 100% increase
        change_percent = 100.0 if total_debt > 0 else 0.0

    if change_percent <= -15:
        score, trend = 200, DebtTrend.DECREASING
        detail = f"Debt down {abs(change_percent):.0f}% - Excellent progress!"
    elif change_percent <= -6:
        score, trend = 175, DebtTrend.DECREASING
        detail = f"Debt down {abs(change_percent):.0f}% - Great trajectory!"
    elif change_percent < 0:
        score, trend = 150, DebtTrend.DECREASING
        detail = f"Debt down {abs(change_percent):.0f}% - Moving in right direction"
    elif change_percent <= 2:
        score, trend = 100, DebtTrend.STABLE
        detail = "Debt stable - Can you accelerate payoff?"
    elif change_percent <= 10:
        score, trend = 50, DebtTrend.INCREASING
        detail = f"Debt up {change_percent:.0f}% - Time to course correct"
    else:
        score, trend = 0, DebtTrend.INCREASING
        detail = f"Debt up {change_percent:.0f}% - Urgent: Review spending"

    return DebtVelocity(score=score, trend=trend, change_percent=change_percent, detail=detail)


def calculate_emergency_buffer(total_savings: float, monthly_expenses: float) -> EmergencyBuffer:
    """Emergency Buffer (150 points max): months of expenses covered by savings."""
    if monthly_expenses == 0:
        if total_savings > 0:
            return EmergencyBuffer(score=150, months_covered=12.0, detail="Great savings!")
        return EmergencyBuffer(score=0, months_covered=0.0, detail="No expenses tracked")

    months = total_savings / monthly_expenses

    if months >= 6:
        score, detail = 150, f"{months:.1f} months covered - Fortress mode! 🏰"
    elif months >= 3:
        score, detail = 125, f"{months:.1f} months covered - Solid safety net"
    elif months >= 1:
        score, detail = 100, f"{months:.1f} months covered - Keep building"
    elif months >= 0.5:
        score, detail = 50, f"{_round_half_up(months * 30)} days covered - Growing!"
    elif months > 0:
        score, detail = 25, f"{_round_half_up(months * 30)} days covered - Starting out"
    else:
        score, detail = 0, "No emergency fund yet - Start small!"

    return EmergencyBuffer(score=score, months_covered=months, detail=detail)


def calculate_budget_discipline(budgets_on_track: int, total_budgets: int) -> BudgetDiscipline:
    """Budget Discipline (100 points max). No budgets scores a neutral 50."""
    if total_budgets == 0:
        return BudgetDiscipline(
            score=50,
            percentage=0.0,
            detail="No budgets set - Create some to track progress!",
        )

    percentage = budgets_on_track * 100 / total_budgets
    score = _round_half_up(budgets_on_track * 100 / total_budgets)

    if percentage == 100:
        detail = f"All {total_budgets} budgets on track! 🎯"
    elif percentage >= 80:
        detail = f"{budgets_on_track}/{total_budgets} budgets on track - Great!"
    elif percentage >= 60:
        detail = f"{budgets_on_track}/{total_budgets} budgets on track - Watch a few"
    else:
        detail = f"{budgets_on_track}/{total_budgets} budgets on track - Needs focus"

    return BudgetDiscipline(score=score, percentage=percentage, detail=detail)


def calculate_debt_to_income(total_debt: float, monthly_income: float) -> DebtToIncome:
    """
    Debt-to-Income (100 points max): total debt against annual income.

    Being debt-free scores full marks even without recorded income.
    """
    if total_debt == 0:
        return DebtToIncome(score=100, ratio=0.0, detail="No debt! Perfect score 🏆")

    annual_income = monthly_income * 12
    if annual_income == 0:
        return DebtToIncome(score=0, ratio=0.0, detail="No income recorded")

    ratio = total_debt * 100 / annual_income

    if ratio <= 10:
        score, detail = 100, f"{ratio:.0f}% DTI - Very healthy"
    elif ratio <= 20:
        score, detail = 90, f"{ratio:.0f}% DTI - Good standing"
    elif ratio <= 30:
        score, detail = 75, f"{ratio:.0f}% DTI - Manageable"
    elif ratio <= 40:
        score, detail = 50, f"{ratio:.0f}% DTI - Getting heavy"
    elif ratio <= 50:
        score, detail = 25, f"{ratio:.0f}% DTI - Debt is weighing you down"
    else:
        score, detail = 0, f"{ratio:.0f}% DTI - Debt exceeds half your income"

    return DebtToIncome(score=score, ratio=ratio, detail=detail)


def get_score_level(total: int) -> Tuple[int, str]:
    """Map a total score to its (level, title) band"""
    for minimum, level, title in SCORE_LEVELS:
        if total >= minimum:
            return level, title
    return 0, "Beginning Journey"


def generate_tips(breakdown: ScoreBreakdown) -> List[str]:
    """
    Tips for the weakest factors (lowest share of their max score).

    sorted() is stable, so equal shares keep SCORE_FACTORS order.
    """
    sub_scores = dict(breakdown.factors())
    weakest = sorted(
        SCORE_FACTORS,
        key=lambda factor: sub_scores[factor.key].score / sub_scores[factor.key].max_score,
    )

    tips = []
    for factor in weakest[:MAX_TIPS]:
        sub_score = sub_scores[factor.key]
        if sub_score.score / sub_score.max_score < 1:
            tips.append(factor.tip)

    if not tips:
        tips.append(ENCOURAGEMENT_TIP)

    return tips


def calculate_financial_health_score(score_input: ScoreInput) -> FinancialHealthScore:
    """
    Main entry point: score a snapshot of financial facts.

    Weights (sum to 1000):
    - 250: Payment consistency
    - 200: Savings rate
    - 200: Debt velocity
    - 150: Emergency buffer
    - 100: Budget discipline
    - 100: Debt-to-income
    """
    breakdown = ScoreBreakdown(
        payment_consistency=calculate_payment_consistency(
            score_input.bills_paid_on_time, score_input.total_bills
        ),
        savings_rate=calculate_savings_rate(score_input.monthly_savings, score_input.monthly_income),
        debt_velocity=calculate_debt_velocity(score_input.total_debt, score_input.debt_three_months_ago),
        emergency_buffer=calculate_emergency_buffer(score_input.total_savings, score_input.monthly_expenses),
        budget_discipline=calculate_budget_discipline(
            score_input.budgets_on_track, score_input.total_budgets
        ),
        debt_to_income=calculate_debt_to_income(score_input.total_debt, score_input.monthly_income),
    )

    total = sum(sub_score.score for _, sub_score in breakdown.factors())
    level, title = get_score_level(total)

    return FinancialHealthScore(
        total=total,
        level=level,
        title=title,
        breakdown=breakdown,
        tips=tuple(generate_tips(breakdown)),
    )


def calculate_score_change(current: FinancialHealthScore, previous: FinancialHealthScore) -> ScoreChange:
    """Compare two scores factor by factor; unchanged factors are in neither list"""
    current_scores = dict(current.breakdown.factors())
    previous_scores = dict(previous.breakdown.factors())

    improved: List[str] = []
    declined: List[str] = []
    for factor in SCORE_FACTORS:
        current_score = current_scores[factor.key].score
        previous_score = previous_scores[factor.key].score
        if current_score > previous_score:
            improved.append(factor.label)
        elif current_score < previous_score:
            declined.append(factor.label)

    return ScoreChange(change=current.total - previous.total, improved=improved, declined=declined)
