"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class ScoreInput:
    """Snapshot of a user's financial facts used for health scoring"""

    monthly_income: float = 0.0
    monthly_savings: float = 0.0  # Amount saved this month
    total_savings: float = 0.0  # Total in savings accounts
    monthly_expenses: float = 0.0  # Average monthly expenses
    total_debt: float = 0.0
    debt_three_months_ago: float = 0.0  # For debt velocity
    bills_paid_on_time: int = 0  # Last 12 months
    total_bills: int = 0
    budgets_on_track: int = 0
    total_budgets: int = 0


class DebtTrend(str, Enum):
    """Direction of total debt over the trailing 3-month window"""

    DECREASING = "decreasing"
    STABLE = "stable"
    INCREASING = "increasing"
    NO_DEBT = "no-debt"


@dataclass(frozen=True)
class PaymentConsistency:
    score: int
    percentage: float
    detail: str
    max_score: int = field(default=250, init=False)


@dataclass(frozen=True)
class SavingsRate:
    score: int
    rate: float
    detail: str
    max_score: int = field(default=200, init=False)


@dataclass(frozen=True)
class DebtVelocity:
    score: int
    trend: DebtTrend
    change_percent: float
    detail: str
    max_score: int = field(default=200, init=False)


@dataclass(frozen=True)
class EmergencyBuffer:
    score: int
    months_covered: float
    detail: str
    max_score: int = field(default=150, init=False)


@dataclass(frozen=True)
class BudgetDiscipline:
    score: int
    percentage: float
    detail: str
    max_score: int = field(default=100, init=False)


@dataclass(frozen=True)
class DebtToIncome:
    score: int
    ratio: float
    detail: str
    max_score: int = field(default=100, init=False)


SubScore = Union[
    PaymentConsistency,
    SavingsRate,
    DebtVelocity,
    EmergencyBuffer,
    BudgetDiscipline,
    DebtToIncome,
]


@dataclass(frozen=True)
class ScoreBreakdown:
    """The six weighted factors that make up a health score"""

    payment_consistency: PaymentConsistency
    savings_rate: SavingsRate
    debt_velocity: DebtVelocity
    emergency_buffer: EmergencyBuffer
    budget_discipline: BudgetDiscipline
    debt_to_income: DebtToIncome

    def factors(self) -> List[Tuple[str, SubScore]]:
        """Sub-scores in fixed declaration order"""
        return [
            ("payment_consistency", self.payment_consistency),
            ("savings_rate", self.savings_rate),
            ("debt_velocity", self.debt_velocity),
            ("emergency_buffer", self.emergency_buffer),
            ("budget_discipline", self.budget_discipline),
            ("debt_to_income", self.debt_to_income),
        ]


@dataclass(frozen=True)
class FinancialHealthScore:
    """Output of health scoring"""

    total: int
    level: int  # 0-5
    title: str
    breakdown: ScoreBreakdown
    tips: Tuple[str, ...]
    max_total: int = field(default=1000, init=False)


@dataclass
class ScoreChange:
    """Difference between two health scores"""

    change: int
    improved: List[str]
    declined: List[str]


@dataclass
class Transaction:
    """Transaction row from the hosted finance backend"""

    id: str
    payee_clean: Optional[str]
    payee_original: Optional[str]
    amount: float  # Negative = expense
    date: Optional[date]  # None when the source date could not be parsed
    category_id: Optional[str] = None


@dataclass
class Category:
    """Spending category visible to a user"""

    id: str
    name: str
    icon: Optional[str] = None
    color: Optional[str] = None


class RecurringFrequency(str, Enum):
    """Inferred cadence of a recurring charge"""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


@dataclass
class RecurringCharge:
    """Subscription-like charge inferred from transaction history"""

    payee: str
    amount: float  # Average of matched occurrences
    frequency: RecurringFrequency
    category: Optional[str]
    last_date: date
    next_expected_date: date
    transaction_count: int
    category_icon: Optional[str] = None
    category_color: Optional[str] = None
