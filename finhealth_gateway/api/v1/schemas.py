"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import List, Optional

from finhealth_gateway.domain.exceptions import InvalidScoreInputError
from finhealth_gateway.domain.models import DebtTrend, RecurringFrequency, ScoreInput


class ScoreInputSchema(BaseModel):
    """Financial facts for health scoring (all amounts in currency units)"""

    monthly_income: float = Field(0.0, ge=0)
    monthly_savings: float = Field(0.0, ge=0)
    total_savings: float = Field(0.0, ge=0)
    monthly_expenses: float = Field(0.0, ge=0)
    total_debt: float = Field(0.0, ge=0)
    debt_three_months_ago: float = Field(0.0, ge=0)
    bills_paid_on_time: int = Field(0, ge=0)
    total_bills: int = Field(0, ge=0)
    budgets_on_track: int = Field(0, ge=0)
    total_budgets: int = Field(0, ge=0)

    def to_score_input(self) -> ScoreInput:
        """
        Convert to the domain value object.

        Raises:
            InvalidScoreInputError: If on-time bills or on-track budgets exceed their totals
        """
        if self.bills_paid_on_time > self.total_bills:
            raise InvalidScoreInputError("bills_paid_on_time cannot exceed total_bills")
        if self.budgets_on_track > self.total_budgets:
            raise InvalidScoreInputError("budgets_on_track cannot exceed total_budgets")

        return ScoreInput(
            monthly_income=self.monthly_income,
            monthly_savings=self.monthly_savings,
            total_savings=self.total_savings,
            monthly_expenses=self.monthly_expenses,
            total_debt=self.total_debt,
            debt_three_months_ago=self.debt_three_months_ago,
            bills_paid_on_time=self.bills_paid_on_time,
            total_bills=self.total_bills,
            budgets_on_track=self.budgets_on_track,
            total_budgets=self.total_budgets,
        )


class HealthScoreRequest(ScoreInputSchema):
    """Request body for POST /v1/health-score"""

    user_id: str = Field(..., min_length=1, description="User identifier")


class ScoreCompareRequest(BaseModel):
    """Request body for POST /v1/health-score/compare"""

    current: ScoreInputSchema
    previous: ScoreInputSchema


class _SubScoreSchema(BaseModel):
    score: int
    max_score: int
    detail: str


class PaymentConsistencySchema(_SubScoreSchema):
    percentage: float


class SavingsRateSchema(_SubScoreSchema):
    rate: float


class DebtVelocitySchema(_SubScoreSchema):
    trend: DebtTrend
    change_percent: float


class EmergencyBufferSchema(_SubScoreSchema):
    months_covered: float


class BudgetDisciplineSchema(_SubScoreSchema):
    percentage: float


class DebtToIncomeSchema(_SubScoreSchema):
    ratio: float


class ScoreBreakdownSchema(BaseModel):
    """The six weighted factors of a health score"""

    payment_consistency: PaymentConsistencySchema
    savings_rate: SavingsRateSchema
    debt_velocity: DebtVelocitySchema
    emergency_buffer: EmergencyBufferSchema
    budget_discipline: BudgetDisciplineSchema
    debt_to_income: DebtToIncomeSchema


class ScoreChangeSchema(BaseModel):
    """Difference between two health scores"""

    change: int
    improved: List[str]
    declined: List[str]


class HealthScoreResponse(BaseModel):
    """Response for POST /v1/health-score"""

    total: int
    max_total: int
    level: int
    title: str
    breakdown: ScoreBreakdownSchema
    tips: List[str]
    change: Optional[ScoreChangeSchema] = None
    snapshot_id: Optional[str] = None


class HistoryItem(BaseModel):
    """Single snapshot in score history"""

    snapshot_id: str
    total: int
    level: int
    title: str
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/health-score/history"""

    user_id: str
    snapshots: List[HistoryItem]


class RecurringChargeSchema(BaseModel):
    """Single detected recurring charge"""

    payee: str
    amount: float
    frequency: RecurringFrequency
    category: Optional[str] = None
    last_date: date
    next_expected_date: date
    transaction_count: int
    category_icon: Optional[str] = None
    category_color: Optional[str] = None


class RecurringResponse(BaseModel):
    """Response for GET /v1/recurring"""

    recurring: List[RecurringChargeSchema]
    monthly_total: float
    count: int
