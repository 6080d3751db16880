"""Data access layer for health score snapshots"""

from dataclasses import asdict
from typing import List, Optional
from sqlalchemy.orm import Session
from finhealth_gateway.infrastructure.database.models import HealthScoreSnapshot
from finhealth_gateway.domain.models import FinancialHealthScore, ScoreInput


class ScoreSnapshotRepository:
    """Repository for health score history"""

    def __init__(self, db: Session):
        self.db = db

    def create_snapshot(
        self,
        user_id: str,
        score_input: ScoreInput,
        score: FinancialHealthScore,
    ) -> HealthScoreSnapshot:
        """Persist a calculated score to the database"""
        breakdown = score.breakdown
        db_snapshot = HealthScoreSnapshot(
            user_id=user_id,
            total=score.total,
            level=score.level,
            title=score.title,
            payment_consistency=breakdown.payment_consistency.score,
            savings_rate=breakdown.savings_rate.score,
            debt_velocity=breakdown.debt_velocity.score,
            emergency_buffer=breakdown.emergency_buffer.score,
            budget_discipline=breakdown.budget_discipline.score,
            debt_to_income=breakdown.debt_to_income.score,
            score_input=asdict(score_input),
        )
        self.db.add(db_snapshot)
        self.db.flush()  # Get ID without committing
        return db_snapshot

    def get_latest_for_user(self, user_id: str) -> Optional[HealthScoreSnapshot]:
        """Most recent snapshot for a user, if any"""
        return (
            self.db.query(HealthScoreSnapshot)
            .filter(HealthScoreSnapshot.user_id == user_id)
            .order_by(HealthScoreSnapshot.created_at.desc())
            .first()
        )

    def get_snapshots_by_user(self, user_id: str, limit: int = 20) -> List[HealthScoreSnapshot]:
        """Fetch recent snapshots for a user, newest first"""
        return (
            self.db.query(HealthScoreSnapshot)
            .filter(HealthScoreSnapshot.user_id == user_id)
            .order_by(HealthScoreSnapshot.created_at.desc())
            .limit(limit)
            .all()
        )


def snapshot_to_score_input(snapshot: HealthScoreSnapshot) -> ScoreInput:
    """Rebuild the ScoreInput stored with a snapshot"""
    return ScoreInput(**snapshot.score_input)
