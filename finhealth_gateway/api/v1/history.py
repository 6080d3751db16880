"""GET /v1/health-score/history - Fetch user's score history"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finhealth_gateway.api.v1.schemas import HistoryResponse, HistoryItem
from finhealth_gateway.config import settings
from finhealth_gateway.infrastructure.database.session import get_db
from finhealth_gateway.infrastructure.database.repositories import ScoreSnapshotRepository

router = APIRouter()


@router.get("/health-score/history", response_model=HistoryResponse)
def get_score_history(
    user_id: str = Query(..., min_length=1, description="User identifier"),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent health score snapshots for a user.

    Returns:
        Snapshots newest first, with total, level and title
    """
    snapshot_repo = ScoreSnapshotRepository(db)
    snapshots = snapshot_repo.get_snapshots_by_user(user_id, limit=settings.score_history_limit)

    history_items = [
        HistoryItem(
            snapshot_id=str(s.id),
            total=s.total,
            level=s.level,
            title=s.title,
            created_at=s.created_at.isoformat(),
        )
        for s in snapshots
    ]

    return HistoryResponse(user_id=user_id, snapshots=history_items)
