"""POST /v1/health-score - Financial health score endpoints"""

import time
import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finhealth_gateway.api.v1.schemas import (
    HealthScoreRequest,
    HealthScoreResponse,
    ScoreBreakdownSchema,
    ScoreChangeSchema,
    ScoreCompareRequest,
)
from finhealth_gateway.api.dependencies import get_request_id
from finhealth_gateway.infrastructure.database.session import get_db
from finhealth_gateway.infrastructure.database.repositories import ScoreSnapshotRepository, snapshot_to_score_input
from finhealth_gateway.domain.health_score import calculate_financial_health_score, calculate_score_change
from finhealth_gateway.domain.exceptions import InvalidScoreInputError
from finhealth_gateway.domain.models import FinancialHealthScore
from finhealth_gateway.infrastructure.observability.metrics import record_score
from finhealth_gateway.infrastructure.observability.logging import log_score_calculated

router = APIRouter()


def build_score_response(score: FinancialHealthScore, **extra) -> HealthScoreResponse:
    """Convert a domain score into its response schema"""
    return HealthScoreResponse(
        total=score.total,
        max_total=score.max_total,
        level=score.level,
        title=score.title,
        breakdown=ScoreBreakdownSchema.model_validate(asdict(score.breakdown)),
        tips=list(score.tips),
        **extra,
    )


@router.post("/health-score", response_model=HealthScoreResponse)
def create_health_score(
    request_body: HealthScoreRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Calculate a user's financial health score.

    Flow:
    1. Validate and convert the submitted facts
    2. Calculate the score
    3. Compare with the user's latest snapshot, if any
    4. Persist the new snapshot
    5. Return score, breakdown, tips, and change
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        # 1. Validate input
        score_input = request_body.to_score_input()

        # 2. Calculate score
        score = calculate_financial_health_score(score_input)

        # 3. Compare with previous snapshot (rebuilt from its stored inputs)
        snapshot_repo = ScoreSnapshotRepository(db)
        previous_snapshot = snapshot_repo.get_latest_for_user(request_body.user_id)
        change = None
        if previous_snapshot is not None:
            previous_score = calculate_financial_health_score(snapshot_to_score_input(previous_snapshot))
            change = calculate_score_change(score, previous_score)

        # 4. Persist snapshot
        db_snapshot = snapshot_repo.create_snapshot(
            user_id=request_body.user_id,
            score_input=score_input,
            score=score,
        )
        db.commit()

        # Record metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        record_score(score.total, score.level)
        log_score_calculated(
            request_id,
            request_body.user_id,
            score.total,
            score.level,
            change.change if change else None,
            duration_ms,
        )

        return build_score_response(
            score,
            change=ScoreChangeSchema(**asdict(change)) if change else None,
            snapshot_id=str(db_snapshot.id),
        )

    except InvalidScoreInputError as e:
        db.rollback()
        logging.warning(f"Invalid score input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/health-score/compare", response_model=ScoreChangeSchema)
def compare_health_scores(request_body: ScoreCompareRequest):
    """
    Compare two sets of financial facts without persisting anything.

    Returns:
        Total change plus the factors that improved or declined
    """
    try:
        current = calculate_financial_health_score(request_body.current.to_score_input())
        previous = calculate_financial_health_score(request_body.previous.to_score_input())
    except InvalidScoreInputError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ScoreChangeSchema(**asdict(calculate_score_change(current, previous)))
