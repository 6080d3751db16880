"""GET /v1/recurring - Detected recurring charges endpoint"""

import asyncio
import time
import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Request

from finhealth_gateway.api.v1.schemas import RecurringChargeSchema, RecurringResponse
from finhealth_gateway.api.dependencies import get_finance_client, get_recurring_cache, get_request_id
from finhealth_gateway.api.rate_limit import enforce_recurring_rate_limit
from finhealth_gateway.config import settings
from finhealth_gateway.infrastructure.cache import TTLCache
from finhealth_gateway.infrastructure.clients.finance_api import FinanceAPIClient
from finhealth_gateway.domain.recurring import detect_recurring_charges, calculate_monthly_total
from finhealth_gateway.domain.exceptions import FinanceAPIError
from finhealth_gateway.infrastructure.observability.metrics import (
    finance_fetch_failures_counter,
    record_recurring_detection,
    recurring_cache_counter,
)
from finhealth_gateway.infrastructure.observability.logging import log_recurring_detected
from finhealth_gateway.utils.date_utils import months_ago

router = APIRouter()


@router.get("/recurring", response_model=RecurringResponse)
async def get_recurring_charges(
    request: Request,
    user_id: str = Depends(enforce_recurring_rate_limit),
    finance_client: FinanceAPIClient = Depends(get_finance_client),
    cache: TTLCache[RecurringResponse] = Depends(get_recurring_cache),
):
    """
    Detect a user's recurring charges from recent expense history.

    Flow:
    1. Serve from the per-user cache if fresh
    2. Fetch expense transactions from the lookback window and visible categories, concurrently
    3. Detect recurring charges and their monthly total
    4. Cache and return the result
    """
    start_time = time.time()
    request_id = get_request_id(request)

    # 1. Cache lookup
    cached = cache.get(user_id)
    if cached is not None:
        recurring_cache_counter.labels(result="hit").inc()
        return cached
    recurring_cache_counter.labels(result="miss").inc()

    try:
        # 2. Fetch transactions and categories concurrently
        since = months_ago(settings.recurring_lookback_months)
        transactions, categories = await asyncio.gather(
            finance_client.get_expense_transactions(user_id, since),
            finance_client.get_categories(user_id),
        )

        # 3. Detect
        charges = detect_recurring_charges(transactions, categories)
        monthly_total = calculate_monthly_total(charges)

        result = RecurringResponse(
            recurring=[RecurringChargeSchema.model_validate(asdict(charge)) for charge in charges],
            monthly_total=monthly_total,
            count=len(charges),
        )

        # 4. Cache
        cache.set(user_id, result)

        duration_ms = (time.time() - start_time) * 1000
        record_recurring_detection(len(charges))
        log_recurring_detected(request_id, user_id, len(transactions), len(charges), monthly_total, duration_ms)

        return result

    except FinanceAPIError as e:
        finance_fetch_failures_counter.inc()
        logging.error(f"Finance API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Finance service unavailable")

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")
