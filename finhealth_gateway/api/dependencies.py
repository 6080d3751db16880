"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from finhealth_gateway.api.v1.schemas import RecurringResponse
from finhealth_gateway.config import settings
from finhealth_gateway.infrastructure.cache import TTLCache
from finhealth_gateway.infrastructure.clients.finance_api import FinanceAPIClient

recurring_cache: TTLCache[RecurringResponse] = TTLCache(ttl_seconds=settings.recurring_cache_ttl_seconds)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_finance_client() -> FinanceAPIClient:
    """Provide hosted finance backend client instance"""
    return FinanceAPIClient()


def get_recurring_cache() -> TTLCache[RecurringResponse]:
    """Provide the per-user recurring detection result cache"""
    return recurring_cache
