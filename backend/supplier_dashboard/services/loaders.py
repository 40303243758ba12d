# backend/supplier_dashboard/services/loaders.py
"""
Page-level data loaders: each one wires a live fetcher and a fallback
producer into a FallbackFetchController.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

from supplier_dashboard.core.fetch_controller import FallbackFetchController
from supplier_dashboard.core.metrics import map_to_analytics_data
from supplier_dashboard.schemas.analytics import AnalyticsData
from supplier_dashboard.services.mock_data import mock_analytics_data, mock_buyers, mock_page
from supplier_dashboard.services.snapshots import analytics_key, load_snapshot, save_snapshot
from supplier_dashboard.services.upstream import fetch_analytics_payload_async, get_supplier_resource_async

logger = logging.getLogger(__name__)

# Supplier REST resources shown on the dashboard home: name -> (path, params)
DASHBOARD_RESOURCES: Dict[str, tuple] = {
    "products": ("v1/company/products", {"page": 1}),
    "orders": ("v1/company/orders", {"page": 1}),
    "rfqs": ("v1/company/market/rfqs", {"status": "open", "page": 1, "per_page": 10}),
}


def _buyers_or_none() -> Optional[Dict[str, Any]]:
    # Buyer metrics only exist in the bundled mocks; a missing file just means zeros
    try:
        return mock_buyers()
    except (OSError, ValueError) as e:
        logger.warning("Buyer metrics unavailable: %s", e)
        return None


def analytics_controller(
    start_date: str,
    end_date: str,
    limit: int = 10,
    headers: Optional[Dict[str, str]] = None,
) -> FallbackFetchController[AnalyticsData]:
    key = analytics_key(start_date, end_date, limit)

    async def fetch_live_analytics() -> Optional[AnalyticsData]:
        payload = await fetch_analytics_payload_async(start_date, end_date, limit, headers)
        if not payload:
            return None
        await asyncio.to_thread(save_snapshot, key, payload)
        return map_to_analytics_data(payload, buyers=_buyers_or_none())

    async def cached_or_mock_analytics() -> AnalyticsData:
        cached = await asyncio.to_thread(load_snapshot, key)
        if cached:
            logger.info("analytics: serving cached snapshot %s", key)
            return map_to_analytics_data(cached, buyers=_buyers_or_none())
        logger.info("analytics: serving bundled mock data")
        return mock_analytics_data()

    return FallbackFetchController(
        fetcher=fetch_live_analytics,
        fallback=cached_or_mock_analytics,
        deps=(start_date, end_date, limit),
        name="analytics",
    )


def resource_controller(name: str, headers: Optional[Dict[str, str]] = None) -> FallbackFetchController[Dict[str, Any]]:
    path, params = DASHBOARD_RESOURCES[name]

    async def fetch_live_page() -> Any:
        return await get_supplier_resource_async(path, params, headers)

    return FallbackFetchController(
        fetcher=fetch_live_page,
        fallback=lambda: mock_page(name),
        deps=(name,),
        name=name,
    )
