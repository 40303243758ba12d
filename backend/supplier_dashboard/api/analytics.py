# backend/supplier_dashboard/api/analytics.py
from fastapi import APIRouter, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from typing import Optional, Tuple
import asyncio, logging, datetime as dt

import requests

from supplier_dashboard.schemas.analytics import AnalyticsPeriod, SupplierAnalyticsResponse
from supplier_dashboard.services.loaders import analytics_controller
from supplier_dashboard.services.mock_data import mock_analytics_item
from supplier_dashboard.services.upstream import ANALYTICS_QUERY, auth_headers, post_graphql

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analytics"])

DEFAULT_WINDOW_MONTHS = 6

# ---------- date helpers ----------
def month_floor(d: dt.date) -> dt.date:
    return d.replace(day=1)

def month_add(d: dt.date, months: int) -> dt.date:
    y = d.year + (d.month - 1 + months) // 12
    m = (d.month - 1 + months) % 12 + 1
    return dt.date(y, m, 1)

def default_window(today: Optional[dt.date] = None) -> Tuple[str, str]:
    """Inclusive window of the last 6 full-or-partial months ending today."""
    today = today or dt.date.today()
    start = month_add(month_floor(today), -(DEFAULT_WINDOW_MONTHS - 1))
    return start.isoformat(), today.isoformat()

def resolve_window(start_date: Optional[str], end_date: Optional[str]) -> Tuple[str, str]:
    default_start, default_end = default_window()
    start_s = start_date or default_start
    end_s = end_date or default_end
    try:
        start = dt.date.fromisoformat(start_s)
        end = dt.date.fromisoformat(end_s)
    except ValueError:
        raise HTTPException(status_code=400, detail="dates must be YYYY-MM-DD")
    if start > end:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return start.isoformat(), end.isoformat()

# ---------- GraphQL proxy ----------
@router.post("/api/analytics")
async def analytics_proxy(
    request: Request,
    authorization: Optional[str] = Header(None),
    x_company_id: Optional[str] = Header(None),
):
    """Forward the analytics query upstream with the caller's auth headers."""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    variables = body.get("variables") if isinstance(body.get("variables"), dict) else {}

    start_date = variables.get("startDate") or body.get("startDate")
    end_date = variables.get("endDate") or body.get("endDate")
    limit = variables.get("limit") or body.get("limit") or 10
    query = body.get("query") or ANALYTICS_QUERY

    if not start_date or not end_date:
        return JSONResponse({"errors": [{"message": "Missing startDate or endDate"}]}, status_code=400)

    try:
        upstream = await asyncio.to_thread(
            post_graphql,
            query,
            {"startDate": start_date, "endDate": end_date, "limit": limit},
            auth_headers(authorization, x_company_id),
        )
    except requests.RequestException as e:
        logger.warning("Analytics proxy failed: %s", e)
        return JSONResponse({"errors": [{"message": str(e) or "Proxy error"}]}, status_code=500)

    try:
        payload = upstream.json()
    except ValueError:
        return Response(
            content=upstream.text,
            status_code=upstream.status_code,
            media_type=upstream.headers.get("Content-Type") or "text/plain",
        )
    return JSONResponse(payload, status_code=upstream.status_code, headers={"Cache-Control": "no-store"})

# ---------- Supplier analytics ----------
@router.get("/api/v1/supplier/analytics", response_model=SupplierAnalyticsResponse)
async def supplier_analytics(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    limit: int = Query(10, ge=1, le=100),
    metric: Optional[str] = Query(None),
    authorization: Optional[str] = Header(None),
    x_company_id: Optional[str] = Header(None),
):
    if metric:
        item = mock_analytics_item(metric)
        if item is None:
            raise HTTPException(status_code=404, detail="Metric not found")
        return JSONResponse(item)

    start, end = resolve_window(start_date, end_date)
    controller = analytics_controller(start, end, limit, auth_headers(authorization, x_company_id))
    outcome = await controller.load()

    return SupplierAnalyticsResponse(
        success=outcome.data is not None,
        period=AnalyticsPeriod(startDate=start, endDate=end),
        data=outcome.data,
        error=str(outcome.error) if outcome.error is not None else None,
    )
