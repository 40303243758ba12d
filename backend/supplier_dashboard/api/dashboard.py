# backend/supplier_dashboard/api/dashboard.py
from fastapi import APIRouter, Header
from typing import Any, Dict, List, Optional
import asyncio, datetime as dt

from supplier_dashboard.schemas.dashboard import DashboardResponse, DashboardStats
from supplier_dashboard.services.loaders import DASHBOARD_RESOURCES, resource_controller
from supplier_dashboard.services.upstream import auth_headers

router = APIRouter(prefix="/api/v1/supplier", tags=["dashboard"])

ACTIVE_ORDER_STATUSES = {"pending", "processing", "shipped", "in_escrow"}

# ---------- helpers ----------
def _rows(page: Any) -> List[dict]:
    if isinstance(page, dict) and isinstance(page.get("data"), list):
        return [r for r in page["data"] if isinstance(r, dict)]
    if isinstance(page, list):
        return [r for r in page if isinstance(r, dict)]
    return []

def _page_total(page: Any) -> int:
    meta = page.get("meta") if isinstance(page, dict) else None
    try:
        return int((meta or {}).get("total") or 0)
    except (TypeError, ValueError):
        return 0

def _amount(v: Any) -> float:
    try:
        return float(v or 0)
    except (TypeError, ValueError):
        return 0.0

def _parse_ts(v: Any) -> Optional[dt.datetime]:
    if not v:
        return None
    try:
        return dt.datetime.fromisoformat(str(v).replace("Z", "+00:00"))
    except ValueError:
        return None

def count_active_orders(orders: List[dict]) -> int:
    return sum(1 for o in orders if str(o.get("status") or "").lower() in ACTIVE_ORDER_STATUSES)

def monthly_revenue(orders: List[dict], today: Optional[dt.date] = None) -> float:
    """Sum of total_amount for orders created in the current calendar month."""
    today = today or dt.date.today()
    total = 0.0
    for o in orders:
        created = _parse_ts(o.get("created_at"))
        if created and created.year == today.year and created.month == today.month:
            total += _amount(o.get("total_amount"))
    return total

def compute_dashboard_stats(products_page: Any, orders_page: Any, rfqs_page: Any, today: Optional[dt.date] = None) -> DashboardStats:
    orders = _rows(orders_page)
    rfqs = _rows(rfqs_page)
    return DashboardStats(
        newRfqs=_page_total(rfqs_page) or len(rfqs),
        activeOrders=count_active_orders(orders),
        totalProducts=len(_rows(products_page)),
        monthlyRevenue=round(monthly_revenue(orders, today), 2),
    )

# ---------- endpoint ----------
@router.get("/dashboard", response_model=DashboardResponse)
async def supplier_dashboard(
    authorization: Optional[str] = Header(None),
    x_company_id: Optional[str] = Header(None),
):
    headers = auth_headers(authorization, x_company_id)
    controllers = {name: resource_controller(name, headers) for name in DASHBOARD_RESOURCES}
    outcomes = await asyncio.gather(*(c.load() for c in controllers.values()))
    pages: Dict[str, Any] = {}
    errors: Dict[str, Optional[str]] = {}
    for name, outcome in zip(controllers, outcomes):
        pages[name] = outcome.data
        errors[name] = str(outcome.error) if outcome.error is not None else None

    return DashboardResponse(
        last_updated=dt.datetime.now(dt.timezone.utc).isoformat(),
        stats=compute_dashboard_stats(pages["products"], pages["orders"], pages["rfqs"]),
        recentRfqs=_rows(pages["rfqs"])[:3],
        recentOrders=_rows(pages["orders"])[:3],
        errors=errors,
    )
