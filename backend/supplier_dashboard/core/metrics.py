# backend/supplier_dashboard/core/metrics.py
"""
Analytics aggregation: raw order-analytics payload -> AnalyticsData.

Pure functions, no I/O. The upstream payload shape is not guaranteed field by
field, so every read goes through a defaulting helper and missing/None/garbage
values become 0 or an empty list instead of raising.
"""
from __future__ import annotations

import datetime as dt
import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from supplier_dashboard.schemas.analytics import (
    AnalyticsData,
    BuyersBlock,
    MonthlyRollup,
    OrdersBlock,
    ProductsBlock,
    RawSeriesPoint,
    RevenueBlock,
    StatusBreakdownRow,
    TopProduct,
)

logger = logging.getLogger(__name__)

# Display order of the payment-status breakdown: (payload key, label)
PAYMENT_STATUSES: Tuple[Tuple[str, str], ...] = (
    ("completed", "Completed"),
    ("processing", "Processing"),
    ("pending", "Pending"),
    ("cancelled", "Cancelled"),
    ("expired", "Expired"),
    ("failed", "Failed"),
    ("refunded", "Refunded"),
)

# Fixed English abbreviations; strftime("%b") follows the process locale.
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass(frozen=True)
class GrowthMetric:
    current_value: float
    growth_percent: float


# ---------- defaulting helpers ----------
def _num(v: Any) -> float:
    if v is None or isinstance(v, bool):
        return 0.0
    try:
        out = float(v)
    except (TypeError, ValueError):
        return 0.0
    return out if math.isfinite(out) else 0.0

def _int(v: Any) -> int:
    return int(_num(v))

def _mapping(v: Any) -> Mapping[str, Any]:
    return v if isinstance(v, Mapping) else {}

def _records(v: Any) -> List[Mapping[str, Any]]:
    if not isinstance(v, (list, tuple)):
        return []
    return [x for x in v if isinstance(x, Mapping)]

def _first_present(record: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if record.get(k) is not None:
            return record[k]
    return None


# ---------- month labels ----------
def format_api_month(date_str: Optional[str]) -> str:
    """
    Normalize an upstream period label to a month abbreviation.
    "Sep 2025" -> "Sep", "2025-09-27" -> "Sep", anything else unchanged.
    """
    if date_str is None:
        return ""
    s = str(date_str)
    if " " in s and "-" not in s:
        tokens = s.split()
        return tokens[0] if tokens else s
    if "-" in s:
        try:
            parsed = dt.datetime.fromisoformat(s.strip().replace("Z", "+00:00"))
        except ValueError:
            try:
                parsed = dt.datetime.strptime(s.strip(), "%Y-%m")
            except ValueError:
                return s
        return _MONTH_ABBR[parsed.month - 1]
    return s


# ---------- series ----------
def normalize_series(points: Any) -> List[RawSeriesPoint]:
    """Raw dicts -> RawSeriesPoint; accepts `amount` or `totalAmount`."""
    out: List[RawSeriesPoint] = []
    for p in _records(points):
        out.append(RawSeriesPoint(
            date=str(p.get("date") or ""),
            amount=_num(_first_present(p, "amount", "totalAmount")),
            count=_int(p.get("count")),
        ))
    return out

def compute_growth(values: Sequence[Union[int, float, None]]) -> GrowthMetric:
    """
    Growth between the two most recent strictly positive observations.
    Fewer than two positive points: growth 0, current value = last raw point.
    """
    series = [_num(v) for v in values]
    positive = [v for v in series if v > 0]
    if len(positive) >= 2:
        last, prev = positive[-1], positive[-2]
        growth = (last - prev) / prev * 100 if prev > 0 else 0.0
        return GrowthMetric(current_value=last, growth_percent=growth)
    return GrowthMetric(current_value=series[-1] if series else 0.0, growth_percent=0.0)

def build_monthly_rollups(
    revenue_points: Sequence[RawSeriesPoint],
    order_points: Sequence[RawSeriesPoint],
) -> List[MonthlyRollup]:
    # Revenue drives the rows (one per point, input order, duplicates kept);
    # orders are summed per normalized month and looked up.
    orders_by_month: Dict[str, int] = {}
    for o in order_points:
        key = format_api_month(o.date)
        orders_by_month[key] = orders_by_month.get(key, 0) + o.count

    rows: List[MonthlyRollup] = []
    for r in revenue_points:
        month = format_api_month(r.date)
        rows.append(MonthlyRollup(month=month, revenue=r.amount, orders=orders_by_month.get(month, 0)))
    return rows


# ---------- categorical ----------
def build_status_breakdown(
    counters: Any,
    fallback_total: Any = 0,
    order: Sequence[Tuple[str, str]] = PAYMENT_STATUSES,
) -> List[StatusBreakdownRow]:
    counters = _mapping(counters)
    pairs = [(label, _int(counters.get(key))) for key, label in order]
    total = sum(count for _, count in pairs) or _int(fallback_total)
    return [
        StatusBreakdownRow(
            status=label,
            count=count,
            percentage=(count * 100 / total) if total > 0 else 0.0,
        )
        for label, count in pairs
        if count > 0
    ]

def project_top_products(entities: Any) -> List[TopProduct]:
    out: List[TopProduct] = []
    for p in _records(entities):
        out.append(TopProduct(
            id=str(_first_present(p, "productId", "id") or ""),
            name=str(_first_present(p, "productName", "name") or ""),
            sales=_int(_first_present(p, "totalOrdersCreated", "salesCount")),
            revenue=_num(_first_present(p, "totalRevenue", "revenue")),
        ))
    return out

def _buyers_block(buyers: Any) -> BuyersBlock:
    if isinstance(buyers, BuyersBlock):
        return buyers
    if not isinstance(buyers, Mapping):
        return BuyersBlock()
    try:
        return BuyersBlock.model_validate(buyers)
    except ValidationError as e:
        logger.warning("Ignoring malformed buyers block: %s", e)
        return BuyersBlock()


# ---------- assembly ----------
def build_analytics(
    revenue_series: Any,
    order_series: Any,
    payment_status: Any,
    top_entities: Any,
    total_revenue: Any = 0,
    total_orders: Any = 0,
    buyers: Any = None,
) -> AnalyticsData:
    revenue_points = normalize_series(revenue_series)
    order_points = normalize_series(order_series)

    revenue_growth = compute_growth([p.amount for p in revenue_points])
    order_growth = compute_growth([p.count for p in order_points])
    top_products = project_top_products(top_entities)

    return AnalyticsData(
        revenue=RevenueBlock(
            # API aggregate, not the series sum: the series may be a partial window
            totalRevenue=_num(total_revenue),
            monthlyRevenue=revenue_growth.current_value,
            revenueGrowth=revenue_growth.growth_percent,
            monthlyData=build_monthly_rollups(revenue_points, order_points),
        ),
        orders=OrdersBlock(
            totalOrders=_int(total_orders),
            monthlyOrders=int(order_growth.current_value),
            orderGrowth=order_growth.growth_percent,
            statusBreakdown=build_status_breakdown(payment_status, fallback_total=total_orders),
        ),
        products=ProductsBlock(
            totalProducts=len(top_products),
            activeProducts=len(top_products),
            topProducts=top_products,
        ),
        buyers=_buyers_block(buyers),
    )

def map_to_analytics_data(payload: Any, buyers: Any = None) -> AnalyticsData:
    """Map the GraphQL `data` object of the analytics query."""
    api = _mapping(payload)
    summary = _mapping(api.get("orderAnalyticsSummary"))
    return build_analytics(
        revenue_series=summary.get("revenueTrend"),
        order_series=summary.get("ordersByDate"),
        payment_status=summary.get("paymentStatus"),
        top_entities=api.get("topProducts"),
        total_revenue=summary.get("totalRevenue"),
        total_orders=summary.get("totalOrders"),
        buyers=buyers,
    )
