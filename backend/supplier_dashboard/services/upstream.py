# backend/supplier_dashboard/services/upstream.py
"""
HTTP clients for the marketplace backend (GraphQL analytics + supplier REST).
Blocking `requests` calls; the *_async wrappers push them onto a worker thread
so they can be awaited by the fetch controller.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from supplier_dashboard.config import get_settings
from supplier_dashboard.errors import GraphQLError, UpstreamError, UpstreamStatusError

logger = logging.getLogger(__name__)

ANALYTICS_QUERY = """
  query Analytics($startDate: String!, $endDate: String!, $limit: Int!) {
    topProducts(endDate: $endDate, startDate: $startDate, limit: $limit) {
      productId
      productImage
      productName
      totalAddedToCart
      totalClicks
      totalFavorites
      totalOrderPaid
      totalOrdersCreated
      totalRevenue
      totalViews
    }
    orderAnalyticsSummary(endDate: $endDate, startDate: $startDate) {
      averageOrderValue
      ordersByDate { count date totalAmount }
      paymentStatus { cancelled completed expired failed pending processing refunded }
      revenueTrend { count date totalAmount }
      totalOrders
      totalRevenue
    }
    productAnalyticsSummary(endDate: $endDate, startDate: $startDate) {
      totalAddedToCart
      totalClick
      totalFavorites
      totalOrderPaid
      totalOrdersCreated
      totalRevenue
      totalViews
    }
  }
"""


def auth_headers(authorization: Optional[str] = None, company_id: Optional[str] = None) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    if authorization:
        headers["Authorization"] = authorization
    if company_id:
        headers["X-Company-ID"] = str(company_id)
    return headers


def post_graphql(query: str, variables: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> requests.Response:
    settings = get_settings()
    return requests.post(
        settings.analytics_graphql_url,
        json={"query": query, "variables": variables},
        headers={"Content-Type": "application/json", **(headers or {})},
        timeout=settings.upstream_timeout_s,
    )


def _json_body(resp: requests.Response) -> Any:
    if resp.status_code >= 400:
        raise UpstreamStatusError(resp.url, resp.status_code, resp.text[:500])
    try:
        return resp.json()
    except ValueError as e:
        raise UpstreamError(f"{resp.url} returned a non-JSON body") from e


def fetch_analytics_payload(
    start_date: str,
    end_date: str,
    limit: int = 10,
    headers: Optional[Dict[str, str]] = None,
) -> Optional[Dict[str, Any]]:
    """Run the analytics query and return its `data` object (may be None)."""
    resp = post_graphql(ANALYTICS_QUERY, {"startDate": start_date, "endDate": end_date, "limit": limit}, headers)
    body = _json_body(resp)
    if not isinstance(body, dict):
        raise UpstreamError("GraphQL response is not an object")
    errors = body.get("errors") or []
    if errors:
        messages: List[str] = [str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors]
        raise GraphQLError(messages)
    return body.get("data")


def get_supplier_resource(
    path: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    settings = get_settings()
    url = f"{settings.supplier_api_base_url}/{path.lstrip('/')}"
    resp = requests.get(
        url,
        params=params,
        headers={"Accept": "application/json", **(headers or {})},
        timeout=settings.upstream_timeout_s,
    )
    return _json_body(resp)


async def fetch_analytics_payload_async(
    start_date: str,
    end_date: str,
    limit: int = 10,
    headers: Optional[Dict[str, str]] = None,
) -> Optional[Dict[str, Any]]:
    return await asyncio.to_thread(fetch_analytics_payload, start_date, end_date, limit, headers)


async def get_supplier_resource_async(
    path: str,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> Any:
    return await asyncio.to_thread(get_supplier_resource, path, params, headers)
