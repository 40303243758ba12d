# backend/supplier_dashboard/services/mock_data.py
"""
Bundled JSON fixtures (data/mocks/*.json) used as fallback data while the
marketplace API is unreachable or returns nothing. This module is the single
place that knows where the mocks live.
"""
import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from supplier_dashboard.config import get_settings
from supplier_dashboard.schemas.analytics import AnalyticsData

ANALYTICS_METRICS = ("revenue", "orders", "products", "buyers")


@lru_cache(maxsize=None)
def _read(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_mock(name: str) -> Any:
    """Fresh copy of data/mocks/<name>.json; raises FileNotFoundError if absent."""
    path = get_settings().mock_data_dir / f"{name}.json"
    return copy.deepcopy(_read(path))


def mock_analytics_item(metric: str) -> Optional[Dict[str, Any]]:
    items = load_mock("analytics")
    return next((x for x in items if isinstance(x, dict) and x.get("id") == metric), None)


def mock_buyers() -> Optional[Dict[str, Any]]:
    """Buyer metrics are not part of the analytics query; they only exist here."""
    item = mock_analytics_item("buyers")
    return item.get("data") if item else None


def mock_analytics_data() -> AnalyticsData:
    blocks: Dict[str, Any] = {}
    for metric in ANALYTICS_METRICS:
        item = mock_analytics_item(metric)
        if item and isinstance(item.get("data"), dict):
            blocks[metric] = item["data"]
    return AnalyticsData.model_validate(blocks)


def mock_page(name: str) -> Dict[str, Any]:
    """List fixture wrapped like a paginated API response."""
    rows: List[Any] = load_mock(name)
    return {"data": rows, "meta": {"total": len(rows)}, "links": {}}
