from pydantic import BaseModel
from typing import Dict, List, Optional

class DashboardStats(BaseModel):
    newRfqs: int
    activeOrders: int
    totalProducts: int
    monthlyRevenue: float

class DashboardResponse(BaseModel):
    last_updated: str
    stats: DashboardStats
    recentRfqs: List[dict] = []
    recentOrders: List[dict] = []
    # per-resource advisory error message (None when the live call succeeded)
    errors: Dict[str, Optional[str]] = {}
