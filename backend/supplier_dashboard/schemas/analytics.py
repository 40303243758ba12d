from pydantic import BaseModel, Field
from typing import List, Optional

class RawSeriesPoint(BaseModel):
    date: str = Field(description="'YYYY-MM-DD' or 'MMM YYYY'")
    amount: float = 0
    count: int = 0

class MonthlyRollup(BaseModel):
    month: str
    revenue: float
    orders: int

class StatusBreakdownRow(BaseModel):
    status: str
    count: int
    percentage: float

class TopProduct(BaseModel):
    id: str
    name: str
    sales: int
    revenue: float

class TopBuyer(BaseModel):
    id: str
    name: str
    orders: int
    revenue: float
    country: str = ""

class RevenueBlock(BaseModel):
    totalRevenue: float = 0
    monthlyRevenue: float = 0
    revenueGrowth: float = 0
    monthlyData: List[MonthlyRollup] = []

class OrdersBlock(BaseModel):
    totalOrders: int = 0
    monthlyOrders: int = 0
    orderGrowth: float = 0
    statusBreakdown: List[StatusBreakdownRow] = []

class ProductsBlock(BaseModel):
    totalProducts: int = 0
    activeProducts: int = 0
    topProducts: List[TopProduct] = []

class BuyersBlock(BaseModel):
    totalBuyers: int = 0
    activeBuyers: int = 0
    newBuyers: int = 0
    buyerGrowth: float = 0
    topBuyers: List[TopBuyer] = []

class AnalyticsData(BaseModel):
    revenue: RevenueBlock = RevenueBlock()
    orders: OrdersBlock = OrdersBlock()
    products: ProductsBlock = ProductsBlock()
    buyers: BuyersBlock = BuyersBlock()

class AnalyticsPeriod(BaseModel):
    startDate: str
    endDate: str

class SupplierAnalyticsResponse(BaseModel):
    success: bool
    period: AnalyticsPeriod
    data: Optional[AnalyticsData] = None
    error: Optional[str] = None
