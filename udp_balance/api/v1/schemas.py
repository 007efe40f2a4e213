"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Optional

from udp_balance.domain.export import EscapePolicy


class WindowParams(BaseModel):
    """Named range or explicit bounds; explicit bounds win when present"""

    model_config = ConfigDict(populate_by_name=True)

    time_range: Optional[str] = Field(None, alias="range", description="7d | 30d | 90d | 1y | all")
    start: Optional[str] = Field(None, description="Inclusive ISO start; a bare date covers the whole day")
    end: Optional[str] = Field(None, description="Inclusive ISO end; a bare date covers the whole day")


class DashboardRequest(WindowParams):
    """Request body for POST /v1/analytics/dashboard"""

    account_id: Optional[str] = Field(None, description="UDP account identifier")
    transactions: Optional[List[Dict[str, Any]]] = Field(
        default_factory=list, description="Raw ledger records; null is read as none"
    )


class ExportRequest(DashboardRequest):
    """Request body for POST /v1/analytics/export"""

    escape: Optional[EscapePolicy] = None
    chronological: bool = Field(True, description="Sort rows by date; false keeps input order")


class WindowSchema(BaseModel):
    label: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class TransactionSchema(BaseModel):
    id: str
    timestamp: datetime
    type: str
    amount: float
    balance_after: float
    description: str


class SeriesPointSchema(BaseModel):
    timestamp: datetime
    balance: float
    transaction_id: Optional[str] = None


class TrendSchema(BaseModel):
    change: float
    change_percent: float
    is_positive: bool


class SeriesSummarySchema(BaseModel):
    current_balance: float
    highest_balance: float
    lowest_balance: float
    trend: TrendSchema


class TypeBucketSchema(BaseModel):
    type: str
    count: int
    total_absolute_amount: float
    average_absolute_amount: float
    share_percent: float
    palette_index: int
    color: str


class TypeSummarySchema(BaseModel):
    distinct_types: int
    total_amount: float
    total_transactions: int
    overall_average: float


class MonthBucketSchema(BaseModel):
    label: str
    year: int
    month: int
    income: float
    expenses: float
    net: float
    transaction_count: int
    end_balance: float


class MonthlyTrendsSchema(BaseModel):
    balance_trend_percent: float
    income_trend_percent: float


class CardTrendsSchema(BaseModel):
    balance: float
    income_share: float
    expense_share: float
    net_share: float


class MetricsSchema(BaseModel):
    current_balance: float
    total_income: float
    total_expenses: float
    net_flow: float
    transaction_count: int
    average_transaction: float
    monthly_income: float
    monthly_expenses: float
    monthly_net: float
    last_transaction: Optional[TransactionSchema] = None
    highest_balance: float
    lowest_balance: float
    volatility_index: float
    card_trends: CardTrendsSchema


class DashboardResponse(BaseModel):
    """Response for dashboard endpoints"""

    account_id: Optional[str] = None
    window: WindowSchema
    series: List[SeriesPointSchema]
    series_summary: SeriesSummarySchema
    type_buckets: List[TypeBucketSchema]
    type_summary: TypeSummarySchema
    month_buckets: List[MonthBucketSchema]
    monthly_trends: MonthlyTrendsSchema
    metrics: MetricsSchema
    recent_transactions: List[TransactionSchema]
