from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


# --- Input Records ---

class CampaignRecord(BaseModel):
    """One row of the ad-performance export."""
    model_config = ConfigDict(frozen=True)

    campaign: str = ""
    date: str = ""  # DD/MM/YYYY
    source: str = ""
    spend: float = 0.0
    impressions: int = 0
    link_clicks: int = 0
    landing_page_views: int = 0
    add_to_cart: int = 0
    initiate_checkout: int = 0
    purchases: int = 0
    post_engagement: int = 0
    revenue: float = 0.0
    ad_name: str = ""
    ad_set_name: str = ""
    thumbnail_url: str = ""


class DemographicsRecord(BaseModel):
    """One row of the age/gender export."""
    model_config = ConfigDict(frozen=True)

    age: str = ""
    gender: str = ""
    impressions: int = 0
    clicks: int = 0
    engagement: int = 0
    purchases: int = 0


# --- Totals ---

SUMMED_FIELDS = (
    "spend",
    "impressions",
    "link_clicks",
    "landing_page_views",
    "add_to_cart",
    "initiate_checkout",
    "purchases",
    "post_engagement",
    "revenue",
)


class MetricTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    spend: float = 0.0
    impressions: int = 0
    link_clicks: int = 0
    landing_page_views: int = 0
    add_to_cart: int = 0
    initiate_checkout: int = 0
    purchases: int = 0
    post_engagement: int = 0
    revenue: float = 0.0

    @classmethod
    def from_record(cls, record: CampaignRecord) -> "MetricTotals":
        return cls(**{f: getattr(record, f) for f in SUMMED_FIELDS})

    def metric_totals(self) -> "MetricTotals":
        return MetricTotals.from_record(self)

    def plus(self, other: "MetricTotals | CampaignRecord") -> dict:
        return {f: getattr(self, f) + getattr(other, f) for f in SUMMED_FIELDS}

    def __add__(self, other: "MetricTotals") -> "MetricTotals":
        return MetricTotals(**self.plus(other))


class AggregatedTotals(MetricTotals):
    """Summed metrics for one group key.

    ``first_record`` is the first record seen for the key; non-summed
    attributes (thumbnail, campaign, source...) are read from it.
    """
    key: str | tuple[str, ...]
    record_count: int = 0
    first_record: CampaignRecord

    def add(self, record: CampaignRecord) -> "AggregatedTotals":
        return self.model_copy(update={**self.plus(record), "record_count": self.record_count + 1})

    def merge(self, other: "AggregatedTotals") -> "AggregatedTotals":
        return self.model_copy(
            update={**self.plus(other), "record_count": self.record_count + other.record_count}
        )

    @property
    def campaign(self) -> str:
        return self.first_record.campaign

    @property
    def source(self) -> str:
        return self.first_record.source

    @property
    def ad_name(self) -> str:
        return self.first_record.ad_name

    @property
    def ad_set_name(self) -> str:
        return self.first_record.ad_set_name

    @property
    def thumbnail_url(self) -> str:
        return self.first_record.thumbnail_url


# --- Derived Metrics ---

class DerivedMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    ctr: float = 0.0
    cpc: float = 0.0
    cpm: float = 0.0
    roas: float = 0.0
    conversion_rate: float = 0.0
    cost_per_purchase: float = 0.0


class KPISummary(BaseModel):
    totals: MetricTotals
    metrics: DerivedMetrics


ConversionBand = Literal["good", "warn", "poor"]


class FunnelStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: int
    percentage_of_first_step: float
    conversion_from_previous: float
    band: ConversionBand = "poor"


class DateRange(BaseModel):
    start: date
    end: date

    @field_validator("end")
    @classmethod
    def validate_end(cls, v: date, info: ValidationInfo) -> date:
        start = info.data.get("start")
        if start is not None and v < start:
            raise ValueError("end must not be before start")
        return v


# --- View Models ---

class CampaignRow(BaseModel):
    campaign: str
    source: str
    spend: float
    impressions: int
    clicks: int
    conversions: int
    revenue: float
    roas: float
    ctr: float


class AdSetRow(BaseModel):
    ad_set_name: str
    spend: float
    impressions: int
    clicks: int
    conversions: int
    revenue: float
    roas: float
    ctr: float


class CreativeView(BaseModel):
    ad_name: str
    thumbnail_url: str
    campaign: str
    source: str
    totals: MetricTotals
    metrics: DerivedMetrics


class CreativeGallerySummary(BaseModel):
    total_creatives: int = 0
    total_impressions: int = 0
    total_clicks: int = 0
    avg_ctr: float = 0.0
    avg_cpm: float = 0.0
    best_ctr: float = 0.0
    best_cpm: float = 0.0


class Page(BaseModel):
    items: list
    page: int
    per_page: int
    total_items: int
    total_pages: int


class DailyPerformance(BaseModel):
    date: str
    spend: float
    conversions: int
    clicks: int
    revenue: float
    roas: float


class DailyFunnel(BaseModel):
    date: str
    page_view: int
    add_to_cart: int
    checkout: int
    purchase: int


class AgeBreakdown(BaseModel):
    age: str
    male: int = 0
    female: int = 0


class Insight(BaseModel):
    type: Literal["success", "warning", "info"]
    title: str
    description: str


# --- API Response Models ---

class FilterOptions(BaseModel):
    sources: list[str] = []
    campaigns: list[str] = []


class OverviewResponse(BaseModel):
    date_range: DateRange
    record_count: int
    kpis: KPISummary
    funnel: list[FunnelStep]
    insights: list[Insight] = []
    daily: list[DailyPerformance] = []


class CreativesResponse(BaseModel):
    rank: str
    summary: CreativeGallerySummary
    creatives: list[CreativeView]
