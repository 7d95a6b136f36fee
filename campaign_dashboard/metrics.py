"""
Derived metrics, creative ranking and table views.

Every ratio is computed through ``safe_divide`` so a zero denominator
yields 0 instead of NaN or infinity. The one exception is
``cpm_rank_value``, used only for ordering creatives by lowest CPM.
"""
import math
from typing import Iterable, Literal

from campaign_dashboard.aggregator import aggregate_ad_sets, aggregate_campaigns, sum_totals
from campaign_dashboard.models import (
    AdSetRow,
    AggregatedTotals,
    CampaignRecord,
    CampaignRow,
    CreativeGallerySummary,
    CreativeView,
    DerivedMetrics,
    KPISummary,
    MetricTotals,
    Page,
)

RankMode = Literal["all", "ctr", "cpm", "roas"]
RANK_MODES = ("all", "ctr", "cpm", "roas")

CAMPAIGN_SORT_KEYS = {"campaign", "source", "spend", "impressions", "clicks", "conversions", "roas"}
AD_SET_SORT_KEYS = {"ad_set_name", "spend", "impressions", "clicks", "conversions", "roas"}

UNKNOWN_AD_SET = "Unknown"


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    if denominator == 0:
        return default
    return numerator / denominator


# --- Ratios ---

def ctr(totals: MetricTotals) -> float:
    return safe_divide(totals.link_clicks, totals.impressions) * 100


def cpc(totals: MetricTotals) -> float:
    return safe_divide(totals.spend, totals.link_clicks)


def cpm(totals: MetricTotals) -> float:
    return safe_divide(totals.spend, totals.impressions) * 1000


def roas(totals: MetricTotals) -> float:
    return safe_divide(totals.revenue, totals.spend)


def cpm_rank_value(totals: MetricTotals) -> float:
    """CPM for lowest-wins ordering: creatives without impressions sort last.

    Differs from the displayed ``cpm``, which is 0 for those creatives.
    """
    if totals.impressions == 0:
        return math.inf
    return cpm(totals)


def compute_kpis(totals: MetricTotals) -> DerivedMetrics:
    return DerivedMetrics(
        ctr=ctr(totals),
        cpc=cpc(totals),
        cpm=cpm(totals),
        roas=roas(totals),
        conversion_rate=safe_divide(totals.purchases, totals.link_clicks) * 100,
        cost_per_purchase=safe_divide(totals.spend, totals.purchases),
    )


def calculate_kpis(records: Iterable[CampaignRecord]) -> KPISummary:
    totals = sum_totals(records)
    return KPISummary(totals=totals, metrics=compute_kpis(totals))


# --- Creatives ---

def rank_creatives(creatives: list[AggregatedTotals], mode: RankMode = "all") -> list[AggregatedTotals]:
    """Order creatives for the gallery. Ties keep their input order."""
    if mode == "all":
        return list(creatives)
    if mode == "ctr":
        return sorted(creatives, key=ctr, reverse=True)
    if mode == "cpm":
        return sorted(creatives, key=cpm_rank_value)
    if mode == "roas":
        return sorted(creatives, key=roas, reverse=True)
    raise ValueError(f"Unknown ranking mode '{mode}'. Must be one of: {', '.join(RANK_MODES)}")


def creative_view(creative: AggregatedTotals) -> CreativeView:
    totals = creative.metric_totals()
    return CreativeView(
        ad_name=creative.ad_name,
        thumbnail_url=creative.thumbnail_url,
        campaign=creative.campaign,
        source=creative.source,
        totals=totals,
        metrics=compute_kpis(totals),
    )


def summarize_creatives(creatives: list[AggregatedTotals]) -> CreativeGallerySummary:
    if not creatives:
        return CreativeGallerySummary()
    totals = MetricTotals()
    for creative in creatives:
        totals = totals + creative
    with_impressions = [cpm(c) for c in creatives if c.impressions > 0]
    return CreativeGallerySummary(
        total_creatives=len(creatives),
        total_impressions=totals.impressions,
        total_clicks=totals.link_clicks,
        avg_ctr=ctr(totals),
        avg_cpm=cpm(totals),
        best_ctr=max(ctr(c) for c in creatives),
        best_cpm=min(with_impressions) if with_impressions else 0.0,
    )


# --- Tables ---

def build_campaign_rows(records: Iterable[CampaignRecord]) -> list[CampaignRow]:
    return [
        CampaignRow(
            campaign=group.campaign,
            source=group.source,
            spend=group.spend,
            impressions=group.impressions,
            clicks=group.link_clicks,
            conversions=group.purchases,
            revenue=group.revenue,
            roas=roas(group),
            ctr=ctr(group),
        )
        for group in aggregate_campaigns(records)
    ]


def build_ad_set_rows(records: Iterable[CampaignRecord]) -> list[AdSetRow]:
    return [
        AdSetRow(
            ad_set_name=group.ad_set_name or UNKNOWN_AD_SET,
            spend=group.spend,
            impressions=group.impressions,
            clicks=group.link_clicks,
            conversions=group.purchases,
            revenue=group.revenue,
            roas=roas(group),
            ctr=ctr(group),
        )
        for group in aggregate_ad_sets(records)
    ]


def search_rows(rows: list, text: str | None, fields: tuple[str, ...]) -> list:
    if not text:
        return list(rows)
    needle = text.lower()
    return [row for row in rows if any(needle in getattr(row, f).lower() for f in fields)]


def sort_rows(rows: list, sort_key: str, order: Literal["asc", "desc"] = "desc") -> list:
    """Stable sort; text columns compare case-insensitively."""
    if order not in ("asc", "desc"):
        raise ValueError(f"Invalid sort order '{order}'. Must be 'asc' or 'desc'")
    if rows and not hasattr(rows[0], sort_key):
        raise ValueError(f"Unknown sort key '{sort_key}'")

    def key(row):
        value = getattr(row, sort_key)
        return value.casefold() if isinstance(value, str) else value

    return sorted(rows, key=key, reverse=(order == "desc"))


def paginate(rows: list, page: int = 1, per_page: int = 10) -> Page:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    total_pages = math.ceil(len(rows) / per_page)
    start = (page - 1) * per_page
    return Page(
        items=rows[start:start + per_page],
        page=page,
        per_page=per_page,
        total_items=len(rows),
        total_pages=total_pages,
    )
