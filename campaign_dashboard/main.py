"""
Campaign Dashboard API — read-only views over the ad-performance export

Endpoints:
  GET /health
  GET /dashboard/filters            — Sources and campaigns present in the export
  GET /dashboard/overview           — KPIs, funnel, insights, daily performance
  GET /dashboard/campaigns          — Campaign table (search, sort, paginate)
  GET /dashboard/ad-sets            — Ad-set table (search, sort, paginate)
  GET /dashboard/creatives          — Creative gallery (ranked by CTR / CPM / ROAS)
  GET /dashboard/funnel-over-time   — Daily funnel stage counts
  GET /dashboard/demographics       — Impressions by age and gender

The export is read from disk on every request; nothing is cached or stored.
"""

import logging
import os
from datetime import date
from pathlib import Path
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware

from campaign_dashboard.aggregator import (
    aggregate_demographics_by_age,
    filter_records,
    get_unique_campaigns,
    get_unique_creatives,
    get_unique_sources,
    last_n_days,
)
from campaign_dashboard.config import DEFAULT_CONFIG_PATH, DashboardConfig, load_config
from campaign_dashboard.csv_parser import parse_csv, parse_demographics_csv, read_export
from campaign_dashboard.funnel import build_funnel
from campaign_dashboard.insights import build_insights
from campaign_dashboard.metrics import (
    AD_SET_SORT_KEYS,
    CAMPAIGN_SORT_KEYS,
    build_ad_set_rows,
    build_campaign_rows,
    calculate_kpis,
    creative_view,
    paginate,
    rank_creatives,
    search_rows,
    sort_rows,
    summarize_creatives,
)
from campaign_dashboard.models import (
    AgeBreakdown,
    CampaignRecord,
    CreativesResponse,
    DailyFunnel,
    DateRange,
    FilterOptions,
    OverviewResponse,
    Page,
)
from campaign_dashboard.timeseries import daily_funnel, daily_performance

logger = logging.getLogger(__name__)

app = FastAPI(title="Campaign Dashboard API", version="0.1.0")
CONFIG_PATH = Path(os.environ.get("DASHBOARD_CONFIG", DEFAULT_CONFIG_PATH))

CORS_ORIGINS = os.environ.get(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:8000"
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in CORS_ORIGINS.split(",")],
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# --- Helpers ---

def _get_config() -> DashboardConfig:
    try:
        return load_config(CONFIG_PATH)
    except FileNotFoundError:
        raise HTTPException(status_code=500, detail=f"Config file not found: {CONFIG_PATH}")


def _load_records(config: DashboardConfig) -> list[CampaignRecord]:
    path = config.campaign_csv_path
    if not path.exists():
        raise HTTPException(status_code=404, detail=f"Campaign export not found: {path}")
    records = parse_csv(read_export(path))
    logger.info(f"[API] Loaded {len(records)} campaign rows from {path.name}")
    return records


def _date_range(config: DashboardConfig, days: Optional[int], today: Optional[date]) -> DateRange:
    try:
        return last_n_days(days or config.dashboard.default_range_days, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _filtered_records(
    config: DashboardConfig,
    date_range: Optional[DateRange],
    sources: Optional[list[str]] = None,
    campaigns: Optional[list[str]] = None,
) -> list[CampaignRecord]:
    return filter_records(_load_records(config), date_range, sources, campaigns)


def _table_page(rows: list, search_fields: tuple, search, sort_key, order, page, per_page) -> Page:
    try:
        rows = sort_rows(search_rows(rows, search, search_fields), sort_key, order)
        return paginate(rows, page, per_page)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ═══════════════════════════════════════════════════════════
# Health Check
# ═══════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "campaign-dashboard-api"}


# ═══════════════════════════════════════════════════════════
# Dashboard Endpoints
# ═══════════════════════════════════════════════════════════

@app.get("/dashboard/filters", response_model=FilterOptions)
def get_filters():
    records = _load_records(_get_config())
    return FilterOptions(
        sources=get_unique_sources(records),
        campaigns=get_unique_campaigns(records),
    )


@app.get("/dashboard/overview", response_model=OverviewResponse)
def get_overview(
    days: Optional[int] = None,
    today: Optional[date] = None,
    sources: Optional[list[str]] = Query(default=None),
    campaigns: Optional[list[str]] = Query(default=None),
):
    """KPI cards, conversion funnel, insights and the daily performance chart
    for the last ``days`` days (config default when omitted)."""
    config = _get_config()
    date_range = _date_range(config, days, today)
    records = _filtered_records(config, date_range, sources, campaigns)

    kpis = calculate_kpis(records)
    funnel = build_funnel(
        kpis.totals,
        labels=config.funnel.labels,
        good=config.funnel.good_threshold,
        warn=config.funnel.warn_threshold,
    )
    return OverviewResponse(
        date_range=date_range,
        record_count=len(records),
        kpis=kpis,
        funnel=funnel,
        insights=build_insights(records, kpis, config.insights),
        daily=daily_performance(records),
    )


@app.get("/dashboard/campaigns", response_model=Page)
def get_campaigns(
    search: Optional[str] = None,
    sort_key: str = "spend",
    order: Literal["asc", "desc"] = "desc",
    page: int = 1,
    days: Optional[int] = None,
    today: Optional[date] = None,
):
    if sort_key not in CAMPAIGN_SORT_KEYS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown sort key '{sort_key}'. Valid keys: {', '.join(sorted(CAMPAIGN_SORT_KEYS))}",
        )
    config = _get_config()
    records = _filtered_records(config, _date_range(config, days, today))
    return _table_page(
        build_campaign_rows(records), ("campaign", "source"),
        search, sort_key, order, page, config.dashboard.campaigns_per_page,
    )


@app.get("/dashboard/ad-sets", response_model=Page)
def get_ad_sets(
    search: Optional[str] = None,
    sort_key: str = "spend",
    order: Literal["asc", "desc"] = "desc",
    page: int = 1,
    days: Optional[int] = None,
    today: Optional[date] = None,
):
    if sort_key not in AD_SET_SORT_KEYS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown sort key '{sort_key}'. Valid keys: {', '.join(sorted(AD_SET_SORT_KEYS))}",
        )
    config = _get_config()
    records = _filtered_records(config, _date_range(config, days, today))
    return _table_page(
        build_ad_set_rows(records), ("ad_set_name",),
        search, sort_key, order, page, config.dashboard.ad_sets_per_page,
    )


@app.get("/dashboard/creatives", response_model=CreativesResponse)
def get_creatives(
    rank: Literal["all", "ctr", "cpm", "roas"] = "all",
    days: Optional[int] = None,
    today: Optional[date] = None,
):
    """Creatives merged by ad name. Covers the whole export unless ``days`` is given."""
    config = _get_config()
    date_range = _date_range(config, days, today) if days else None
    creatives = get_unique_creatives(_filtered_records(config, date_range))
    return CreativesResponse(
        rank=rank,
        summary=summarize_creatives(creatives),
        creatives=[creative_view(c) for c in rank_creatives(creatives, rank)],
    )


@app.get("/dashboard/funnel-over-time", response_model=list[DailyFunnel])
def get_funnel_over_time(days: Optional[int] = None, today: Optional[date] = None):
    config = _get_config()
    return daily_funnel(_filtered_records(config, _date_range(config, days, today)))


@app.get("/dashboard/demographics", response_model=list[AgeBreakdown])
def get_demographics():
    config = _get_config()
    path = config.demographics_csv_path
    if path is None or not path.exists():
        raise HTTPException(status_code=404, detail="Demographics export not configured or missing")
    return aggregate_demographics_by_age(parse_demographics_csv(read_export(path)))


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    port = int(os.environ.get("DASHBOARD_API_PORT", "8001"))
    uvicorn.run("campaign_dashboard.main:app", host="0.0.0.0", port=port, reload=True)
