"""
Daily series for the performance and funnel-over-time charts.

Records are loaded into a polars frame, summed per date string and ordered
by the parsed calendar date. Dates that fail to parse sort first.
"""
from typing import Iterable

import polars as pl

from campaign_dashboard.locale_parser import parse_date
from campaign_dashboard.models import CampaignRecord, DailyFunnel, DailyPerformance


_DTYPES = {str: pl.Utf8, int: pl.Int64, float: pl.Float64}


def records_to_frame(records: Iterable[CampaignRecord]) -> pl.DataFrame:
    schema = {name: _DTYPES[field.annotation] for name, field in CampaignRecord.model_fields.items()}
    return pl.DataFrame([r.model_dump() for r in records], schema=schema)


def _daily(frame: pl.DataFrame, aggs: list[pl.Expr]) -> pl.DataFrame:
    daily = frame.group_by("date", maintain_order=True).agg(aggs)
    days = pl.Series("day", [parse_date(d) for d in daily["date"].to_list()], dtype=pl.Date)
    return daily.with_columns(days).sort("day", maintain_order=True).drop("day")


def daily_performance(records: Iterable[CampaignRecord]) -> list[DailyPerformance]:
    frame = records_to_frame(records)
    if frame.is_empty():
        return []
    daily = _daily(frame, [
        pl.col("spend").sum(),
        pl.col("purchases").sum().alias("conversions"),
        pl.col("link_clicks").sum().alias("clicks"),
        pl.col("revenue").sum(),
    ]).with_columns(
        pl.when(pl.col("spend") > 0)
        .then(pl.col("revenue") / pl.col("spend"))
        .otherwise(0.0)
        .alias("roas")
    )
    return [DailyPerformance(**row) for row in daily.to_dicts()]


def daily_funnel(records: Iterable[CampaignRecord]) -> list[DailyFunnel]:
    frame = records_to_frame(records)
    if frame.is_empty():
        return []
    daily = _daily(frame, [
        pl.col("landing_page_views").sum().alias("page_view"),
        pl.col("add_to_cart").sum(),
        pl.col("initiate_checkout").sum().alias("checkout"),
        pl.col("purchases").sum().alias("purchase"),
    ])
    return [DailyFunnel(**row) for row in daily.to_dicts()]
