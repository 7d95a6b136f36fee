"""
Grouping and filtering of campaign records.

Every grouping goes through ``group_and_sum``: one pass over the records,
exact key equality, and the first record seen for a key kept for its
non-summed attributes. Results are read-only mappings in first-seen order.
"""
import logging
from datetime import date, timedelta
from types import MappingProxyType
from typing import Callable, Iterable, Mapping

from campaign_dashboard.locale_parser import INVALID_DATE, parse_date
from campaign_dashboard.models import (
    AgeBreakdown,
    AggregatedTotals,
    CampaignRecord,
    DateRange,
    DemographicsRecord,
    MetricTotals,
)

logger = logging.getLogger(__name__)

GroupKey = str | tuple[str, ...]
KeyFn = Callable[[CampaignRecord], GroupKey]

AGE_ORDER = ["18-24", "25-34", "35-44", "45-54", "55-64", "65+"]
MALE_LABELS = {"male", "masculino"}
FEMALE_LABELS = {"female", "feminino"}


# ═══════════════════════════════════════════════════════════
# Grouping
# ═══════════════════════════════════════════════════════════

def group_and_sum(records: Iterable[CampaignRecord], key_fn: KeyFn) -> Mapping[GroupKey, AggregatedTotals]:
    groups: dict[GroupKey, AggregatedTotals] = {}
    for record in records:
        key = key_fn(record)
        existing = groups.get(key)
        if existing is None:
            existing = AggregatedTotals(key=key, first_record=record)
        groups[key] = existing.add(record)
    return MappingProxyType(groups)


def merge_grouped(
    left: Mapping[GroupKey, AggregatedTotals],
    right: Mapping[GroupKey, AggregatedTotals],
) -> Mapping[GroupKey, AggregatedTotals]:
    """Combine two grouped results as if their inputs had been grouped together."""
    merged = dict(left)
    for key, totals in right.items():
        merged[key] = merged[key].merge(totals) if key in merged else totals
    return MappingProxyType(merged)


def sum_totals(records: Iterable[CampaignRecord]) -> MetricTotals:
    totals = MetricTotals()
    for record in records:
        totals = MetricTotals(**totals.plus(record))
    return totals


def campaign_key(record: CampaignRecord) -> tuple[str, str]:
    return record.campaign, record.source


def aggregate_campaigns(records: Iterable[CampaignRecord]) -> list[AggregatedTotals]:
    return list(group_and_sum(records, campaign_key).values())


def aggregate_ad_sets(records: Iterable[CampaignRecord]) -> list[AggregatedTotals]:
    return list(group_and_sum(records, lambda r: r.ad_set_name).values())


def get_unique_creatives(records: Iterable[CampaignRecord]) -> list[AggregatedTotals]:
    """One entry per ad name; the same ad name in different campaigns is one creative."""
    return list(group_and_sum(records, lambda r: r.ad_name).values())


def aggregate_by_date(records: Iterable[CampaignRecord]) -> Mapping[GroupKey, AggregatedTotals]:
    return group_and_sum(records, lambda r: r.date)


def group_by_date(records: Iterable[CampaignRecord]) -> Mapping[str, tuple[CampaignRecord, ...]]:
    grouped: dict[str, list[CampaignRecord]] = {}
    for record in records:
        grouped.setdefault(record.date, []).append(record)
    return MappingProxyType({k: tuple(v) for k, v in grouped.items()})


# ═══════════════════════════════════════════════════════════
# Filtering
# ═══════════════════════════════════════════════════════════

def last_n_days(days: int, today: date | None = None) -> DateRange:
    """Inclusive range of ``days`` calendar days ending on ``today``."""
    if days < 1:
        raise ValueError(f"days must be positive, got {days}")
    today = today or date.today()
    return DateRange(start=today - timedelta(days=days - 1), end=today)


def filter_records(
    records: Iterable[CampaignRecord],
    date_range: DateRange | None = None,
    sources: list[str] | None = None,
    campaigns: list[str] | None = None,
) -> list[CampaignRecord]:
    result = []
    for record in records:
        if date_range is not None:
            record_date = parse_date(record.date)
            # rows with unreadable dates stay in every range
            if record_date != INVALID_DATE and not date_range.start <= record_date <= date_range.end:
                continue
        if sources and record.source not in sources:
            continue
        if campaigns and record.campaign not in campaigns:
            continue
        result.append(record)
    return result


def get_unique_sources(records: Iterable[CampaignRecord]) -> list[str]:
    return list(dict.fromkeys(r.source for r in records))


def get_unique_campaigns(records: Iterable[CampaignRecord]) -> list[str]:
    return list(dict.fromkeys(r.campaign for r in records))


# ═══════════════════════════════════════════════════════════
# Demographics
# ═══════════════════════════════════════════════════════════

def _age_rank(age: str) -> int:
    return AGE_ORDER.index(age) if age in AGE_ORDER else -1


def aggregate_demographics_by_age(rows: Iterable[DemographicsRecord]) -> list[AgeBreakdown]:
    """Impressions per age bucket split by gender; unrecognized genders are ignored."""
    buckets: dict[str, dict[str, int]] = {}
    for row in rows:
        bucket = buckets.setdefault(row.age, {"male": 0, "female": 0})
        gender = row.gender.lower()
        if gender in MALE_LABELS:
            bucket["male"] += row.impressions
        elif gender in FEMALE_LABELS:
            bucket["female"] += row.impressions

    unknown = [age for age in buckets if age not in AGE_ORDER]
    if unknown:
        logger.debug(f"[Aggregator] Unrecognized age buckets: {unknown}")

    ordered = sorted(buckets.items(), key=lambda item: _age_rank(item[0]))
    return [AgeBreakdown(age=age, **counts) for age, counts in ordered]
