from typing import Iterable

from campaign_dashboard.aggregator import group_and_sum
from campaign_dashboard.config import InsightSettings
from campaign_dashboard.locale_parser import format_brazilian_number, format_currency
from campaign_dashboard.metrics import roas
from campaign_dashboard.models import CampaignRecord, Insight, KPISummary


def _x(value: float) -> str:
    return f"{format_brazilian_number(value)}x"


def build_insights(
    records: Iterable[CampaignRecord],
    kpis: KPISummary,
    settings: InsightSettings | None = None,
) -> list[Insight]:
    """Rule-based highlights for the overview page."""
    settings = settings or InsightSettings()
    m = kpis.metrics
    results = []

    if m.roas >= settings.roas_excellent:
        results.append(Insight(
            type="success",
            title="Excellent ROAS",
            description=f"ROAS is at {_x(m.roas)}: every R$ 1,00 invested returns {format_currency(m.roas)}.",
        ))
    elif m.roas < settings.roas_poor:
        results.append(Insight(
            type="warning",
            title="ROAS Below Target",
            description=f"ROAS is at {_x(m.roas)}. Consider optimizing campaigns to improve return.",
        ))

    if m.ctr > settings.ctr_high:
        results.append(Insight(
            type="success",
            title="CTR Above Average",
            description=f"A click-through rate of {format_brazilian_number(m.ctr)}% indicates relevant ads.",
        ))
    elif m.ctr < settings.ctr_low:
        results.append(Insight(
            type="warning",
            title="Low CTR",
            description=f"CTR of {format_brazilian_number(m.ctr)}%. Consider reviewing creatives and targeting.",
        ))

    if m.cpc < settings.cpc_efficient:
        results.append(Insight(
            type="success",
            title="Efficient CPC",
            description=f"Cost per click of {format_currency(m.cpc)} is within an efficient range.",
        ))

    # Best campaign by ROAS, grouped by campaign name across sources
    by_campaign = group_and_sum(records, lambda r: r.campaign).values()
    top = max(by_campaign, key=roas, default=None)
    if top is not None and roas(top) > 0:
        results.append(Insight(
            type="info",
            title="Top Performer",
            description=f'"{top.campaign}" is the campaign with the best ROAS: {_x(roas(top))}.',
        ))

    return results[:settings.max_insights]
