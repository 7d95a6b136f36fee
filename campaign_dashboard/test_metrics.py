import math

import pytest

from campaign_dashboard.aggregator import get_unique_creatives
from campaign_dashboard.metrics import (
    build_ad_set_rows,
    build_campaign_rows,
    calculate_kpis,
    compute_kpis,
    cpm,
    cpm_rank_value,
    creative_view,
    paginate,
    rank_creatives,
    safe_divide,
    search_rows,
    sort_rows,
    summarize_creatives,
)
from campaign_dashboard.models import CampaignRecord, MetricTotals


def creative(name, spend, impressions, clicks, revenue=0.0):
    return CampaignRecord(
        ad_name=name, spend=spend, impressions=impressions, link_clicks=clicks, revenue=revenue,
    )


@pytest.fixture
def creatives():
    return get_unique_creatives([
        creative("A", spend=10.0, impressions=1000, clicks=10, revenue=30.0),   # ctr 1, cpm 10, roas 3
        creative("B", spend=50.0, impressions=2000, clicks=60, revenue=50.0),   # ctr 3, cpm 25, roas 1
        creative("Ghost", spend=5.0, impressions=0, clicks=0),                  # no delivery
        creative("C", spend=5.0, impressions=1000, clicks=10, revenue=40.0),    # ctr 1, cpm 5, roas 8
    ])


# --- Ratios ---

def test_compute_kpis():
    totals = MetricTotals(spend=200.0, impressions=40000, link_clicks=800, purchases=20, revenue=900.0)
    m = compute_kpis(totals)
    assert m.ctr == pytest.approx(2.0)
    assert m.cpc == pytest.approx(0.25)
    assert m.cpm == pytest.approx(5.0)
    assert m.roas == pytest.approx(4.5)
    assert m.conversion_rate == pytest.approx(2.5)
    assert m.cost_per_purchase == pytest.approx(10.0)


def test_all_zero_totals_give_zero_ratios():
    m = compute_kpis(MetricTotals())
    assert (m.ctr, m.cpc, m.cpm, m.roas) == (0.0, 0.0, 0.0, 0.0)
    assert (m.conversion_rate, m.cost_per_purchase) == (0.0, 0.0)


@pytest.mark.parametrize("totals", [
    MetricTotals(spend=10.0, impressions=0, link_clicks=5, revenue=20.0),
    MetricTotals(spend=10.0, impressions=100, link_clicks=0, revenue=20.0),
    MetricTotals(spend=0.0, impressions=100, link_clicks=5, revenue=20.0),
    MetricTotals(spend=0.0, impressions=0, link_clicks=0, revenue=0.0),
])
def test_zero_denominators_never_leak(totals):
    m = compute_kpis(totals)
    for value in m.model_dump().values():
        assert math.isfinite(value)
    if totals.impressions == 0:
        assert m.ctr == 0 and m.cpm == 0
    if totals.link_clicks == 0:
        assert m.cpc == 0
    if totals.spend == 0:
        assert m.roas == 0


def test_safe_divide():
    assert safe_divide(1, 4) == 0.25
    assert safe_divide(1, 0) == 0.0
    assert safe_divide(1, 0, default=-1.0) == -1.0


def test_compute_kpis_is_repeatable():
    totals = MetricTotals(spend=123.45, impressions=6789, link_clicks=101, revenue=321.0)
    assert compute_kpis(totals) == compute_kpis(totals)


def test_calculate_kpis_sums_records():
    kpis = calculate_kpis([creative("A", 10.0, 1000, 10), creative("B", 30.0, 1000, 30)])
    assert kpis.totals.spend == pytest.approx(40.0)
    assert kpis.totals.impressions == 2000
    assert kpis.metrics.ctr == pytest.approx(2.0)


# --- Creative Ranking ---

def test_cpm_rank_value_differs_from_display():
    totals = MetricTotals(spend=5.0, impressions=0)
    assert cpm(totals) == 0.0
    assert cpm_rank_value(totals) == math.inf


def test_rank_all_keeps_input_order(creatives):
    assert [c.ad_name for c in rank_creatives(creatives, "all")] == ["A", "B", "Ghost", "C"]


def test_rank_by_ctr_ties_keep_input_order(creatives):
    assert [c.ad_name for c in rank_creatives(creatives, "ctr")] == ["B", "A", "C", "Ghost"]


def test_rank_by_cpm_puts_undelivered_last(creatives):
    assert [c.ad_name for c in rank_creatives(creatives, "cpm")] == ["C", "A", "B", "Ghost"]


def test_rank_by_roas(creatives):
    assert [c.ad_name for c in rank_creatives(creatives, "roas")] == ["C", "A", "B", "Ghost"]


def test_rank_unknown_mode(creatives):
    with pytest.raises(ValueError, match="Unknown ranking mode"):
        rank_creatives(creatives, "cpc")


def test_creative_view_shows_zero_cpm_for_undelivered(creatives):
    ghost = creative_view(creatives[2])
    assert ghost.ad_name == "Ghost"
    assert ghost.metrics.cpm == 0.0
    assert ghost.totals.spend == pytest.approx(5.0)


def test_summarize_creatives(creatives):
    summary = summarize_creatives(creatives)
    assert summary.total_creatives == 4
    assert summary.total_impressions == 4000
    assert summary.total_clicks == 80
    assert summary.avg_ctr == pytest.approx(2.0)
    assert summary.avg_cpm == pytest.approx(17.5)
    assert summary.best_ctr == pytest.approx(3.0)
    assert summary.best_cpm == pytest.approx(5.0)


def test_summarize_without_delivery():
    summary = summarize_creatives(get_unique_creatives([creative("Ghost", 5.0, 0, 0)]))
    assert summary.best_cpm == 0.0
    assert summary.avg_ctr == 0.0
    assert summarize_creatives([]).total_creatives == 0


# --- Tables ---

@pytest.fixture
def table_records():
    return [
        CampaignRecord(campaign="Verão", source="facebook", spend=100.0, impressions=1000,
                       link_clicks=20, purchases=2, revenue=300.0, ad_set_name="Frio"),
        CampaignRecord(campaign="Inverno", source="google", spend=50.0, impressions=500,
                       link_clicks=5, purchases=1, revenue=0.0, ad_set_name=""),
        CampaignRecord(campaign="Verão", source="facebook", spend=20.0, impressions=200,
                       link_clicks=10, purchases=0, revenue=60.0, ad_set_name="Frio"),
        CampaignRecord(campaign="outono", source="instagram", spend=0.0, impressions=0,
                       ad_set_name="Quente"),
    ]


def test_campaign_rows(table_records):
    rows = build_campaign_rows(table_records)
    assert [(r.campaign, r.source) for r in rows] == [
        ("Verão", "facebook"), ("Inverno", "google"), ("outono", "instagram"),
    ]
    assert rows[0].spend == pytest.approx(120.0)
    assert rows[0].clicks == 30
    assert rows[0].conversions == 2
    assert rows[0].roas == pytest.approx(3.0)
    assert rows[0].ctr == pytest.approx(2.5)
    assert rows[2].roas == 0.0


def test_ad_set_rows_label_blank_names(table_records):
    names = [r.ad_set_name for r in build_ad_set_rows(table_records)]
    assert names == ["Frio", "Unknown", "Quente"]


def test_search_is_case_insensitive(table_records):
    rows = build_campaign_rows(table_records)
    assert [r.campaign for r in search_rows(rows, "VERÃ", ("campaign",))] == ["Verão"]
    assert [r.campaign for r in search_rows(rows, "goo", ("campaign", "source"))] == ["Inverno"]
    assert search_rows(rows, "", ("campaign",)) == rows


def test_sort_rows(table_records):
    rows = build_campaign_rows(table_records)
    assert [r.campaign for r in sort_rows(rows, "spend", "desc")] == ["Verão", "Inverno", "outono"]
    assert [r.campaign for r in sort_rows(rows, "spend", "asc")] == ["outono", "Inverno", "Verão"]
    assert [r.campaign for r in sort_rows(rows, "campaign", "asc")] == ["Inverno", "outono", "Verão"]


def test_sort_rows_errors(table_records):
    rows = build_campaign_rows(table_records)
    with pytest.raises(ValueError, match="Unknown sort key"):
        sort_rows(rows, "nope")
    with pytest.raises(ValueError, match="Invalid sort order"):
        sort_rows(rows, "spend", "sideways")


def test_paginate():
    rows = list(range(23))
    page = paginate(rows, page=3, per_page=10)
    assert page.items == [20, 21, 22]
    assert page.total_items == 23
    assert page.total_pages == 3
    assert paginate(rows, page=5, per_page=10).items == []
    assert paginate([], page=1).total_pages == 0


def test_paginate_rejects_bad_page():
    with pytest.raises(ValueError, match="page must be >= 1"):
        paginate([1, 2], page=0)
    with pytest.raises(ValueError, match="per_page must be >= 1"):
        paginate([1, 2], per_page=0)
