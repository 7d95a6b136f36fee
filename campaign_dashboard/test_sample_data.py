from datetime import date

from campaign_dashboard.aggregator import aggregate_demographics_by_age, get_unique_creatives
from campaign_dashboard.csv_parser import parse_csv, parse_demographics_csv
from campaign_dashboard.locale_parser import parse_date
from campaign_dashboard.sample_data import generate_campaign_export, generate_demographics_export

TODAY = date(2024, 3, 31)


def test_campaign_export_parses_back():
    text = generate_campaign_export(days=10, seed=7, today=TODAY)
    assert text.endswith("\r\n")
    records = parse_csv(text)
    assert len(records) == 4 * 3 * 10
    assert {parse_date(r.date) for r in records} == {date(2024, 3, d) for d in range(22, 32)}
    assert all(r.spend > 0 for r in records)
    assert all(r.purchases <= r.link_clicks <= r.impressions for r in records)


def test_campaign_export_is_deterministic():
    first = generate_campaign_export(days=5, seed=3, today=TODAY)
    assert first == generate_campaign_export(days=5, seed=3, today=TODAY)
    assert first != generate_campaign_export(days=5, seed=4, today=TODAY)


def test_shared_creative_runs_in_every_campaign():
    records = parse_csv(generate_campaign_export(days=3, seed=1, today=TODAY, campaign_count=3, ads_per_campaign=2))
    creatives = get_unique_creatives(records)
    assert len(creatives) == 1 + 3 * 1
    shared = creatives[0]
    assert shared.ad_name.startswith("AD00 |")
    assert shared.record_count == 3 * 3


def test_demographics_export():
    rows = parse_demographics_csv(generate_demographics_export(seed=5))
    assert len(rows) == 18
    by_age = aggregate_demographics_by_age(rows)
    assert [b.age for b in by_age] == ["18-24", "25-34", "35-44", "45-54", "55-64", "65+"]
    assert all(b.male > 0 and b.female > 0 for b in by_age)
