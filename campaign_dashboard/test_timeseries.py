import pytest

from campaign_dashboard.models import CampaignRecord
from campaign_dashboard.timeseries import daily_funnel, daily_performance, records_to_frame


@pytest.fixture
def records():
    return [
        CampaignRecord(date="02/02/2024", spend=10.0, link_clicks=5, purchases=1, revenue=40.0,
                       landing_page_views=4, add_to_cart=2, initiate_checkout=1),
        CampaignRecord(date="31/01/2024", spend=20.0, link_clicks=8, purchases=0, revenue=0.0),
        CampaignRecord(date="02/02/2024", spend=5.0, link_clicks=1, purchases=2, revenue=20.0,
                       landing_page_views=1, add_to_cart=1, initiate_checkout=1),
        CampaignRecord(date="01/02/2024", spend=0.0, link_clicks=3, revenue=15.0),
    ]


def test_frame_has_one_row_per_record(records):
    frame = records_to_frame(records)
    assert frame.height == 4
    assert "ad_set_name" in frame.columns


def test_daily_performance_sorted_by_calendar_date(records):
    daily = daily_performance(records)
    # "31/01" sorts after "02/02" as text but before it as a date
    assert [d.date for d in daily] == ["31/01/2024", "01/02/2024", "02/02/2024"]


def test_daily_performance_sums(records):
    last = daily_performance(records)[-1]
    assert last.spend == pytest.approx(15.0)
    assert last.clicks == 6
    assert last.conversions == 3
    assert last.revenue == pytest.approx(60.0)
    assert last.roas == pytest.approx(4.0)


def test_daily_roas_without_spend_is_zero(records):
    by_date = {d.date: d for d in daily_performance(records)}
    assert by_date["01/02/2024"].roas == 0.0


def test_daily_funnel(records):
    funnel = daily_funnel(records)
    last = funnel[-1]
    assert last.date == "02/02/2024"
    assert (last.page_view, last.add_to_cart, last.checkout, last.purchase) == (5, 3, 2, 3)


def test_unparseable_dates_first():
    daily = daily_performance([
        CampaignRecord(date="05/01/2024", spend=1.0),
        CampaignRecord(date="sem data", spend=1.0),
    ])
    assert daily[0].date == "sem data"


def test_empty_input():
    assert daily_performance([]) == []
    assert daily_funnel([]) == []
