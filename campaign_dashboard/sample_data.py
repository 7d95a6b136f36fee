"""
Synthetic spreadsheet exports for local development and tests.

Produces text in the same shape as the real exports: CRLF lines, one header,
quoted text fields and Brazilian-formatted decimals. Output is deterministic
for a given seed and ``today``.
"""
import logging
from datetime import date, timedelta
from typing import List, Optional

import numpy as np
from faker import Faker

from campaign_dashboard.csv_parser import CAMPAIGN_COLUMNS, DEMOGRAPHICS_COLUMNS, LINE_SEPARATOR
from campaign_dashboard.locale_parser import format_brazilian_number, format_date

logger = logging.getLogger(__name__)

SOURCES = ["facebook", "instagram", "google"]
AGE_BUCKETS = ["18-24", "25-34", "35-44", "45-54", "55-64", "65+"]
GENDERS = ["male", "female", "unknown"]


def _quote(value: str) -> str:
    return '"' + value.replace('"', "'") + '"'


def _money(value: float) -> str:
    return _quote(format_brazilian_number(value))


def _join(lines: List[str]) -> str:
    return LINE_SEPARATOR.join(lines) + LINE_SEPARATOR


def generate_campaign_export(
    days: int = 30,
    seed: int = 42,
    today: Optional[date] = None,
    campaign_count: int = 4,
    ads_per_campaign: int = 3,
    daily_spend_mean: float = 250.0,
) -> str:
    """Generate a campaign export with one row per ad per day.

    The first ad name of every campaign is shared, so the same creative runs
    across several campaigns and sources.
    """
    fake = Faker("pt_BR")
    fake.seed_instance(seed)
    rng = np.random.default_rng(seed)
    today = today or date.today()

    # --- 1. Campaigns / Ad Sets / Ads ---
    shared_ad = f"AD00 | {fake.word().title()}"
    ads = []
    for c in range(campaign_count):
        campaign = f"{fake.word().upper()} | {fake.company()}"
        source = SOURCES[c % len(SOURCES)]
        ad_set = f"Público {fake.job()}"
        for a in range(ads_per_campaign):
            ad_name = shared_ad if a == 0 else f"AD{c + 1}{a} | {fake.word().title()}"
            thumbnail = f"https://picsum.photos/seed/{seed}-{c}-{a}/400/400"
            ads.append((campaign, source, ad_set, ad_name, thumbnail))

    dates = [today - timedelta(days=d) for d in range(days - 1, -1, -1)]
    n_rows = len(ads) * len(dates)

    # --- 2. Metrics ---
    # Spend is lognormal; every funnel stage is a random fraction of the one before
    target_mean = daily_spend_mean / (len(ads) if ads else 1)
    spend = rng.lognormal(mean=np.log(target_mean), sigma=0.5, size=n_rows)
    impressions = (spend * rng.uniform(40, 120, n_rows)).astype(int)
    clicks = (impressions * rng.uniform(0.005, 0.03, n_rows)).astype(int)
    page_views = (clicks * rng.uniform(0.6, 0.9, n_rows)).astype(int)
    add_to_cart = (page_views * rng.uniform(0.05, 0.3, n_rows)).astype(int)
    checkout = (add_to_cart * rng.uniform(0.3, 0.7, n_rows)).astype(int)
    purchases = (checkout * rng.uniform(0.4, 0.9, n_rows)).astype(int)
    engagement = (impressions * rng.uniform(0.01, 0.05, n_rows)).astype(int)
    revenue = purchases * rng.uniform(60, 250, n_rows)

    # --- 3. Rows ---
    lines = [",".join(CAMPAIGN_COLUMNS)]
    i = 0
    for day in dates:
        for campaign, source, ad_set, ad_name, thumbnail in ads:
            lines.append(",".join([
                _quote(campaign),
                format_date(day),
                source,
                _money(spend[i]),
                str(impressions[i]),
                str(clicks[i]),
                str(page_views[i]),
                thumbnail,
                _quote(ad_name),
                str(add_to_cart[i]),
                str(checkout[i]),
                str(purchases[i]),
                str(engagement[i]),
                _quote(ad_set),
                _money(revenue[i]),
            ]))
            i += 1

    logger.info(f"[Sample] Generated {n_rows} campaign rows ({len(ads)} ads x {len(dates)} days)")
    return _join(lines)


def generate_demographics_export(seed: int = 42, impressions_mean: float = 5000.0) -> str:
    rng = np.random.default_rng(seed)
    lines = [",".join(DEMOGRAPHICS_COLUMNS)]
    for age in AGE_BUCKETS:
        for gender in GENDERS:
            impressions = int(rng.lognormal(mean=np.log(impressions_mean), sigma=0.6))
            clicks = int(impressions * rng.uniform(0.005, 0.03))
            engagement = int(impressions * rng.uniform(0.01, 0.05))
            purchases = int(clicks * rng.uniform(0.01, 0.08))
            lines.append(f"{age},{gender},{impressions},{clicks},{engagement},{purchases}")
    return _join(lines)
