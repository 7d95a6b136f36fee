"""
CSV decoding for the campaign and demographics exports.

The exports are comma-delimited, CRLF-separated, with one header line.
Fields are mapped by position; decoding degrades bad values to defaults
instead of raising.
"""
import logging
from pathlib import Path

from campaign_dashboard.locale_parser import parse_brazilian_number, parse_int_or_default
from campaign_dashboard.models import CampaignRecord, DemographicsRecord

logger = logging.getLogger(__name__)

LINE_SEPARATOR = "\r\n"

# Positional layout of the campaign export (sheet column names)
CAMPAIGN_COLUMNS = (
    "campaign",
    "date",
    "source",
    "spend",
    "impressions",
    "actions_link_click",
    "actions_landing_page_view",
    "thumbnail_url",
    "ad_name",
    "actions_add_to_cart",
    "actions_initiate_checkout",
    "actions_offsite_conversion_fb_pixel_purchase",
    "actions_post_engagement",
    "adset_name",
    "action_values_omni_purchase",
)

DEMOGRAPHICS_COLUMNS = (
    "age",
    "gender",
    "impressions",
    "actions_link_click",
    "actions_post_engagement",
    "actions_offsite_conversion_fb_pixel_purchase",
)


def split_csv_line(line: str) -> list[str]:
    """Split one line on commas outside double quotes.

    Quote characters toggle the quoted state and are dropped. Doubled quotes
    are not un-escaped.
    """
    fields = []
    current = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def _data_lines(text: str) -> list[str]:
    lines = [line for line in text.split(LINE_SEPARATOR) if line.strip()]
    if len(lines) < 2:
        return []
    return lines[1:]


def _pad(values: list[str], width: int) -> list[str]:
    missing = width - len(values)
    if missing > 0:
        logger.debug(f"[CSV] Row has {len(values)} of {width} columns, defaulting {missing} trailing")
        return values + [""] * missing
    return values


def decode_record(values: list[str]) -> CampaignRecord:
    v = _pad(values, len(CAMPAIGN_COLUMNS))
    return CampaignRecord(
        campaign=v[0],
        date=v[1],
        source=v[2],
        spend=parse_brazilian_number(v[3]),
        impressions=parse_int_or_default(v[4]),
        link_clicks=parse_int_or_default(v[5]),
        landing_page_views=parse_int_or_default(v[6]),
        thumbnail_url=v[7],
        ad_name=v[8],
        add_to_cart=parse_int_or_default(v[9]),
        initiate_checkout=parse_int_or_default(v[10]),
        purchases=parse_int_or_default(v[11]),
        post_engagement=parse_int_or_default(v[12]),
        ad_set_name=v[13],
        revenue=parse_brazilian_number(v[14]),
    )


def parse_csv(text: str) -> list[CampaignRecord]:
    """Decode the campaign export into records, in input row order."""
    records = [decode_record(split_csv_line(line)) for line in _data_lines(text)]
    logger.debug(f"[CSV] Parsed {len(records)} campaign rows")
    return records


def decode_demographics(values: list[str]) -> DemographicsRecord:
    v = _pad(values, len(DEMOGRAPHICS_COLUMNS))
    return DemographicsRecord(
        age=v[0],
        gender=v[1],
        impressions=parse_int_or_default(v[2]),
        clicks=parse_int_or_default(v[3]),
        engagement=parse_int_or_default(v[4]),
        purchases=parse_int_or_default(v[5]),
    )


def parse_demographics_csv(text: str) -> list[DemographicsRecord]:
    return [decode_demographics(split_csv_line(line)) for line in _data_lines(text)]


def read_export(path: str | Path) -> str:
    """Read an export file keeping its CRLF separators intact."""
    return Path(path).read_bytes().decode("utf-8-sig")
