"""
Conversion funnel over the six ad-delivery stages.

Stage order is fixed: Impressions -> Link Clicks -> Landing Page Views ->
Add to Cart -> Initiate Checkout -> Purchases.
"""
from campaign_dashboard.metrics import safe_divide
from campaign_dashboard.models import ConversionBand, FunnelStep, MetricTotals

# (stage key, totals field, default label)
FUNNEL_STAGES = [
    ("impressions", "impressions", "Impressions"),
    ("link_clicks", "link_clicks", "Link Clicks"),
    ("landing_page_views", "landing_page_views", "Landing Page Views"),
    ("add_to_cart", "add_to_cart", "Add to Cart"),
    ("initiate_checkout", "initiate_checkout", "Initiate Checkout"),
    ("purchases", "purchases", "Purchases"),
]

GOOD_CONVERSION = 30.0
WARN_CONVERSION = 10.0


def classify_conversion(
    rate: float,
    good: float = GOOD_CONVERSION,
    warn: float = WARN_CONVERSION,
) -> ConversionBand:
    if rate >= good:
        return "good"
    if rate >= warn:
        return "warn"
    return "poor"


def build_funnel(
    totals: MetricTotals,
    labels: dict[str, str] | None = None,
    good: float = GOOD_CONVERSION,
    warn: float = WARN_CONVERSION,
) -> list[FunnelStep]:
    """Build the funnel from summed totals.

    ``conversion_from_previous`` is fixed at 100 for the first stage and is 0
    whenever the previous stage is 0. ``percentage_of_first_step`` is 0 when
    the first stage is 0.
    """
    labels = labels or {}
    values = [getattr(totals, field) for _, field, _ in FUNNEL_STAGES]
    first = values[0]

    steps = []
    for index, (key, _, default_label) in enumerate(FUNNEL_STAGES):
        value = values[index]
        if index == 0:
            conversion = 100.0
        else:
            conversion = safe_divide(value, values[index - 1]) * 100
        steps.append(
            FunnelStep(
                name=labels.get(key, default_label),
                value=value,
                percentage_of_first_step=safe_divide(value, first) * 100,
                conversion_from_previous=conversion,
                band=classify_conversion(conversion, good, warn),
            )
        )
    return steps
