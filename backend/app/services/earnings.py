import math

from backend.app.models import AverageViews, BucketEarnings, EarningRange, EarningsEstimate, VideoBucket

# USD per 1000 views.
RPM_BANDS = {
    VideoBucket.STANDARD: {"min": 2.0, "max": 7.0},
    VideoBucket.SHORT: {"min": 0.2, "max": 1.0},
}
MONTHS_PER_YEAR = 12
CURRENCY = "USD"


def average_view_count(samples) -> int:
    if not samples:
        return 0
    total_views = sum(sample.view_count for sample in samples)
    return total_views // len(samples)


def compute_average_views(standard_samples, short_samples) -> AverageViews:
    return AverageViews(
        standard=average_view_count(standard_samples),
        short=average_view_count(short_samples),
    )


def earning_range(views: int, rpm: dict[str, float]) -> EarningRange:
    low = math.floor(views / 1000 * rpm["min"])
    high = math.floor(views / 1000 * rpm["max"])
    return EarningRange(min=low, max=high, average=(low + high) // 2)


def bucket_earnings(monthly_views: int, rpm: dict[str, float]) -> BucketEarnings:
    # Yearly is computed from yearly views, not from the floored monthly values.
    return BucketEarnings(
        monthly=earning_range(monthly_views, rpm),
        yearly=earning_range(monthly_views * MONTHS_PER_YEAR, rpm),
    )


def _sum_ranges(a: EarningRange, b: EarningRange) -> EarningRange:
    return EarningRange(min=a.min + b.min, max=a.max + b.max, average=a.average + b.average)


def estimate_earnings(average_views: AverageViews) -> EarningsEstimate:
    """
    Flat RPM bands per bucket; the country/category CPM table in config is
    not consulted.
    """
    standard = bucket_earnings(average_views.standard, RPM_BANDS[VideoBucket.STANDARD])
    short = bucket_earnings(average_views.short, RPM_BANDS[VideoBucket.SHORT])
    total = BucketEarnings(
        monthly=_sum_ranges(standard.monthly, short.monthly),
        yearly=_sum_ranges(standard.yearly, short.yearly),
    )
    return EarningsEstimate(standard=standard, short=short, total=total, currency=CURRENCY)
