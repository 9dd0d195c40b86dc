"""
Hotel Pricing Core Time — Public API
======================================
Date windows and stay-night helpers.
Doctrine: NO date.today() in pricing logic. Dates come from the caller.
"""

from core.time.temporal import (
    DateLike,
    DateWindow,
    as_date,
    is_aware,
    month_day_key,
    nights_between,
    stay_night_list,
    stay_nights,
)

__all__ = [
    "DateLike",
    "DateWindow",
    "as_date",
    "is_aware",
    "month_day_key",
    "nights_between",
    "stay_nights",
    "stay_night_list",
]
