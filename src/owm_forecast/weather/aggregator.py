"""Group a 3-hour forecast series into daily summaries."""

import logging
from datetime import date, datetime, tzinfo
from typing import Dict, Iterable, List, Optional

from owm_forecast.config import (
    MAX_FORECAST_DAYS, REPRESENTATIVE_HOUR_START, REPRESENTATIVE_HOUR_END
)
from owm_forecast.weather.models import DailySummary, ForecastSample

logger = logging.getLogger(__name__)


def local_time(sample: ForecastSample, tz: Optional[tzinfo] = None) -> datetime:
    """Sample time in the given zone; the host's local zone when tz is None."""
    return datetime.fromtimestamp(sample.timestamp, tz)


def summarize_daily(
    samples: Iterable[ForecastSample],
    tz: Optional[tzinfo] = None,
    max_days: int = MAX_FORECAST_DAYS
) -> List[DailySummary]:
    """Build one summary per local calendar day.

    Days keep the order in which they first appear in ``samples``. Only the
    first ``max_days`` days are summarized.

    Args:
        samples: Forecast samples in source order
        tz: Time zone for day boundaries (host local zone if None)
        max_days: Maximum number of days to return

    Returns:
        List of daily summaries, empty if there are no samples
    """
    grouped = _group_by_local_day(samples, tz)
    days = list(grouped.items())[:max_days]

    summaries = [
        DailySummary(
            day=day,
            representative=_pick_representative(day_samples, tz),
            daily_min=min(s.temperature for s in day_samples),
            daily_max=max(s.temperature for s in day_samples),
        )
        for day, day_samples in days
    ]

    logger.debug(f"Summarized {len(grouped)} days into {len(summaries)} daily summaries")
    return summaries


def _group_by_local_day(
    samples: Iterable[ForecastSample],
    tz: Optional[tzinfo]
) -> Dict[date, List[ForecastSample]]:
    # dict preserves first-insertion order of days
    grouped: Dict[date, List[ForecastSample]] = {}
    for sample in samples:
        grouped.setdefault(local_time(sample, tz).date(), []).append(sample)
    return grouped


def _pick_representative(day_samples: List[ForecastSample], tz: Optional[tzinfo]) -> ForecastSample:
    """First midday sample of the day, or the day's first sample."""
    for sample in day_samples:
        if REPRESENTATIVE_HOUR_START <= local_time(sample, tz).hour <= REPRESENTATIVE_HOUR_END:
            return sample
    return day_samples[0]
