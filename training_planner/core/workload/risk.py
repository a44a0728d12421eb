"""
Acute:Chronic Workload Ratio (ACWR) risk engine.

A single deterministic pass over an immutable list of daily samples:

1. acute = 7-day sum, chronic = 28-day sum
2. acwr = acute / chronic (0 when there is no chronic load)
3. zone from acwr, risk percentage from zone
4. trend from the last 14 days of samples
5. static recommendations by zone

The ratio divides raw sums, not daily averages. The zone thresholds are
calibrated to that scale; changing one without the other breaks the
classification.

Nothing here raises for empty or degenerate input. Dashboards always get
a renderable result.
"""

import math
from datetime import date, datetime, timedelta
from typing import Sequence, Union

from .aggregator import (
    ACUTE_WINDOW_DAYS,
    CHRONIC_WINDOW_DAYS,
    local_day,
    samples_in_window,
    window_sum,
)
from .models import AcwrPoint, RiskZone, Trend, WorkloadMetrics, WorkloadSample


DETRAINING_BELOW = 0.8
SAFETY_UP_TO = 1.3
RISK_UP_TO = 1.5

TREND_WINDOW_DAYS = 14
TREND_MIN_SAMPLES = 4
TREND_THRESHOLD = 0.1


RECOMMENDATIONS: dict[RiskZone, tuple[str, ...]] = {
    RiskZone.DETRAINING: (
        "Training load is below your recent baseline",
        "Increase volume or intensity progressively",
        "Add one extra session per week if recovery allows",
        "Avoid sudden jumps when returning to full load",
    ),
    RiskZone.SAFETY: (
        "Training load is within the safe range",
        "Keep the current progression",
        "Maintain regular recovery days",
    ),
    RiskZone.RISK: (
        "Training load is rising faster than your baseline",
        "Reduce intensity over the next few sessions",
        "Prioritise sleep and recovery",
        "Watch for persistent soreness or fatigue",
    ),
    RiskZone.HIGH_RISK: (
        "Injury risk is high: acute load far exceeds your baseline",
        "Cut training volume significantly this week",
        "Replace hard sessions with active recovery",
        "Consider talking to your coach before the next hard session",
    ),
}

GRADUAL_INCREASE_NOTE = "Monitor the gradual load increase"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def classify_risk_zone(acwr: float) -> RiskZone:
    """
    Zone boundaries:
    - acwr < 0.8          detraining
    - 0.8 <= acwr <= 1.3  safety
    - 1.3 < acwr <= 1.5   risk
    - acwr > 1.5          high-risk
    """
    if acwr < DETRAINING_BELOW:
        return RiskZone.DETRAINING
    if acwr <= SAFETY_UP_TO:
        return RiskZone.SAFETY
    if acwr <= RISK_UP_TO:
        return RiskZone.RISK
    return RiskZone.HIGH_RISK


def risk_percentage(acwr: float, zone: RiskZone, clamp: bool = False) -> int:
    """
    0 for detraining and safety, 0-50 across the risk band, 50 and up in
    high-risk. Values above 100 are possible for extreme ratios unless
    ``clamp`` is set.
    """
    if zone == RiskZone.RISK:
        percentage = _round_half_up(((acwr - SAFETY_UP_TO) / 0.2) * 50)
    elif zone == RiskZone.HIGH_RISK:
        percentage = _round_half_up(50 + ((acwr - RISK_UP_TO) / 0.5) * 50)
    else:
        percentage = 0

    if clamp:
        return max(0, min(100, percentage))
    return percentage


def detect_trend(samples: Sequence[WorkloadSample], as_of: Union[date, datetime]) -> Trend:
    """
    Compare the two halves of the last 14 days of samples.

    Halves are split by sample count (the first takes the extra one when
    the count is odd), not by calendar week. A change beyond 10% of the
    first half's load counts as a trend.
    """
    recent = samples_in_window(samples, as_of, TREND_WINDOW_DAYS)
    if len(recent) < TREND_MIN_SAMPLES:
        return Trend.STABLE

    split = math.ceil(len(recent) / 2)
    week1_load = sum(s.load for s in recent[:split])
    week2_load = sum(s.load for s in recent[split:])
    change = week2_load - week1_load

    if change > TREND_THRESHOLD * week1_load:
        return Trend.INCREASING
    if change < -TREND_THRESHOLD * week1_load:
        return Trend.DECREASING
    return Trend.STABLE


def recommendations_for(zone: RiskZone, trend: Trend) -> tuple[str, ...]:
    advice = RECOMMENDATIONS[zone]
    if zone == RiskZone.SAFETY and trend == Trend.INCREASING:
        advice = advice + (GRADUAL_INCREASE_NOTE,)
    return advice


def compute_acwr(acute: float, chronic: float) -> float:
    if chronic == 0:
        return 0.0
    return acute / chronic


def compute_metrics(
    samples: Sequence[WorkloadSample],
    as_of: Union[date, datetime],
    clamp_percentage: bool = False,
) -> WorkloadMetrics:
    """Full risk snapshot as of a given day. Pure: same input, same output."""
    samples = list(samples)

    acute = window_sum(samples, as_of, ACUTE_WINDOW_DAYS)
    chronic = window_sum(samples, as_of, CHRONIC_WINDOW_DAYS)
    acwr = compute_acwr(acute, chronic)
    zone = classify_risk_zone(acwr)
    trend = detect_trend(samples, as_of)
    imputed_days = sum(
        1 for s in samples_in_window(samples, as_of, CHRONIC_WINDOW_DAYS) if s.imputed
    )

    return WorkloadMetrics(
        acute_load=acute,
        chronic_load=chronic,
        acwr=acwr,
        risk_zone=zone,
        risk_percentage=risk_percentage(acwr, zone, clamp=clamp_percentage),
        trend=trend,
        recommendations=recommendations_for(zone, trend),
        imputed_days=imputed_days,
    )


def acwr_history(
    samples: Sequence[WorkloadSample],
    start: Union[date, datetime],
    end: Union[date, datetime],
) -> list[AcwrPoint]:
    """One acute/chronic/ACWR point per day from ``start`` to ``end``."""
    samples = list(samples)
    points: list[AcwrPoint] = []

    day = local_day(start)
    last = local_day(end)
    while day <= last:
        acute = window_sum(samples, day, ACUTE_WINDOW_DAYS)
        chronic = window_sum(samples, day, CHRONIC_WINDOW_DAYS)
        acwr = compute_acwr(acute, chronic)
        points.append(AcwrPoint(
            date=day,
            acute_load=acute,
            chronic_load=chronic,
            acwr=acwr,
            risk_zone=classify_risk_zone(acwr),
        ))
        day += timedelta(days=1)

    return points
