"""
Training-load monitoring: daily load aggregation and the ACWR risk engine.
"""

from .aggregator import (
    acute_load,
    chronic_load,
    daily_series,
    to_daily_samples,
    weekly_totals,
    window_sum,
)
from .models import (
    AcwrPoint,
    RiskZone,
    TrainingSession,
    Trend,
    WeeklyLoad,
    WorkloadMetrics,
    WorkloadSample,
)
from .monitor import LoadMonitor, SessionSource
from .risk import acwr_history, classify_risk_zone, compute_metrics, detect_trend, risk_percentage

__all__ = [
    "acute_load",
    "chronic_load",
    "daily_series",
    "to_daily_samples",
    "weekly_totals",
    "window_sum",
    "AcwrPoint",
    "RiskZone",
    "TrainingSession",
    "Trend",
    "WeeklyLoad",
    "WorkloadMetrics",
    "WorkloadSample",
    "LoadMonitor",
    "SessionSource",
    "acwr_history",
    "classify_risk_zone",
    "compute_metrics",
    "detect_trend",
    "risk_percentage",
]
