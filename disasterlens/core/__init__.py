"""
Core domain models and pure functions for DisasterLens.

This module contains the domain models and pure business logic
that are independent of external I/O and infrastructure concerns.
"""

from .models import (
    Alert, Report, ClassificationResult, SummaryResult, RealtimeEvent, ClassifierWeights,
    AlertType, Severity, ReportStatus, AlertStatus, EventType,
)
from .classifier import classify
from .summarize import summarize, generate_alert_message
from .emergency import EmergencyMonitor, find_emergency_items
from .stats import compute_stats
from .errors import StoreError, StoreUnavailableError, NotFoundError

__all__ = [
    "Alert", "Report", "ClassificationResult", "SummaryResult", "RealtimeEvent", "ClassifierWeights",
    "AlertType", "Severity", "ReportStatus", "AlertStatus", "EventType",
    "classify", "summarize", "generate_alert_message",
    "EmergencyMonitor", "find_emergency_items", "compute_stats",
    "StoreError", "StoreUnavailableError", "NotFoundError",
]
