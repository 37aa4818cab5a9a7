from app.services.alert_engine import AlertEvaluator, detect_breach, first_present
from app.services.alert_lifecycle import dismiss_alert, resolve_alert
from app.services.broadcast import BroadcastChannel, ConnectionRegistry
from app.services.ingest import ReadingIngest

__all__ = [
    "AlertEvaluator",
    "BroadcastChannel",
    "ConnectionRegistry",
    "ReadingIngest",
    "detect_breach",
    "dismiss_alert",
    "first_present",
    "resolve_alert",
]
