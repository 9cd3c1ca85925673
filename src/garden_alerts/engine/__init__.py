"""Change-detection and fan-out engine."""
from garden_alerts.engine.change_detector import (ChangeDetector, ChangeResult,
                                                  TransitionKind,
                                                  WeatherTransition,
                                                  classify_weather)
from garden_alerts.engine.planner import NotificationPlanner
from garden_alerts.engine.render import EmailRenderer, format_duration
from garden_alerts.engine.snapshot_store import (ReplaceResult, SnapshotStore,
                                                 canonical_json)

__all__ = [
    "ChangeDetector",
    "ChangeResult",
    "EmailRenderer",
    "NotificationPlanner",
    "ReplaceResult",
    "SnapshotStore",
    "TransitionKind",
    "WeatherTransition",
    "canonical_json",
    "classify_weather",
    "format_duration",
]
