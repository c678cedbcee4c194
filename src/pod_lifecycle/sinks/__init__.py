from pod_lifecycle.sinks.event_log import EventLogger
from pod_lifecycle.sinks.rotation import RotatingLogFile

__all__ = ["EventLogger", "RotatingLogFile"]
