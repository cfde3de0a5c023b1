"""Custom structlog processors"""

import socket

from structlog.types import EventDict, WrappedLogger


def add_service_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level context to logs"""
    from gitsmart.core.config import settings

    event_dict["service"] = settings.app_name
    event_dict["environment"] = settings.environment
    try:
        event_dict["hostname"] = socket.gethostname()
    except OSError:
        pass

    return event_dict


def set_log_severity(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Set proper severity field for log aggregation systems"""
    level_map = {
        "debug": "DEBUG",
        "info": "INFO",
        "warning": "WARNING",
        "error": "ERROR",
        "critical": "CRITICAL"
    }

    if "level" in event_dict:
        event_dict["severity"] = level_map.get(event_dict["level"], "INFO")

    return event_dict
