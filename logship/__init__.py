from logship.config import ShipperConfig, make_logs_client
from logship.engine import CloudWatchLogger
from logship.errors import InitializationError, LogShipperError, TopologyError
from logship.formatter import format_api_event, format_error_event, format_event
from logship.links import build_console_link, generate_error_id
from logship.models import ApiLogEvent, ErrorInfo, ErrorLogEvent

__all__ = [
    "ApiLogEvent",
    "CloudWatchLogger",
    "ErrorInfo",
    "ErrorLogEvent",
    "InitializationError",
    "LogShipperError",
    "ShipperConfig",
    "TopologyError",
    "build_console_link",
    "format_api_event",
    "format_error_event",
    "format_event",
    "generate_error_id",
    "make_logs_client",
]
