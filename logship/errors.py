class LogShipperError(Exception):
    """Base class for errors raised by the log shipper."""


class InitializationError(LogShipperError):
    """A log group could not be confirmed or created at startup."""


class TopologyError(LogShipperError):
    """Describing or creating a log group/stream failed."""

    def __init__(self, message: str, code: str = "Unknown"):
        super().__init__(message)
        self.code = code


def error_code(exc: BaseException) -> str:
    """CloudWatch error code for a botocore ClientError, else the exception class name."""
    response = getattr(exc, "response", None)
    if isinstance(response, dict):
        return response.get("Error", {}).get("Code", "ClientError")
    return type(exc).__name__
