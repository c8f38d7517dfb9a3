"""
FastAPI wiring: an access-log middleware and a 500 handler feeding CloudWatchLogger.
"""

import time
from typing import Iterable, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from logship.engine import CloudWatchLogger
from logship.log import get_logger
from logship.models import ApiLogEvent, ErrorInfo, ErrorLogEvent

logger = get_logger(__name__)


def should_skip(path: str, exclude_paths: Iterable[str]) -> bool:
    for excluded in exclude_paths:
        # "/" would otherwise swallow everything
        if excluded == "/":
            if path == "/":
                return True
        elif path.startswith(excluded):
            return True
    return False


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return None


def _endpoint(request: Request) -> str:
    if request.url.query:
        return f"{request.url.path}?{request.url.query}"
    return request.url.path


def _elapsed_ms(request: Request) -> float:
    start = getattr(request.state, "start_time", None)
    if start is None:
        return 0
    return round((time.perf_counter() - start) * 1000, 2)


def install(app: FastAPI, cloudwatch: CloudWatchLogger, exclude_paths: Optional[List[str]] = None) -> None:
    if exclude_paths is None:
        exclude_paths = cloudwatch.config.exclude_paths

    @app.middleware("http")
    async def cloudwatch_access_log(request: Request, call_next):
        if should_skip(request.url.path, exclude_paths):
            return await call_next(request)

        request.state.start_time = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            event = ApiLogEvent(
                method=request.method,
                endpoint=_endpoint(request),
                status_code=status_code,
                response_time_ms=_elapsed_ms(request),
                client_ip=client_ip(request),
                user_agent=request.headers.get("user-agent"),
            )
            logger.info(
                "API request",
                method=event.method,
                endpoint=event.endpoint,
                status=event.status_code,
                response_time_ms=event.response_time_ms,
            )
            cloudwatch.log_api_request_nowait(event)

    @app.exception_handler(Exception)
    async def cloudwatch_error_handler(request: Request, exc: Exception):
        error_id = cloudwatch.generate_error_id()
        event = ErrorLogEvent(
            error_id=error_id,
            method=request.method,
            endpoint=_endpoint(request),
            status_code=500,
            response_time_ms=_elapsed_ms(request),
            error=ErrorInfo.from_exception(exc),
            client_ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )
        link = await cloudwatch.log_error(event)
        logger.error("Unhandled error", error_id=error_id, endpoint=event.endpoint, console_link=link)
        return JSONResponse(
            status_code=500,
            content={"message": str(exc) or "Internal Server Error", "errorId": error_id},
        )
