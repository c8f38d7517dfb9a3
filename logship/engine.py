"""
CloudWatchLogger: the one object the rest of the application talks to.

A single instance lives for the whole process. It owns the boto3 client, the
sequence token cache, the active date and the set of known streams.
Only initialize() can raise; log_api_request and log_error always return
normally, whatever CloudWatch does.
"""

import asyncio
from typing import Awaitable, Optional, Set

from logship.config import ShipperConfig, make_logs_client
from logship.errors import InitializationError, TopologyError
from logship.formatter import format_api_event, format_error_event
from logship.links import build_console_link, generate_error_id
from logship.log import get_logger
from logship.models import ApiLogEvent, ErrorLogEvent
from logship.redact import redact
from logship.router import Clock, StreamRouter, utc_now
from logship.shipping import STREAM_MISSING, ShippingClient, ShipResult
from logship.tokens import SequenceTokenCache
from logship.topology import TopologyManager

logger = get_logger(__name__)


class CloudWatchLogger:
    def __init__(self, config: ShipperConfig, client=None, clock: Optional[Clock] = None):
        self.config = config
        self.client = client if client is not None else make_logs_client(config)
        clock = clock or utc_now
        self.tokens = SequenceTokenCache()
        self.topology = TopologyManager(self.client)
        self.router = StreamRouter(config.stream_prefix, self.topology, self.tokens, clock)
        self.shipper = ShippingClient(self.client, self.tokens, clock)
        self._pending: Set[asyncio.Task] = set()

    @property
    def api_log_group(self) -> str:
        return self.config.api_log_group_name

    @property
    def error_log_group(self) -> str:
        return self.config.error_log_group_name

    async def initialize(self) -> None:
        """Ensure both log groups exist. Streams are created lazily, one per day."""
        try:
            await self.topology.ensure_group(self.api_log_group)
            await self.topology.ensure_group(self.error_log_group)
        except TopologyError as e:
            logger.error("Failed to initialize CloudWatch logger", code=e.code, error=str(e))
            raise InitializationError(str(e)) from e
        logger.info(
            "CloudWatch logger initialized",
            api_log_group=self.api_log_group,
            error_log_group=self.error_log_group,
            region=self.config.region,
        )

    async def _send(self, group: str, message: str) -> str:
        stream = await self.router.resolve_active_stream(group)
        result = await self.shipper.ship(group, stream, message)
        self._record(group, stream, result)
        return stream

    def _record(self, group: str, stream: str, result: ShipResult) -> None:
        if result.ok:
            return
        if result.code == STREAM_MISSING:
            # deleted behind our back; recreate on the next event
            self.topology.forget(group, stream)
        logger.debug("Log event dropped", log_group=group, log_stream=stream, code=result.code)

    def _masked(self, event: ApiLogEvent) -> ApiLogEvent:
        fields = self.config.sensitive_fields
        return event.model_copy(
            update={
                "request_body": redact(event.request_body, fields),
                "response_body": redact(event.response_body, fields),
            }
        )

    async def log_api_request(self, event: ApiLogEvent) -> None:
        try:
            await self._send(self.api_log_group, format_api_event(self._masked(event)))
        except Exception:
            logger.exception("Unexpected error while shipping API log", endpoint=event.endpoint)

    async def log_error(self, event: ErrorLogEvent) -> str:
        """Ship an error event and return the console link that finds it."""
        stream = self.router.stream_name()
        try:
            stream = await self._send(self.error_log_group, format_error_event(self._masked(event)))
        except Exception:
            logger.exception("Unexpected error while shipping error log", error_id=event.error_id)
        return self.console_link(stream, event.error_id)

    def console_link(self, stream: str, error_id: str) -> str:
        return build_console_link(self.config.region, self.error_log_group, stream, error_id)

    def generate_error_id(self) -> str:
        return generate_error_id()

    def submit(self, coro: Awaitable) -> asyncio.Task:
        """Run a send in the background; drain() waits for whatever is still running."""
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def log_api_request_nowait(self, event: ApiLogEvent) -> asyncio.Task:
        return self.submit(self.log_api_request(event))

    async def drain(self) -> None:
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)
