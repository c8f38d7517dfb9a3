"""
put_log_events with sequence token bookkeeping.

ship() never raises. What went wrong is returned as a ShipResult and written
to the diagnostic log; the event itself is dropped.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

from botocore.exceptions import ClientError

from logship.errors import error_code
from logship.log import get_logger
from logship.router import Clock, utc_now
from logship.tokens import SequenceTokenCache, StreamKey

logger = get_logger(__name__)

# error bodies of these carry the token CloudWatch wanted instead
TOKEN_MISMATCH = ("InvalidSequenceTokenException", "DataAlreadyAcceptedException")
STREAM_MISSING = "ResourceNotFoundException"
REJECTED = "RejectedLogEvents"


@dataclass(frozen=True)
class ShipResult:
    ok: bool
    code: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls) -> "ShipResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, code: str, detail: str) -> "ShipResult":
        return cls(ok=False, code=code, detail=detail)


class ShippingClient:
    def __init__(self, client, tokens: SequenceTokenCache, clock: Clock = utc_now):
        self._client = client
        self._tokens = tokens
        self._clock = clock
        self._locks: Dict[StreamKey, asyncio.Lock] = {}

    def _lock(self, group: str, stream: str) -> asyncio.Lock:
        lock = self._locks.get((group, stream))
        if lock is None:
            lock = self._locks[(group, stream)] = asyncio.Lock()
        return lock

    def _timestamp_ms(self) -> int:
        return int(self._clock().timestamp() * 1000)

    async def ship(
        self, group: str, stream: str, message: str, timestamp_ms: Optional[int] = None
    ) -> ShipResult:
        # one append in flight per stream so the cached token is never stale
        async with self._lock(group, stream):
            try:
                return await self._put(group, stream, message, timestamp_ms)
            except Exception as e:
                code = error_code(e)
                logger.warning(
                    "Failed to send log event to CloudWatch",
                    log_group=group,
                    log_stream=stream,
                    code=code,
                    error=str(e),
                )
                return ShipResult.failure(code, str(e))

    async def _put(self, group: str, stream: str, message: str, timestamp_ms: Optional[int]) -> ShipResult:
        args = {
            "logGroupName": group,
            "logStreamName": stream,
            "logEvents": [{"timestamp": timestamp_ms or self._timestamp_ms(), "message": message}],
        }
        token = self._tokens.get(group, stream)
        if token:
            args["sequenceToken"] = token

        try:
            resp = await asyncio.to_thread(self._client.put_log_events, **args)
        except ClientError as e:
            self._resync(group, stream, e)
            raise

        next_token = resp.get("nextSequenceToken")
        if next_token:
            self._tokens.set(group, stream, next_token)

        rejected = resp.get("rejectedLogEventsInfo")
        if rejected:
            logger.warning("CloudWatch rejected log event", log_group=group, log_stream=stream, info=rejected)
            return ShipResult.failure(REJECTED, str(rejected))
        return ShipResult.success()

    def _resync(self, group: str, stream: str, e: ClientError) -> None:
        code = error_code(e)
        if code in TOKEN_MISMATCH:
            expected = e.response.get("expectedSequenceToken")
            if expected:
                self._tokens.set(group, stream, expected)
            else:
                self._tokens.discard(group, stream)
        elif code == STREAM_MISSING:
            self._tokens.discard(group, stream)
