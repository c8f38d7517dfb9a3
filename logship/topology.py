"""
Log group / log stream existence.

ensure_group and ensure_stream are check-then-create and safe to call any
number of times. Once a resource is confirmed it is remembered, so the
per-event path costs no API call after the first event of the day.
"""

import asyncio
from typing import Dict, Optional, Set, Tuple

from botocore.exceptions import BotoCoreError, ClientError

from logship.errors import TopologyError, error_code
from logship.log import get_logger

logger = get_logger(__name__)

ALREADY_EXISTS = "ResourceAlreadyExistsException"


class TopologyManager:
    def __init__(self, client):
        self._client = client
        self._groups: Set[str] = set()
        self._streams: Set[Tuple[str, str]] = set()
        self._locks: Dict[Tuple[str, Optional[str]], asyncio.Lock] = {}

    def _lock(self, group: str, stream: Optional[str] = None) -> asyncio.Lock:
        key = (group, stream)
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def _call(self, operation: str, **kwargs) -> dict:
        return await asyncio.to_thread(getattr(self._client, operation), **kwargs)

    async def _group_exists(self, name: str) -> bool:
        kwargs = {"logGroupNamePrefix": name}
        while True:
            resp = await self._call("describe_log_groups", **kwargs)
            if any(g.get("logGroupName") == name for g in resp.get("logGroups", [])):
                return True
            token = resp.get("nextToken")
            if not token:
                return False
            kwargs["nextToken"] = token

    async def _stream_exists(self, group: str, name: str) -> bool:
        kwargs = {"logGroupName": group, "logStreamNamePrefix": name}
        while True:
            resp = await self._call("describe_log_streams", **kwargs)
            if any(s.get("logStreamName") == name for s in resp.get("logStreams", [])):
                return True
            token = resp.get("nextToken")
            if not token:
                return False
            kwargs["nextToken"] = token

    async def ensure_group(self, name: str) -> bool:
        """
        Make sure log group `name` exists.

        Returns True when this call created it. Raises TopologyError when
        CloudWatch cannot be queried or the group cannot be created.
        """
        if name in self._groups:
            return False
        async with self._lock(name):
            if name in self._groups:
                return False
            try:
                created = False
                if not await self._group_exists(name):
                    created = await self._create("create_log_group", logGroupName=name)
            except (ClientError, BotoCoreError) as e:
                logger.error("Error ensuring log group exists", log_group=name, code=error_code(e), error=str(e))
                raise TopologyError(f"cannot ensure log group {name}: {e}", code=error_code(e)) from e
            self._groups.add(name)
            if created:
                logger.info("Created log group", log_group=name)
            return created

    async def ensure_stream(self, group: str, name: str) -> bool:
        """Same as ensure_group, for stream `name` inside `group`."""
        key = (group, name)
        if key in self._streams:
            return False
        async with self._lock(group, name):
            if key in self._streams:
                return False
            try:
                created = False
                if not await self._stream_exists(group, name):
                    created = await self._create(
                        "create_log_stream", logGroupName=group, logStreamName=name
                    )
            except (ClientError, BotoCoreError) as e:
                logger.error(
                    "Error ensuring log stream exists",
                    log_group=group,
                    log_stream=name,
                    code=error_code(e),
                    error=str(e),
                )
                raise TopologyError(f"cannot ensure log stream {group}/{name}: {e}", code=error_code(e)) from e
            self._streams.add(key)
            if created:
                logger.info("Created log stream", log_group=group, log_stream=name)
            return created

    async def _create(self, operation: str, **kwargs) -> bool:
        try:
            await self._call(operation, **kwargs)
        except ClientError as e:
            if error_code(e) != ALREADY_EXISTS:
                raise
            # another process got there first
            logger.debug("Resource already exists", operation=operation, **kwargs)
            return False
        return True

    def forget(self, group: str, stream: str) -> None:
        """Next ensure_stream for this stream goes back to CloudWatch."""
        self._streams.discard((group, stream))

    def forget_streams(self) -> None:
        # streams are per day, so nothing remembered survives a rollover.
        # Locks stay: an in-flight ensure_stream may still hold one.
        self._streams.clear()

    def knows_stream(self, group: str, stream: str) -> bool:
        return (group, stream) in self._streams
