from datetime import date, datetime, timezone
from typing import Callable, Optional, Union

from logship.errors import TopologyError
from logship.log import get_logger
from logship.tokens import SequenceTokenCache
from logship.topology import TopologyManager

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StreamRouter:
    """
    Picks today's log stream, "{prefix}-YYYY-MM-DD" in UTC.

    The first resolve after the UTC date changes clears the sequence token
    cache wholesale; tokens of yesterday's streams are never needed again.
    """

    def __init__(
        self,
        prefix: str,
        topology: TopologyManager,
        tokens: SequenceTokenCache,
        clock: Clock = utc_now,
    ):
        self.prefix = prefix
        self._topology = topology
        self._tokens = tokens
        self._clock = clock
        self.active_date: Optional[str] = None

    def today(self) -> str:
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.strftime("%Y-%m-%d")

    def stream_name(self, day: Union[str, date, None] = None) -> str:
        if isinstance(day, date):
            day = day.strftime("%Y-%m-%d")
        return f"{self.prefix}-{day or self.today()}"

    def _roll(self, today: str) -> None:
        if today == self.active_date:
            return
        if self.active_date is not None:
            logger.info("Log stream rollover", previous=self.active_date, current=today, dropped_tokens=len(self._tokens))
        self.active_date = today
        self._tokens.clear()
        self._topology.forget_streams()

    async def resolve_active_stream(self, group: str) -> str:
        """
        Name of today's stream in `group`, created if needed.

        A topology failure is logged and the name returned anyway; the send
        that follows then fails (and is dropped) on its own.
        """
        today = self.today()
        self._roll(today)
        name = self.stream_name(today)
        try:
            await self._topology.ensure_stream(group, name)
        except TopologyError as e:
            logger.warning("Could not ensure today's log stream", log_group=group, log_stream=name, code=e.code)
        return name
