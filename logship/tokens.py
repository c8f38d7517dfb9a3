from typing import Dict, Optional, Tuple

StreamKey = Tuple[str, str]


class SequenceTokenCache:
    """
    Latest sequence token per (log group, log stream).

    Tokens are trusted as returned by the last successful put_log_events; the
    cache never asks CloudWatch for them. A missing token is a valid state and
    means "first append to this stream from this process".
    """

    def __init__(self):
        self._tokens: Dict[StreamKey, str] = {}

    def get(self, group: str, stream: str) -> Optional[str]:
        return self._tokens.get((group, stream))

    def set(self, group: str, stream: str, token: str) -> None:
        self._tokens[(group, stream)] = token

    def discard(self, group: str, stream: str) -> None:
        self._tokens.pop((group, stream), None)

    def clear(self) -> None:
        self._tokens.clear()

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, key: StreamKey) -> bool:
        return key in self._tokens
