import uuid
from urllib.parse import quote

CONSOLE_URL = "https://{region}.console.aws.amazon.com/cloudwatch/home"

# same set JavaScript's encodeURIComponent leaves alone
_UNRESERVED = "-_.!~*'()"


def _encode(value: str) -> str:
    return quote(value, safe=_UNRESERVED)


def generate_error_id() -> str:
    return uuid.uuid4().hex


def error_filter(error_id: str) -> str:
    return f'"ERROR_ID: {error_id}"'


def build_console_link(region: str, group: str, stream: str, error_id: str) -> str:
    """Console URL opening `stream` in `group` filtered down to the event tagged `error_id`."""
    base = CONSOLE_URL.format(region=region)
    return (
        f"{base}?region={_encode(region)}"
        f"#logsV2:log-groups/log-group/{_encode(group)}"
        f"/log-events/{_encode(stream)}"
        f"?filterPattern={_encode(error_filter(error_id))}"
    )
