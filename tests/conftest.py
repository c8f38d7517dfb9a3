"""Shared fixtures: an in-memory stand-in for the CloudWatch Logs client."""

from datetime import datetime, timezone

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from logship.config import ShipperConfig


def client_error(code, operation, message="boom", **extra):
    response = {"Error": {"Code": code, "Message": message}}
    response.update(extra)
    return ClientError(response, operation)


class FakeLogsClient:
    """Implements the five CloudWatch Logs calls the shipper uses."""

    def __init__(self):
        self.groups = {}
        self.calls = []
        self.fail = {}
        self._token = 0

    def _record(self, operation, kwargs):
        self.calls.append((operation, kwargs))
        err = self.fail.get(operation)
        if err is not None:
            raise err

    def count(self, operation):
        return sum(1 for op, _ in self.calls if op == operation)

    def describe_log_groups(self, **kwargs):
        self._record("describe_log_groups", kwargs)
        prefix = kwargs.get("logGroupNamePrefix", "")
        return {"logGroups": [{"logGroupName": g} for g in self.groups if g.startswith(prefix)]}

    def create_log_group(self, **kwargs):
        self._record("create_log_group", kwargs)
        name = kwargs["logGroupName"]
        if name in self.groups:
            raise client_error("ResourceAlreadyExistsException", "CreateLogGroup")
        self.groups[name] = {}

    def describe_log_streams(self, **kwargs):
        self._record("describe_log_streams", kwargs)
        group = kwargs["logGroupName"]
        if group not in self.groups:
            raise client_error("ResourceNotFoundException", "DescribeLogStreams")
        prefix = kwargs.get("logStreamNamePrefix", "")
        return {"logStreams": [{"logStreamName": s} for s in self.groups[group] if s.startswith(prefix)]}

    def create_log_stream(self, **kwargs):
        self._record("create_log_stream", kwargs)
        group, name = kwargs["logGroupName"], kwargs["logStreamName"]
        if group not in self.groups:
            raise client_error("ResourceNotFoundException", "CreateLogStream")
        if name in self.groups[group]:
            raise client_error("ResourceAlreadyExistsException", "CreateLogStream")
        self.groups[group][name] = []

    def put_log_events(self, **kwargs):
        self._record("put_log_events", kwargs)
        group, stream = kwargs["logGroupName"], kwargs["logStreamName"]
        if stream not in self.groups.get(group, {}):
            raise client_error("ResourceNotFoundException", "PutLogEvents")
        self.groups[group][stream].extend(kwargs["logEvents"])
        self._token += 1
        return {"nextSequenceToken": f"token-{self._token}"}

    def messages(self, group, stream):
        return [e["message"] for e in self.groups[group][stream]]


class FakeClock:
    def __init__(self, now=None):
        self.now = now or datetime(2024, 3, 9, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def fake_client():
    return FakeLogsClient()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return ShipperConfig(
        api_log_group_name="/app/api",
        error_log_group_name="/app/errors",
        region="ap-southeast-2",
    )


@pytest.fixture
def unreachable():
    return EndpointConnectionError(endpoint_url="https://logs.ap-southeast-2.amazonaws.com")


@pytest.fixture
def make_client_error():
    return client_error
