import os
from typing import List, Optional

import boto3
from botocore.config import Config
from pydantic import BaseModel, field_validator

DEFAULT_REGION = "ap-southeast-2"
DEFAULT_STREAM_PREFIX = "api-logs"
DEFAULT_EXCLUDE_PATHS = ["/health", "/docs", "/openapi.json", "/favicon.ico"]
DEFAULT_SENSITIVE_FIELDS = ["password", "token", "secret", "authorization", "cookie", "apikey", "api_key"]


class ShipperConfig(BaseModel):
    api_log_group_name: str
    error_log_group_name: str
    stream_prefix: str = DEFAULT_STREAM_PREFIX
    region: str = DEFAULT_REGION
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    # bounds a hung put_log_events call
    connect_timeout: float = 3.0
    read_timeout: float = 5.0
    max_attempts: int = 1
    log_level: str = "INFO"
    log_format: str = "json"
    exclude_paths: List[str] = DEFAULT_EXCLUDE_PATHS
    sensitive_fields: List[str] = DEFAULT_SENSITIVE_FIELDS

    @field_validator("api_log_group_name", "error_log_group_name")
    @classmethod
    def _group_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("log group name is required")
        return v

    @field_validator("stream_prefix")
    @classmethod
    def _prefix_default(cls, v: str) -> str:
        return v.strip() or DEFAULT_STREAM_PREFIX

    @field_validator("max_attempts")
    @classmethod
    def _at_least_one(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_attempts must be >= 1")
        return v

    @classmethod
    def from_env(cls, **overrides) -> "ShipperConfig":
        values = {
            "api_log_group_name": os.getenv("CLOUDWATCH_API_LOG_GROUP", ""),
            "error_log_group_name": os.getenv("CLOUDWATCH_ERROR_LOG_GROUP", ""),
            "stream_prefix": os.getenv("CLOUDWATCH_STREAM_PREFIX", DEFAULT_STREAM_PREFIX),
            "region": os.getenv("AWS_REGION", DEFAULT_REGION),
            "aws_access_key_id": os.getenv("AWS_ACCESS_KEY_ID") or None,
            "aws_secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY") or None,
            "connect_timeout": os.getenv("CLOUDWATCH_CONNECT_TIMEOUT", "3"),
            "read_timeout": os.getenv("CLOUDWATCH_READ_TIMEOUT", "5"),
            "max_attempts": os.getenv("CLOUDWATCH_MAX_ATTEMPTS", "1"),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "log_format": os.getenv("LOG_FORMAT", "json"),
        }
        exclude = os.getenv("LOG_EXCLUDE_PATHS")
        if exclude is not None:
            values["exclude_paths"] = [p.strip() for p in exclude.split(",") if p.strip()]
        sensitive = os.getenv("LOG_SENSITIVE_FIELDS")
        if sensitive is not None:
            values["sensitive_fields"] = [f.strip() for f in sensitive.split(",") if f.strip()]
        values.update(overrides)
        return cls(**values)

    def credentials(self) -> dict:
        # explicit keys only when both are set, otherwise boto3's default chain
        if self.aws_access_key_id and self.aws_secret_access_key:
            return {
                "aws_access_key_id": self.aws_access_key_id,
                "aws_secret_access_key": self.aws_secret_access_key,
            }
        return {}


def make_logs_client(config: ShipperConfig):
    return boto3.client(
        "logs",
        region_name=config.region,
        config=Config(
            retries={"max_attempts": config.max_attempts, "mode": "standard"},
            connect_timeout=config.connect_timeout,
            read_timeout=config.read_timeout,
        ),
        **config.credentials(),
    )
