import os
from collections.abc import Mapping
from typing import Any, Dict, Optional

import boto3
from botocore.config import Config

from kms_sdk.common.error_codes import CLIENT_ERRORS
from kms_sdk.common.exceptions import ClientInitError
from kms_sdk.config import get_settings
from kms_sdk.constants import AWS_REGION_ENV_VAR, DEFAULT_AWS_REGION, VALID_AWS_REGIONS
from kms_sdk.observability.logger_adaptor import get_logger

logger = get_logger(__name__)


def validate_aws_region(region: Optional[str]) -> str:
    """
    Check that a region is one of the supported AWS region codes.

    Args:
        region (str): The region code, e.g. ``eu-central-1``

    Returns:
        str: The validated region code

    Raises:
        ClientInitError: If the region is empty or not supported
    """
    if not region or region not in VALID_AWS_REGIONS:
        logger.error(f"Invalid AWS region: {region}")
        raise ClientInitError(
            f"Invalid AWS region: {region}. Must be one of: {', '.join(VALID_AWS_REGIONS)}",
            error_code=CLIENT_ERRORS["INVALID_REGION_ERROR"],
        )
    return region


def get_default_region(env: Optional[Mapping] = None) -> str:
    """
    Region used when a configuration does not name one.

    Reads ``AWS_REGION`` from ``env`` (the process environment when omitted)
    and falls back to ``eu-central-1``.
    """
    if env is None:
        env = os.environ
    return env.get(AWS_REGION_ENV_VAR) or DEFAULT_AWS_REGION


def build_botocore_config() -> Config:
    """
    Build the botocore Config applied to KMS clients.

    Timeouts and pool size come from KMSSDKSettings. ``total_max_attempts``
    counts the first request, so a throttled call is sent exactly once.
    """
    settings = get_settings()
    return Config(
        connect_timeout=settings.connect_timeout,
        read_timeout=settings.read_timeout,
        max_pool_connections=settings.max_pool_connections,
        retries={"total_max_attempts": 1, "mode": "standard"},
    )


def create_boto3_client(
    service_name: str,
    region_name: Optional[str] = None,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
    aws_session_token: Optional[str] = None,
    **kwargs: Any,
) -> Any:
    """
    Create a boto3 client. Key arguments left empty are not passed, so boto3
    falls back to the identity of the environment.
    """
    client_kwargs: Dict[str, Any] = {"region_name": region_name} if region_name else {}
    keys = {
        "aws_access_key_id": aws_access_key_id,
        "aws_secret_access_key": aws_secret_access_key,
        "aws_session_token": aws_session_token,
    }
    client_kwargs.update({name: value for name, value in keys.items() if value})
    client_kwargs.update(kwargs)
    return boto3.client(service_name, **client_kwargs)  # type: ignore
