from unittest.mock import Mock, patch

import pytest
from hypothesis import given

from kms_sdk.common.aws_utils import (
    build_botocore_config,
    create_boto3_client,
    get_default_region,
    validate_aws_region,
)
from kms_sdk.common.exceptions import ClientInitError
from kms_sdk.config import configure_settings
from kms_sdk.test_utils.hypothesis.strategies.kms import aws_region


class TestValidateAwsRegion:
    @given(region=aws_region)
    def test_valid_regions(self, region: str) -> None:
        """Test that every supported region validates"""
        assert validate_aws_region(region) == region

    @pytest.mark.parametrize("region", ["", None, "moon-base-1", "EU-CENTRAL-1"])
    def test_invalid_regions(self, region) -> None:
        """Test that unknown regions raise a client init error"""
        with pytest.raises(ClientInitError) as exc_info:
            validate_aws_region(region)
        assert "Invalid AWS region" in str(exc_info.value)
        assert exc_info.value.error_code.code == "KMS-Client-400-00"


class TestGetDefaultRegion:
    def test_uses_env(self) -> None:
        assert get_default_region({"AWS_REGION": "us-west-2"}) == "us-west-2"

    def test_falls_back_to_eu_central_1(self) -> None:
        assert get_default_region({}) == "eu-central-1"
        assert get_default_region({"AWS_REGION": ""}) == "eu-central-1"

    def test_reads_process_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("AWS_REGION", "ap-south-1")
        assert get_default_region() == "ap-south-1"


class TestBuildBotocoreConfig:
    def teardown_method(self) -> None:
        configure_settings()

    def test_single_attempt_and_settings(self) -> None:
        configure_settings(connect_timeout=3, read_timeout=7, max_pool_connections=4)
        config = build_botocore_config()
        assert config.connect_timeout == 3
        assert config.read_timeout == 7
        assert config.max_pool_connections == 4
        assert config.retries == {"total_max_attempts": 1, "mode": "standard"}


class TestCreateBoto3Client:
    @patch("kms_sdk.common.aws_utils.boto3.client")
    def test_ambient_identity_passes_no_keys(self, mock_client: Mock) -> None:
        """Test that no key arguments reach boto3 without explicit keys"""
        create_boto3_client("kms", region_name="eu-central-1")
        mock_client.assert_called_once_with("kms", region_name="eu-central-1")

    @patch("kms_sdk.common.aws_utils.boto3.client")
    def test_explicit_keys(self, mock_client: Mock) -> None:
        """Test that explicit keys and extra kwargs are forwarded"""
        config = Mock()
        create_boto3_client(
            "kms",
            region_name="eu-central-1",
            aws_access_key_id="AKIA...",
            aws_secret_access_key="shhh",
            aws_session_token=None,
            config=config,
        )
        mock_client.assert_called_once_with(
            "kms",
            region_name="eu-central-1",
            aws_access_key_id="AKIA...",
            aws_secret_access_key="shhh",
            config=config,
        )
