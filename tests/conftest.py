"""Global test configuration and fixtures."""

from unittest.mock import patch

import pytest

from kms_sdk.test_utils.kms import FakeKMSBackend


@pytest.fixture
def fake_kms():
    """Patch boto3 client creation so every KMS client talks to one FakeKMSBackend."""
    backend = FakeKMSBackend()
    with patch(
        "kms_sdk.clients.kms.create_boto3_client", return_value=backend
    ) as mock_create_client:
        backend.create_client = mock_create_client
        yield backend
