"""
Error codes for the kms-sdk.

This module defines standardized error codes used throughout the kms-sdk.
Error codes follow the format: KMS-{Component}-{HTTP_Code}-{Unique_ID}

Components:
- Credential: Credential reference parsing and resolution errors
- Client: KMS client construction and configuration errors
- Operation: Request validation and remote KMS call errors
"""

from enum import Enum
from typing import Dict


class ErrorComponent(Enum):
    """Components that can generate errors in the system."""

    CREDENTIAL = "Credential"
    CLIENT = "Client"
    OPERATION = "Operation"


class ErrorCode:
    """Error code with component, HTTP code, and description."""

    def __init__(
        self, component: str, http_code: str, unique_id: str, description: str
    ):
        self.code = f"KMS-{component}-{http_code}-{unique_id}"
        self.description = description

    def __str__(self) -> str:
        return f"{self.code}: {self.description}"


# Credential Errors
CREDENTIAL_ERRORS = {
    "CREDENTIAL_RESOLUTION_ERROR": ErrorCode(
        ErrorComponent.CREDENTIAL.value, "500", "00", "Credential resolution failed"
    ),
    "MISSING_CREDENTIALS_ERROR": ErrorCode(
        ErrorComponent.CREDENTIAL.value, "401", "00", "Required credentials are missing"
    ),
    "INVALID_SOURCE_KIND_ERROR": ErrorCode(
        ErrorComponent.CREDENTIAL.value, "400", "00", "Unknown credential source kind"
    ),
}

# Client Errors
CLIENT_ERRORS = {
    "CLIENT_INIT_ERROR": ErrorCode(
        ErrorComponent.CLIENT.value, "500", "00", "KMS client init failed"
    ),
    "INVALID_REGION_ERROR": ErrorCode(
        ErrorComponent.CLIENT.value, "400", "00", "Invalid AWS region"
    ),
    "CLIENT_CONFIG_ERROR": ErrorCode(
        ErrorComponent.CLIENT.value, "400", "01", "KMS client configuration error"
    ),
}

# Operation Errors
OPERATION_ERRORS = {
    "MISSING_KEY_ID_ERROR": ErrorCode(
        ErrorComponent.OPERATION.value, "400", "00", "Key ID is required"
    ),
    "INVALID_CIPHERTEXT_ERROR": ErrorCode(
        ErrorComponent.OPERATION.value, "400", "01", "Ciphertext is not valid base64"
    ),
    "INVALID_PAYLOAD_ERROR": ErrorCode(
        ErrorComponent.OPERATION.value, "400", "02", "Payload cannot be processed"
    ),
    "UNSUPPORTED_OPERATION_ERROR": ErrorCode(
        ErrorComponent.OPERATION.value, "400", "03", "Unsupported KMS operation"
    ),
    "REMOTE_SERVICE_ERROR": ErrorCode(
        ErrorComponent.OPERATION.value, "502", "00", "KMS call failed"
    ),
}

# Combined dictionary of all error codes
ERROR_CODES: Dict[str, ErrorCode] = {
    **CREDENTIAL_ERRORS,
    **CLIENT_ERRORS,
    **OPERATION_ERRORS,
}
