"""Base exceptions shared by every kms-sdk component."""

from typing import Optional

from kms_sdk.common.error_codes import ERROR_CODES, ErrorCode


class KMSSDKError(Exception):
    """Base exception for kms-sdk.

    The exception message is the human readable text reported to the status
    sink and the outbound ``{"error": ...}`` payload. The structured error
    code is kept separately for logs.

    Attributes:
        message: Human-readable error message.
        error_code: The ErrorCode classifying this failure.
    """

    default_error_code: str = "CLIENT_INIT_ERROR"

    def __init__(self, message: str, error_code: Optional[ErrorCode] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or ERROR_CODES[self.default_error_code]

    def __str__(self) -> str:
        return self.message


class ClientInitError(KMSSDKError):
    """Raised when a KMS service config, client or node cannot be initialized.

    This can occur when:
    - The region is not one of the supported AWS regions
    - Explicit-keys mode is missing a required credential reference
    - A node is configured without a service config
    - A config names an unknown credential source kind

    Construction-time errors keep the owning node from becoming ready.
    """

    default_error_code = "CLIENT_INIT_ERROR"
