"""Exceptions raised while validating or executing a KMS operation."""

from kms_sdk.common.exceptions import KMSSDKError


class OperationError(KMSSDKError):
    """Base exception for KMS operation failures."""

    default_error_code = "REMOTE_SERVICE_ERROR"


class MissingKeyIdError(OperationError):
    """Raised when encrypt or generateDataKey is requested without a key ID."""

    default_error_code = "MISSING_KEY_ID_ERROR"


class InvalidCiphertextError(OperationError):
    """Raised when a decrypt payload is not valid base64 ciphertext."""

    default_error_code = "INVALID_CIPHERTEXT_ERROR"


class InvalidPayloadError(OperationError):
    """Raised when a payload is empty, of an unsupported type, or not valid UTF-8 after decrypt."""

    default_error_code = "INVALID_PAYLOAD_ERROR"


class UnsupportedOperationError(OperationError):
    """Raised when the requested operation is not encrypt, decrypt or generateDataKey.

    Attributes:
        operation: The operation name that was requested.
    """

    default_error_code = "UNSUPPORTED_OPERATION_ERROR"

    def __init__(self, operation: object):
        self.operation = operation
        super().__init__(f"Unsupported operation: {operation}")


class RemoteServiceError(OperationError):
    """Wraps any failure raised by the KMS call itself.

    Attributes:
        operation: The KMS API that failed, e.g. ``Encrypt``.
        service_error_code: The AWS error code when available, e.g.
            ``ThrottlingException``.
    """

    default_error_code = "REMOTE_SERVICE_ERROR"

    def __init__(
        self, message: str, operation: str = "", service_error_code: str = ""
    ):
        self.operation = operation
        self.service_error_code = service_error_code
        super().__init__(message)
