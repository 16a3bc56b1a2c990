"""Custom exceptions for credential resolution.

These exceptions provide specific error handling for the failure modes of
resolving a credential reference against an execution context.
"""

from typing import List, Optional

from kms_sdk.common.exceptions import KMSSDKError


class CredentialError(KMSSDKError):
    """Base exception for credential operations.

    All credential-related exceptions inherit from this class,
    allowing for broad exception handling when needed.
    """

    default_error_code = "CREDENTIAL_RESOLUTION_ERROR"


class ResolutionError(CredentialError):
    """Raised when a context lookup fails while resolving a reference.

    A value that simply is not present never raises, it resolves to None.
    This error is reserved for lookups that blow up, e.g. a context store
    that is unavailable.

    Example:
        >>> raise ResolutionError(
        ...     "Failed to get value for type: flow, value: aws.key. Error: store closed"
        ... )
    """

    default_error_code = "CREDENTIAL_RESOLUTION_ERROR"


class MissingCredentialsError(CredentialError):
    """Raised when explicit keys resolve to empty values.

    Attributes:
        missing_fields: Display names of the fields that are missing,
            e.g. ``["Secret Access Key"]``.
    """

    default_error_code = "MISSING_CREDENTIALS_ERROR"

    def __init__(self, missing_fields: List[str], message: Optional[str] = None):
        self.missing_fields = list(missing_fields)
        super().__init__(
            message
            or f"Missing required credentials: {', '.join(self.missing_fields)}"
        )


class InvalidSourceKindError(CredentialError, ValueError):
    """Raised when a configuration names an unknown credential source kind."""

    default_error_code = "INVALID_SOURCE_KIND_ERROR"


class CredentialHandleError(CredentialError):
    """Raised when attempting forbidden operations on CredentialHandle.

    The CredentialHandle blocks operations that would dump every secret:
    - dict(handle)
    - iterating over handle
    - handle.keys() / handle.values() / handle.items()
    """
