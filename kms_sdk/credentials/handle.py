"""Opaque credential handle that prevents accidental exposure.

The CredentialHandle wraps the AWS key material resolved for one request
and blocks operations that could expose secrets:
- dict(handle) - Blocked
- print(handle) - Shows redacted placeholder
- for k in handle - Blocked
- handle.keys() / handle.values() / handle.items() - Blocked

Only handle.get(field) is allowed, and access is logged at debug level.
"""

from typing import Any, Dict, Iterator, Optional

from kms_sdk.credentials.exceptions import CredentialHandleError
from kms_sdk.observability.logger_adaptor import get_logger

logger = get_logger(__name__)

ACCESS_KEY_ID = "aws_access_key_id"
SECRET_ACCESS_KEY = "aws_secret_access_key"
SESSION_TOKEN = "aws_session_token"


class CredentialHandle:
    """Opaque wrapper around resolved credential values.

    Example:
        >>> handle = CredentialHandle(
        ...     {"aws_access_key_id": "AKIA...", "aws_secret_access_key": "shhh"},
        ...     source="explicit_keys",
        ... )
        >>> handle.get("aws_access_key_id")
        'AKIA...'
        >>> print(handle)
        <CredentialHandle source=explicit_keys [REDACTED]>
        >>> dict(handle)  # CredentialHandleError

    Attributes:
        source: Label of the auth mode that produced the values.
    """

    __slots__ = ("_values", "_source", "_accessed_fields")

    def __init__(self, values: Dict[str, Any], source: str = "explicit_keys"):
        object.__setattr__(self, "_values", dict(values))
        object.__setattr__(self, "_source", source)
        object.__setattr__(self, "_accessed_fields", set())

    @property
    def source(self) -> str:
        return self._source

    def get(self, field: str, default: Optional[Any] = None) -> Any:
        """Get a single credential field."""
        if field not in self._accessed_fields:
            self._accessed_fields.add(field)
            logger.debug(f"Credential field '{field}' accessed ({self._source})")
        value = self._values.get(field)
        return default if value is None else value

    def has(self, field: str) -> bool:
        return self._values.get(field) is not None

    def __setattr__(self, name: str, value: Any) -> None:
        raise CredentialHandleError("CredentialHandle is immutable.")

    def __iter__(self) -> Iterator[str]:
        raise CredentialHandleError(
            "Cannot iterate over CredentialHandle. Use handle.get(field) instead."
        )

    def keys(self) -> None:
        raise CredentialHandleError(
            "Cannot list CredentialHandle keys. Use handle.get(field) instead."
        )

    def values(self) -> None:
        raise CredentialHandleError(
            "Cannot list CredentialHandle values. Use handle.get(field) instead."
        )

    def items(self) -> None:
        raise CredentialHandleError(
            "Cannot list CredentialHandle items. Use handle.get(field) instead."
        )

    def __reduce__(self):
        raise CredentialHandleError("CredentialHandle cannot be pickled.")

    def __repr__(self) -> str:
        return f"<CredentialHandle source={self._source} [REDACTED]>"

    __str__ = __repr__
