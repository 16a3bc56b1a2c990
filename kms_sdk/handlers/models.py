from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from kms_sdk.constants import DEFAULT_KEY_SPEC
from kms_sdk.handlers.exceptions import UnsupportedOperationError


class KMSOperation(str, Enum):
    """KMS operations a node can perform."""

    ENCRYPT = "encrypt"
    DECRYPT = "decrypt"
    GENERATE_DATA_KEY = "generateDataKey"

    @classmethod
    def parse(cls, value: Union[str, "KMSOperation", None]) -> "KMSOperation":
        if isinstance(value, KMSOperation):
            return value
        for operation in cls:
            if operation.value == value:
                return operation
        raise UnsupportedOperationError(value)

    @property
    def requires_key_id(self) -> bool:
        return self is not KMSOperation.DECRYPT


class RequestState(Enum):
    """Lifecycle of one inbound request."""

    IDLE = "idle"
    RESOLVING_CREDENTIALS = "resolving_credentials"
    BUILDING_CLIENT = "building_client"
    INVOKING_REMOTE = "invoking_remote"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class OperationRequest:
    """One operation to perform, built from an inbound message and node configuration.

    ``operation`` keeps the raw configured name so that an unknown name is
    reported when the request is prepared rather than when it is built.
    """

    operation: str
    payload: Any = None
    key_id: Optional[str] = None
    key_spec: Optional[str] = None

    @classmethod
    def from_message(
        cls, message: Dict[str, Any], operation: str, key_id: Optional[str] = None
    ) -> "OperationRequest":
        payload = message.get("payload")
        key_spec = None
        if isinstance(payload, dict):
            key_spec = payload.get("keySpec") or None
        return cls(
            operation=operation, payload=payload, key_id=key_id, key_spec=key_spec
        )


@dataclass(frozen=True)
class PreparedOperation:
    """A validated request whose payload has been converted to bytes."""

    operation: KMSOperation
    key_id: Optional[str] = None
    data: Optional[bytes] = None
    key_spec: str = DEFAULT_KEY_SPEC


@dataclass
class OperationResult:
    """Outcome of one request; exactly one is produced per request.

    Attributes:
        success: Whether the operation succeeded.
        payload: Operation-specific output on success.
        error: Human-readable message on failure.
    """

    success: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    @classmethod
    def succeeded(cls, payload: Dict[str, Any]) -> "OperationResult":
        return cls(success=True, payload=payload)

    @classmethod
    def failed(cls, message: str) -> "OperationResult":
        return cls(success=False, error=message)

    def to_payload(self) -> Dict[str, Any]:
        """Outbound message payload: the result, or ``{"error": message}``."""
        if self.success:
            return dict(self.payload)
        return {"error": self.error}
