"""Core types for declaring where a credential value comes from.

A credential is configured as a ``(source kind, path)`` pair and resolved
against an execution context each time an operation runs, so rotating a
flow variable takes effect on the next call without reconfiguration.

Example:
    >>> from kms_sdk.credentials import CredentialReference, CredentialSourceKind
    >>>
    >>> # Literal value stored in the node configuration
    >>> CredentialReference.literal("AKIA...")
    >>>
    >>> # Nested lookup in the flow store: flow.get("aws")["access_key"]
    >>> CredentialReference(CredentialSourceKind.FLOW, "aws.access_key")
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from kms_sdk.common.exceptions import ClientInitError
from kms_sdk.credentials.exceptions import InvalidSourceKindError


class CredentialSourceKind(Enum):
    """Where a credential value is read from.

    The enum values are the type tags used by flow configuration
    (``str``, ``flow``, ``global``, ``env``, ``msg``).
    """

    LITERAL = "str"  # path holds the value itself
    FLOW = "flow"  # flow-scoped context store
    GLOBAL = "global"  # process-scoped context store
    ENV = "env"  # process environment variable
    MSG = "msg"  # field of the inbound message

    @classmethod
    def parse(cls, value: Union[str, "CredentialSourceKind", None]) -> "CredentialSourceKind":
        """Parse a configuration tag into a source kind.

        Args:
            value: A CredentialSourceKind, one of the configuration tags, or
                a member name (case-insensitive). None means literal.

        Returns:
            CredentialSourceKind: The parsed source kind.

        Raises:
            InvalidSourceKindError: If the tag is not a known source kind.
        """
        if isinstance(value, CredentialSourceKind):
            return value
        if value is None or value == "":
            return cls.LITERAL

        normalized = str(value).strip().lower()
        kind = _SOURCE_KIND_ALIASES.get(normalized)
        if kind is None:
            raise InvalidSourceKindError(f"Unknown credential source kind: {value}")
        return kind


_SOURCE_KIND_ALIASES = {
    "str": CredentialSourceKind.LITERAL,
    "string": CredentialSourceKind.LITERAL,
    "literal": CredentialSourceKind.LITERAL,
    "flow": CredentialSourceKind.FLOW,
    "global": CredentialSourceKind.GLOBAL,
    "env": CredentialSourceKind.ENV,
    "msg": CredentialSourceKind.MSG,
    "message": CredentialSourceKind.MSG,
}


@dataclass(frozen=True)
class CredentialReference:
    """Symbolic reference to a credential value.

    Attributes:
        source_kind: Where the value is read from.
        path: For LITERAL the value itself; otherwise the lookup key, which
            may be dotted (``a.b.c``) to reach into nested containers.
    """

    source_kind: CredentialSourceKind
    path: Optional[str]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "source_kind", CredentialSourceKind.parse(self.source_kind)
        )

    @classmethod
    def literal(cls, value: Optional[str]) -> "CredentialReference":
        return cls(CredentialSourceKind.LITERAL, value)

    @classmethod
    def from_config(
        cls, source_kind: Union[str, CredentialSourceKind, None], path: Optional[str]
    ) -> "CredentialReference":
        """Build a reference from a ``(type, value)`` configuration pair."""
        return cls(CredentialSourceKind.parse(source_kind), path)

    def __repr__(self) -> str:
        # Literal paths are secret values
        if self.source_kind is CredentialSourceKind.LITERAL:
            return "CredentialReference(source_kind=LITERAL, path=<redacted>)"
        return f"CredentialReference(source_kind={self.source_kind.name}, path={self.path!r})"


@dataclass(frozen=True)
class AmbientRole:
    """Rely on the identity of the execution environment (IAM role, instance profile)."""


@dataclass(frozen=True)
class ExplicitKeys:
    """Access keys resolved from credential references on every call.

    Attributes:
        access_key_id: Reference to the AWS access key ID.
        secret_access_key: Reference to the AWS secret access key.
        session_token: Optional reference to an STS session token.
    """

    access_key_id: CredentialReference
    secret_access_key: CredentialReference
    session_token: Optional[CredentialReference] = None

    def __post_init__(self) -> None:
        missing = []
        if self.access_key_id is None:
            missing.append("access_key_id")
        if self.secret_access_key is None:
            missing.append("secret_access_key")
        if missing:
            raise ClientInitError(
                f"Explicit keys mode requires credential references for: {', '.join(missing)}"
            )


AuthMode = Union[AmbientRole, ExplicitKeys]
