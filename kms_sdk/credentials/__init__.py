"""Credential references and their resolution.

A credential is declared as a source kind plus a path and resolved each
time an operation executes:

    >>> from kms_sdk.credentials import (
    ...     CredentialReference,
    ...     CredentialResolver,
    ...     CredentialSourceKind,
    ...     DictContextStore,
    ...     MessageExecutionContext,
    ... )
    >>>
    >>> ctx = MessageExecutionContext(
    ...     message={"payload": "hello"},
    ...     flow_store=DictContextStore({"aws": {"secret": "shhh"}}),
    ... )
    >>> ref = CredentialReference(CredentialSourceKind.FLOW, "aws.secret")
    >>> CredentialResolver.resolve(ref, ctx)
    'shhh'
"""

from kms_sdk.credentials.context import (
    ContextStore,
    DictContextStore,
    ExecutionContext,
    MessageExecutionContext,
)
from kms_sdk.credentials.exceptions import (
    CredentialError,
    CredentialHandleError,
    InvalidSourceKindError,
    MissingCredentialsError,
    ResolutionError,
)
from kms_sdk.credentials.handle import CredentialHandle
from kms_sdk.credentials.resolver import CredentialResolver
from kms_sdk.credentials.types import (
    AmbientRole,
    AuthMode,
    CredentialReference,
    CredentialSourceKind,
    ExplicitKeys,
)

__all__ = [
    # Core types
    "AmbientRole",
    "AuthMode",
    "CredentialReference",
    "CredentialSourceKind",
    "ExplicitKeys",
    # Context
    "ContextStore",
    "DictContextStore",
    "ExecutionContext",
    "MessageExecutionContext",
    # Exceptions
    "CredentialError",
    "CredentialHandleError",
    "InvalidSourceKindError",
    "MissingCredentialsError",
    "ResolutionError",
    # Handle
    "CredentialHandle",
    # Resolver
    "CredentialResolver",
]
