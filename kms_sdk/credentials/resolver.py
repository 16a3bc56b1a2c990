"""Resolve credential references against an execution context.

Each CredentialSourceKind maps to exactly one lookup function. The mapping
is checked at import time so adding a source kind without a lookup fails
loudly instead of silently falling back to a literal.
"""

from typing import Any, Callable, Dict, Optional

from kms_sdk.credentials.context import ExecutionContext
from kms_sdk.credentials.exceptions import ResolutionError
from kms_sdk.credentials.types import CredentialReference, CredentialSourceKind
from kms_sdk.common.utils import get_nested_value
from kms_sdk.observability.logger_adaptor import get_logger

logger = get_logger(__name__)


def _lookup_nested(get_value: Callable[[str], Any], path: str) -> Any:
    """Direct key lookup, or first-segment lookup followed by a nested walk."""
    if "." not in path:
        return get_value(path)

    first, *rest = path.split(".")
    return get_nested_value(get_value(first), rest)


def _resolve_literal(path: str, context: ExecutionContext) -> Any:
    return path


def _resolve_flow(path: str, context: ExecutionContext) -> Any:
    return _lookup_nested(context.get_flow_value, path)


def _resolve_global(path: str, context: ExecutionContext) -> Any:
    return _lookup_nested(context.get_global_value, path)


def _resolve_env(path: str, context: ExecutionContext) -> Any:
    return context.get_env_var(path)


def _resolve_msg(path: str, context: ExecutionContext) -> Any:
    return context.get_message_field(path)


SOURCE_KIND_RESOLVERS: Dict[
    CredentialSourceKind, Callable[[str, ExecutionContext], Any]
] = {
    CredentialSourceKind.LITERAL: _resolve_literal,
    CredentialSourceKind.FLOW: _resolve_flow,
    CredentialSourceKind.GLOBAL: _resolve_global,
    CredentialSourceKind.ENV: _resolve_env,
    CredentialSourceKind.MSG: _resolve_msg,
}

# Validation: Ensure every source kind has a lookup
_missing_source_kinds = set(CredentialSourceKind) - set(SOURCE_KIND_RESOLVERS.keys())
assert not _missing_source_kinds, (
    f"Missing resolvers in SOURCE_KIND_RESOLVERS: {_missing_source_kinds}. "
    f"All CredentialSourceKinds must have a lookup function."
)


class CredentialResolver:
    """Resolves CredentialReferences to concrete values.

    Resolution is a pure function of ``(reference, context)``: it performs
    no network I/O, never mutates the context and is safe to call
    concurrently for the same reference with different contexts.

    Example:
        >>> ref = CredentialReference(CredentialSourceKind.ENV, "AWS_ACCESS_KEY_ID")
        >>> ctx = MessageExecutionContext(env={"AWS_ACCESS_KEY_ID": "AKIA..."})
        >>> CredentialResolver.resolve(ref, ctx)
        'AKIA...'
    """

    @classmethod
    def resolve(
        cls, reference: CredentialReference, context: ExecutionContext
    ) -> Optional[Any]:
        """Resolve a reference to its current value.

        Args:
            reference: The credential reference to resolve.
            context: The execution context of the current invocation.

        Returns:
            The value exactly as stored (no casting), or None when the
            reference has no path or the value is not present.

        Raises:
            ResolutionError: If a context lookup raised, e.g. because a
                context store is unavailable.
        """
        if reference is None or reference.path is None or reference.path == "":
            return None

        lookup = SOURCE_KIND_RESOLVERS[reference.source_kind]
        try:
            return lookup(reference.path, context)
        except Exception as e:
            # Literal values are never logged
            logger.error(
                f"Failed to resolve credential from {reference.source_kind.value}: {str(e)}"
            )
            raise ResolutionError(
                f"Failed to get value for type: {reference.source_kind.value}, "
                f"value: {reference.path}. Error: {str(e)}"
            ) from e
