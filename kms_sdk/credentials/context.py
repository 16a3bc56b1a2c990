"""Execution context a credential reference is resolved against.

The context bundles the ambient state available while a single inbound
message is processed: the flow and global context stores, the message
itself and the process environment. It is supplied per invocation and is
never persisted by the resolver.
"""

import os
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, Optional, Protocol, Union, runtime_checkable

from kms_sdk.common.utils import get_nested_value, parse_property_path

EnvReader = Union[Mapping, Callable[[str], Optional[str]]]


@runtime_checkable
class ContextStore(Protocol):
    """Key/value store scoped to a flow or to the whole process."""

    def get(self, key: str) -> Any:
        """Return the value stored under ``key`` or None."""
        ...


@runtime_checkable
class ExecutionContext(Protocol):
    """Lookups the host flow engine provides while one message is processed."""

    @property
    def message(self) -> Dict[str, Any]:
        """The inbound message being processed."""
        ...

    def get_flow_value(self, key: str) -> Any:
        ...

    def get_global_value(self, key: str) -> Any:
        ...

    def get_env_var(self, name: str) -> Optional[str]:
        ...

    def get_message_field(self, path: str) -> Any:
        ...


class DictContextStore:
    """In-memory ContextStore backed by a dictionary.

    Example:
        >>> store = DictContextStore({"aws": {"access_key": "AKIA..."}})
        >>> store.get("aws")["access_key"]
        'AKIA...'
    """

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(values or {})

    def get(self, key: str) -> Any:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def keys(self) -> Iterable[str]:
        return list(self._values.keys())


class MessageExecutionContext:
    """ExecutionContext for one inbound message.

    Args:
        message: The inbound message, a mapping with a ``payload`` field.
        flow_store: Flow-scoped store, or None when the host has none.
        global_store: Process-scoped store, or None when the host has none.
        env: Environment reader, either a mapping or a ``name -> value``
            callable. Defaults to the real process environment; tests pass
            a plain dict instead.
    """

    def __init__(
        self,
        message: Optional[Dict[str, Any]] = None,
        flow_store: Optional[ContextStore] = None,
        global_store: Optional[ContextStore] = None,
        env: Optional[EnvReader] = None,
    ):
        self._message = message if message is not None else {}
        self._flow_store = flow_store
        self._global_store = global_store
        self._env = env if env is not None else os.getenv

    @property
    def message(self) -> Dict[str, Any]:
        return self._message

    def get_flow_value(self, key: str) -> Any:
        if self._flow_store is None:
            return None
        return self._flow_store.get(key)

    def get_global_value(self, key: str) -> Any:
        if self._global_store is None:
            return None
        return self._global_store.get(key)

    def get_env_var(self, name: str) -> Optional[str]:
        if isinstance(self._env, Mapping):
            return self._env.get(name)
        return self._env(name)

    def get_message_field(self, path: str) -> Any:
        return get_nested_value(self._message, parse_property_path(path))

