"""Collaborators supplied by the host flow engine.

The node only consumes these protocols; how a status light is drawn or how
errors reach an operator is up to the host.
"""

from enum import Enum
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from kms_sdk.observability.logger_adaptor import get_logger

logger = get_logger(__name__)


class NodeStatus(Enum):
    """Status states a node reports."""

    OK = "ok"
    PROCESSING = "processing"
    ERROR = "error"


@runtime_checkable
class StatusSink(Protocol):
    """Observable status indicator of a node."""

    def set_status(self, state: NodeStatus, text: str) -> None:
        ...

    def clear_status(self) -> None:
        ...


@runtime_checkable
class ErrorReporter(Protocol):
    """Operator-visible error channel of the host."""

    def report_error(self, message: str, msg: Optional[Dict[str, Any]] = None) -> None:
        ...


class LoggingStatusSink:
    """StatusSink that only logs; used when the host supplies none."""

    def __init__(self, node_name: str = "aws-kms"):
        self.node_name = node_name
        self.state: Optional[NodeStatus] = None
        self.text = ""

    def set_status(self, state: NodeStatus, text: str) -> None:
        self.state = state
        self.text = text
        logger.debug(f"{self.node_name} status: {state.value} {text}")

    def clear_status(self) -> None:
        self.state = None
        self.text = ""


class LoggingErrorReporter:
    """ErrorReporter that writes to the kms-sdk log."""

    def __init__(self, node_name: str = "aws-kms"):
        self.node_name = node_name

    def report_error(self, message: str, msg: Optional[Dict[str, Any]] = None) -> None:
        msg_id = (msg or {}).get("_msgid")
        suffix = f" (msg {msg_id})" if msg_id else ""
        logger.error(f"{self.node_name}: {message}{suffix}")
