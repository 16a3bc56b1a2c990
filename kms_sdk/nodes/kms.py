"""KMS operation node.

The node is the request boundary: every inbound message yields exactly one
status update before work starts, exactly one status update when it ends
and exactly one outbound message, whether the operation succeeded or not.
Failures are sent downstream as ``{"error": message}`` instead of being
dropped, so consumers always get a deterministic response.
"""

import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from pydantic import ValidationError

from kms_sdk.clients.kms import KMSServiceConfig
from kms_sdk.common.error_codes import CLIENT_ERRORS
from kms_sdk.common.exceptions import ClientInitError, KMSSDKError
from kms_sdk.credentials.context import ExecutionContext
from kms_sdk.credentials.exceptions import InvalidSourceKindError, ResolutionError
from kms_sdk.credentials.types import CredentialReference, CredentialSourceKind
from kms_sdk.handlers.kms import KMSOperationHandler, build_request
from kms_sdk.handlers.models import OperationResult, RequestState
from kms_sdk.interfaces.host import (
    ErrorReporter,
    LoggingErrorReporter,
    LoggingStatusSink,
    NodeStatus,
    StatusSink,
)
from kms_sdk.nodes.models import KMSNodeModel
from kms_sdk.observability.logger_adaptor import get_logger

logger = get_logger(__name__)

SendCallable = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]

_KEY_ID_LOOKUPS: Dict[CredentialSourceKind, Callable[[ExecutionContext, str], Any]] = {
    CredentialSourceKind.LITERAL: lambda context, path: path,
    CredentialSourceKind.FLOW: lambda context, path: context.get_flow_value(path),
    CredentialSourceKind.GLOBAL: lambda context, path: context.get_global_value(path),
    CredentialSourceKind.ENV: lambda context, path: context.get_env_var(path),
    CredentialSourceKind.MSG: lambda context, path: context.get_message_field(path),
}


class KMSNode:
    """
    Performs one KMS operation per inbound message.

    Args:
        service_config: The shared KMS service config. Required.
        operation: ``encrypt``, ``decrypt`` or ``generateDataKey``. Unknown
            names are reported per message as an unsupported operation.
        key_id: Where the KMS key ID comes from. A ``keyId`` field on the
            inbound message overrides it for that message only.
        status_sink: The host's status indicator.
        error_reporter: The host's operator-visible error channel.
        name: Node name used in logs.

    Raises:
        ClientInitError: If no service config is given. The node never
            becomes ready in that case.
    """

    def __init__(
        self,
        service_config: Optional[KMSServiceConfig],
        operation: str,
        key_id: Optional[CredentialReference] = None,
        status_sink: Optional[StatusSink] = None,
        error_reporter: Optional[ErrorReporter] = None,
        name: str = "aws-kms",
        handler: Optional[KMSOperationHandler] = None,
    ):
        if service_config is None:
            logger.error(f"{name}: AWS KMS configuration not found.")
            raise ClientInitError("AWS KMS configuration not found.")

        self.name = name
        self.service_config = service_config
        self.operation = operation
        self.key_id = key_id
        self.handler = handler or KMSOperationHandler()
        self._status = status_sink or LoggingStatusSink(name)
        self._error_reporter = error_reporter or LoggingErrorReporter(name)

        # Clear status on deploy
        self._status.clear_status()

    @classmethod
    def from_node_config(
        cls,
        config: Dict[str, Any],
        service_config: Optional[KMSServiceConfig],
        status_sink: Optional[StatusSink] = None,
        error_reporter: Optional[ErrorReporter] = None,
    ) -> "KMSNode":
        """
        Build a node from the flow editor's flat configuration
        (``name``, ``operation``, ``keyId``, ``keyIdType``).

        Raises:
            ClientInitError: If the config is malformed, names an unknown key
                ID source type, or no service config is given.
        """
        try:
            model = KMSNodeModel.model_validate(config or {})
            key_id = None
            if model.key_id:
                key_id = CredentialReference.from_config(model.key_id_type, model.key_id)
        except (ValidationError, InvalidSourceKindError) as e:
            raise ClientInitError(
                f"Invalid KMS node config: {str(e)}",
                error_code=CLIENT_ERRORS["CLIENT_CONFIG_ERROR"],
            ) from e

        return cls(
            service_config=service_config,
            operation=model.operation,
            key_id=key_id,
            status_sink=status_sink,
            error_reporter=error_reporter,
            name=model.name,
        )

    def resolve_key_id(self, context: ExecutionContext) -> Optional[str]:
        """
        The configured key ID for this message, before any ``keyId`` override.

        The key ID is not a credential: it is read with a plain context lookup
        and never goes through the CredentialResolver. Flow and global keys are
        read directly, message paths may be nested.

        Raises:
            ResolutionError: If the lookup fails or the value is not a string.
        """
        if self.key_id is None or not self.key_id.path:
            return None

        kind, path = self.key_id.source_kind, self.key_id.path
        try:
            value = _KEY_ID_LOOKUPS[kind](context, path)
        except Exception as e:
            raise ResolutionError(
                f"Failed to get value for type: {kind.value}, value: {path}. Error: {str(e)}"
            ) from e
        if value is not None and not isinstance(value, str):
            raise ResolutionError(
                f"Key ID must resolve to a string, got {type(value).__name__}"
            )
        return value

    async def handle_input(
        self, context: ExecutionContext, send: SendCallable
    ) -> OperationResult:
        """
        Process one inbound message.

        Args:
            context: Execution context of the message; ``context.message``
                is the inbound message.
            send: Host callback that emits the outbound message. May be
                sync or async.

        Returns:
            OperationResult: The single result produced for the message.
        """
        message = context.message
        state = RequestState.IDLE
        self._status.set_status(NodeStatus.PROCESSING, f"{self.operation}...")

        try:
            request = build_request(message, self.operation, self.resolve_key_id(context))
            prepared = self.handler.prepare(request)

            state = self._transition(state, RequestState.RESOLVING_CREDENTIALS, message)
            credentials = self.service_config.resolve_credentials(context)

            state = self._transition(state, RequestState.BUILDING_CLIENT, message)
            async with self.service_config.acquire_client(credentials) as client:
                state = self._transition(state, RequestState.INVOKING_REMOTE, message)
                payload = await self.handler.invoke(prepared, client)

            result = OperationResult.succeeded(payload)
            state = self._transition(state, RequestState.SUCCEEDED, message)
            self._status.set_status(NodeStatus.OK, f"{self.operation} completed")
        except KMSSDKError as e:
            logger.error(f"{self.name}: {e.error_code.code} {e.message}")
            result = self._fail(e.message, message)
            state = self._transition(state, RequestState.FAILED, message)
        except Exception as e:
            logger.exception(f"{self.name}: unexpected error during {self.operation}")
            result = self._fail(str(e) or type(e).__name__, message)
            state = self._transition(state, RequestState.FAILED, message)

        await self._emit(send, {**message, "payload": result.to_payload()})
        return result

    def _fail(self, error_message: str, message: Dict[str, Any]) -> OperationResult:
        self._error_reporter.report_error(error_message, message)
        self._status.set_status(NodeStatus.ERROR, error_message)
        return OperationResult.failed(error_message)

    def _transition(
        self, current: RequestState, target: RequestState, message: Dict[str, Any]
    ) -> RequestState:
        logger.debug(
            f"{self.name} [{message.get('_msgid', '-')}]: {current.value} -> {target.value}"
        )
        return target

    async def _emit(self, send: SendCallable, outbound: Dict[str, Any]) -> None:
        try:
            sent = send(outbound)
            if inspect.isawaitable(sent):
                await sent
        except Exception as e:
            # The result was produced; a failing downstream must not trigger a second send
            logger.error(f"{self.name}: failed to send result: {str(e)}")
            self._error_reporter.report_error(
                f"Failed to send result: {str(e)}", outbound
            )
