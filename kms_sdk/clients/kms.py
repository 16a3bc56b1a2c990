"""AWS KMS client handle and the service configuration that owns it.

Lifecycle rules:

- ``region`` and the auth mode are fixed when a KMSServiceConfig is
  created. Changing either one means creating a new config, and with it a
  new client handle.
- Under AmbientRole a single KMSClient is built lazily and shared by every
  request until the config is closed. boto3 clients are thread safe, so
  concurrent requests can use it at the same time.
- Under ExplicitKeys the key material is resolved on every request and a
  lightweight KMSClient is built for that request and closed when it
  finishes. Rotating a flow variable therefore takes effect on the next
  call without reconfiguration.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import ValidationError

from kms_sdk.clients import ClientInterface
from kms_sdk.clients.models import DataKey, KMSConfigNodeModel
from kms_sdk.common.aws_utils import (
    build_botocore_config,
    create_boto3_client,
    get_default_region,
    validate_aws_region,
)
from kms_sdk.common.error_codes import CLIENT_ERRORS
from kms_sdk.common.exceptions import ClientInitError
from kms_sdk.common.utils import run_sync
from kms_sdk.constants import DEFAULT_KEY_SPEC, KMS_SERVICE_NAME
from kms_sdk.credentials.context import ExecutionContext
from kms_sdk.credentials.exceptions import (
    InvalidSourceKindError,
    MissingCredentialsError,
    ResolutionError,
)
from kms_sdk.credentials.handle import (
    ACCESS_KEY_ID,
    SECRET_ACCESS_KEY,
    SESSION_TOKEN,
    CredentialHandle,
)
from kms_sdk.credentials.resolver import CredentialResolver
from kms_sdk.credentials.types import (
    AmbientRole,
    AuthMode,
    CredentialReference,
    CredentialSourceKind,
    ExplicitKeys,
)
from kms_sdk.handlers.exceptions import RemoteServiceError
from kms_sdk.observability.logger_adaptor import get_logger

logger = get_logger(__name__)

ACCESS_KEY_ID_LABEL = "Access Key ID"
SECRET_ACCESS_KEY_LABEL = "Secret Access Key"
SESSION_TOKEN_LABEL = "Session Token"


class KMSClient(ClientInterface):
    """
    Async wrapper around a boto3 KMS client bound to one region.

    The blocking boto3 calls run in the shared thread pool, so the remote
    round trip is the only point where a request suspends.

    Attributes:
        region (str): AWS region of the client.
        credentials (Optional[CredentialHandle]): Explicit key material, or
            None to rely on the environment's identity.
    """

    def __init__(self, region: str, credentials: Optional[CredentialHandle] = None):
        super().__init__()
        self.region = validate_aws_region(region)
        self.credentials = credentials
        self._client: Optional[Any] = None

    @property
    def is_loaded(self) -> bool:
        return self._client is not None

    async def load(self) -> None:
        """
        Build the underlying boto3 client. Calling it again is a no-op.

        Raises:
            ClientInitError: If boto3 rejects the configuration.
        """
        if self._client is not None:
            return

        client_kwargs: Dict[str, Any] = {}
        if self.credentials is not None:
            client_kwargs["aws_access_key_id"] = self.credentials.get(ACCESS_KEY_ID)
            client_kwargs["aws_secret_access_key"] = self.credentials.get(
                SECRET_ACCESS_KEY
            )
            client_kwargs["aws_session_token"] = self.credentials.get(SESSION_TOKEN)

        try:
            self._client = create_boto3_client(
                KMS_SERVICE_NAME,
                region_name=self.region,
                config=build_botocore_config(),
                **client_kwargs,
            )
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to create KMS client in {self.region}: {str(e)}")
            raise ClientInitError(f"Failed to create KMS client: {str(e)}") from e

        logger.debug(
            f"KMS client created in {self.region} "
            f"({'explicit keys' if self.credentials is not None else 'ambient role'})"
        )

    async def encrypt(self, key_id: str, plaintext: bytes) -> bytes:
        """
        Encrypt plaintext under a KMS key.

        Args:
            key_id (str): Key ID, ARN or alias of the KMS key.
            plaintext (bytes): Data to encrypt.

        Returns:
            bytes: The ciphertext blob.

        Raises:
            RemoteServiceError: If the KMS call fails.
        """
        response = await self._call(
            "Encrypt", "encrypt", KeyId=key_id, Plaintext=plaintext
        )
        return bytes(response["CiphertextBlob"])

    async def decrypt(self, ciphertext: bytes) -> bytes:
        """
        Decrypt a ciphertext blob. KMS derives the key from the blob's metadata.

        Raises:
            RemoteServiceError: If the KMS call fails.
        """
        response = await self._call("Decrypt", "decrypt", CiphertextBlob=ciphertext)
        return bytes(response["Plaintext"])

    async def generate_data_key(
        self, key_id: str, key_spec: str = DEFAULT_KEY_SPEC
    ) -> DataKey:
        """
        Generate a data key for envelope encryption.

        Args:
            key_id (str): KMS key that encrypts the data key.
            key_spec (str): Data key spec, ``AES_256`` or ``AES_128``.

        Returns:
            DataKey: The plaintext key, its encrypted form and the key ID reported by KMS.

        Raises:
            RemoteServiceError: If the KMS call fails.
        """
        response = await self._call(
            "GenerateDataKey", "generate_data_key", KeyId=key_id, KeySpec=key_spec
        )
        return DataKey(
            plaintext=bytes(response["Plaintext"]),
            ciphertext=bytes(response["CiphertextBlob"]),
            key_id=response.get("KeyId") or key_id,
        )

    async def _call(self, api_name: str, method_name: str, **params: Any) -> Dict[str, Any]:
        if self._client is None:
            await self.load()

        method = getattr(self._client, method_name)
        try:
            return await run_sync(method)(**params)
        except ClientError as e:
            error = e.response.get("Error", {})
            message = error.get("Message") or str(e)
            logger.error(f"KMS {api_name} failed: {error.get('Code', '')} {message}")
            raise RemoteServiceError(
                message, operation=api_name, service_error_code=error.get("Code", "")
            ) from e
        except Exception as e:
            logger.error(f"KMS {api_name} failed: {str(e)}")
            raise RemoteServiceError(str(e), operation=api_name) from e

    async def close(self) -> None:
        """Release the boto3 client and its connection pool. Safe to call repeatedly."""
        client, self._client = self._client, None
        if client is None:
            return
        close = getattr(client, "close", None)
        if callable(close):
            close()


class KMSServiceConfig:
    """
    Region and auth mode shared by every KMS node that references it.

    The config is read-only after construction. Credential values under
    ExplicitKeys are resolved fresh on every call; nothing resolved is
    stored on the config.

    Example:
        >>> config = KMSServiceConfig(
        ...     region="eu-central-1",
        ...     auth_mode=ExplicitKeys(
        ...         access_key_id=CredentialReference.literal("AKIA..."),
        ...         secret_access_key=CredentialReference(CredentialSourceKind.FLOW, "aws.secret"),
        ...     ),
        ... )
        >>> credentials = config.resolve_credentials(context)
        >>> async with config.acquire_client(credentials) as client:
        ...     ciphertext = await client.encrypt("alias/app", b"hello")
    """

    def __init__(
        self,
        region: str,
        auth_mode: Optional[AuthMode] = None,
        name: str = "AWS KMS Config",
    ):
        self.name = name
        self.region = validate_aws_region(region)
        if auth_mode is None:
            auth_mode = AmbientRole()
        if not isinstance(auth_mode, (AmbientRole, ExplicitKeys)):
            raise ClientInitError(
                f"Unsupported auth mode: {type(auth_mode).__name__}",
                error_code=CLIENT_ERRORS["CLIENT_CONFIG_ERROR"],
            )
        self.auth_mode = auth_mode
        self._shared_client: Optional[KMSClient] = None
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    def from_node_config(
        cls,
        config: Dict[str, Any],
        credentials: Optional[Dict[str, Any]] = None,
        env: Optional[Dict[str, str]] = None,
    ) -> "KMSServiceConfig":
        """
        Build a service config from the flow editor's flat configuration.

        Args:
            config: Node configuration (``region``, ``useIAMRole``,
                ``accessKeyIdType``, ``accessKeyIdContext``, ...).
            credentials: The node's credentials store holding literal
                (``str``) values: ``accessKeyId``, ``secretAccessKey`` and
                optionally ``sessionToken``.
            env: Environment used for the default region; the process
                environment when omitted.

        Returns:
            KMSServiceConfig: The validated config.

        Raises:
            ClientInitError: If the region or a credential source type is invalid.
        """
        credentials = credentials or {}
        try:
            model = KMSConfigNodeModel.model_validate(config or {})
        except ValidationError as e:
            raise ClientInitError(
                f"Invalid KMS config: {str(e)}",
                error_code=CLIENT_ERRORS["CLIENT_CONFIG_ERROR"],
            ) from e

        region = model.region or get_default_region(env)

        if model.use_iam_role:
            return cls(region=region, auth_mode=AmbientRole(), name=model.name)

        try:
            access_key_id = _reference_from_config(
                model.access_key_id_type,
                model.access_key_id_context,
                credentials.get("accessKeyId"),
            )
            secret_access_key = _reference_from_config(
                model.secret_access_key_type,
                model.secret_access_key_context,
                credentials.get("secretAccessKey"),
            )
            session_token = None
            if model.session_token_type or credentials.get("sessionToken"):
                session_token = _reference_from_config(
                    model.session_token_type,
                    model.session_token_context,
                    credentials.get("sessionToken"),
                )
        except InvalidSourceKindError as e:
            raise ClientInitError(
                str(e), error_code=CLIENT_ERRORS["CLIENT_CONFIG_ERROR"]
            ) from e

        return cls(
            region=region,
            auth_mode=ExplicitKeys(
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
            ),
            name=model.name,
        )

    @property
    def uses_ambient_role(self) -> bool:
        return isinstance(self.auth_mode, AmbientRole)

    @property
    def is_closed(self) -> bool:
        return self._closed

    def resolve_credentials(
        self, context: ExecutionContext
    ) -> Optional[CredentialHandle]:
        """
        Resolve the explicit key material for one request.

        Returns:
            Optional[CredentialHandle]: None under AmbientRole (the resolver
            is not called at all), otherwise the resolved keys.

        Raises:
            MissingCredentialsError: If the access key and/or secret resolve
                to nothing. Raised before any client is built.
            ResolutionError: If a context lookup fails or a value is not a string.
        """
        if isinstance(self.auth_mode, AmbientRole):
            return None

        access_key_id = self._resolve_field(
            self.auth_mode.access_key_id, ACCESS_KEY_ID_LABEL, context
        )
        secret_access_key = self._resolve_field(
            self.auth_mode.secret_access_key, SECRET_ACCESS_KEY_LABEL, context
        )

        missing_fields = []
        if not access_key_id:
            missing_fields.append(ACCESS_KEY_ID_LABEL)
        if not secret_access_key:
            missing_fields.append(SECRET_ACCESS_KEY_LABEL)
        if missing_fields:
            logger.error(
                f"{self.name}: missing required credentials: {', '.join(missing_fields)}"
            )
            raise MissingCredentialsError(missing_fields)

        session_token = None
        if self.auth_mode.session_token is not None:
            session_token = self._resolve_field(
                self.auth_mode.session_token, SESSION_TOKEN_LABEL, context
            )

        return CredentialHandle(
            {
                ACCESS_KEY_ID: access_key_id,
                SECRET_ACCESS_KEY: secret_access_key,
                SESSION_TOKEN: session_token or None,
            },
            source="explicit_keys",
        )

    @staticmethod
    def _resolve_field(
        reference: CredentialReference, label: str, context: ExecutionContext
    ) -> Optional[str]:
        value = CredentialResolver.resolve(reference, context)
        if value is not None and not isinstance(value, str):
            raise ResolutionError(
                f"{label} must resolve to a string, got {type(value).__name__}"
            )
        return value

    @asynccontextmanager
    async def acquire_client(
        self, credentials: Optional[CredentialHandle] = None
    ) -> AsyncIterator[KMSClient]:
        """
        Client for one request.

        Under AmbientRole the shared client is yielded and stays open. Under
        ExplicitKeys a client is built from ``credentials`` and closed when
        the block exits.

        Raises:
            ClientInitError: If the config is closed, explicit keys were not
                resolved, or the client cannot be built.
        """
        if self._closed:
            raise ClientInitError(f"{self.name} has been closed")

        if isinstance(self.auth_mode, AmbientRole):
            yield await self._get_shared_client()
            return

        if credentials is None:
            raise ClientInitError(
                f"{self.name} uses explicit keys but no credentials were resolved"
            )

        client = KMSClient(self.region, credentials)
        await client.load()
        try:
            yield client
        finally:
            await client.close()

    async def _get_shared_client(self) -> KMSClient:
        async with self._lock:
            if self._shared_client is None:
                client = KMSClient(self.region)
                await client.load()
                self._shared_client = client
            return self._shared_client

    async def close(self) -> None:
        """Release the shared client. Safe to call even if it was never built."""
        self._closed = True
        client, self._shared_client = self._shared_client, None
        if client is not None:
            await client.close()
            logger.info(f"{self.name}: KMS client released")


def _reference_from_config(
    source_type: Optional[str],
    context_path: Optional[str],
    literal_value: Optional[str],
) -> CredentialReference:
    """Literal values come from the credentials store, others from the ``*Context`` field."""
    source_kind = CredentialSourceKind.parse(source_type)
    if source_kind is CredentialSourceKind.LITERAL:
        return CredentialReference.literal(literal_value)
    return CredentialReference(source_kind, context_path)
