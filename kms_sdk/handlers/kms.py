"""Dispatch of KMS operations.

``prepare`` validates a request and converts its payload without touching
the network, so a missing key ID or malformed ciphertext fails before any
credential is resolved or client is built. ``invoke`` performs exactly one
remote call and shapes the output payload.

Output payloads:

- encrypt: ``{"ciphertext": <base64>, "keyId": <key id>}``
- decrypt: ``{"plaintext": <utf-8 text>}``
- generateDataKey: ``{"plaintextKey": <base64>, "encryptedKey": <base64>, "keyId": <key id>}``
"""

from typing import Any, Dict, Optional

from kms_sdk.clients.kms import KMSClient
from kms_sdk.common.encoding import (
    b64encode_text,
    decode_plaintext,
    to_ciphertext_bytes,
    to_plaintext_bytes,
)
from kms_sdk.constants import DEFAULT_KEY_SPEC
from kms_sdk.handlers import OperationHandlerInterface
from kms_sdk.handlers.exceptions import MissingKeyIdError
from kms_sdk.handlers.models import (
    KMSOperation,
    OperationRequest,
    PreparedOperation,
)


def _payload_field(payload: Any, field: str) -> Any:
    """``payload[field]`` when payload is a mapping holding a truthy value, else the payload itself."""
    if isinstance(payload, dict) and payload.get(field):
        return payload[field]
    return payload


class KMSOperationHandler(OperationHandlerInterface):
    """
    Turns an OperationRequest into exactly one KMS call.

    The handler is stateless and can be shared by concurrent requests.
    """

    def prepare(self, request: OperationRequest) -> PreparedOperation:
        """
        Validate a request and convert its payload to bytes.

        Args:
            request (OperationRequest): The request to validate.

        Returns:
            PreparedOperation: The operation ready to be invoked.

        Raises:
            UnsupportedOperationError: If the operation name is unknown.
            MissingKeyIdError: If encrypt or generateDataKey has no key ID.
            InvalidPayloadError: If the payload is empty or of an unsupported type.
            InvalidCiphertextError: If a decrypt payload is not valid base64.
        """
        operation = KMSOperation.parse(request.operation)

        if operation.requires_key_id and not request.key_id:
            raise MissingKeyIdError(
                "Key ID is required for encrypt and generateDataKey operations"
            )

        if operation is KMSOperation.ENCRYPT:
            return PreparedOperation(
                operation=operation,
                key_id=request.key_id,
                data=to_plaintext_bytes(_payload_field(request.payload, "plaintext")),
            )

        if operation is KMSOperation.DECRYPT:
            return PreparedOperation(
                operation=operation,
                key_id=request.key_id,
                data=to_ciphertext_bytes(
                    _payload_field(request.payload, "ciphertext")
                ),
            )

        return PreparedOperation(
            operation=operation,
            key_id=request.key_id,
            key_spec=request.key_spec or DEFAULT_KEY_SPEC,
        )

    async def invoke(
        self, prepared: PreparedOperation, client: KMSClient
    ) -> Dict[str, Any]:
        """
        Perform the remote call for a prepared operation.

        Returns:
            Dict[str, Any]: The operation's output payload.

        Raises:
            RemoteServiceError: If the KMS call fails.
            InvalidPayloadError: If decrypted bytes are not valid UTF-8.
        """
        if prepared.operation is KMSOperation.ENCRYPT:
            ciphertext = await client.encrypt(prepared.key_id, prepared.data)
            return {"ciphertext": b64encode_text(ciphertext), "keyId": prepared.key_id}

        if prepared.operation is KMSOperation.DECRYPT:
            plaintext = await client.decrypt(prepared.data)
            return {"plaintext": decode_plaintext(plaintext)}

        data_key = await client.generate_data_key(prepared.key_id, prepared.key_spec)
        return {
            "plaintextKey": b64encode_text(data_key.plaintext),
            "encryptedKey": b64encode_text(data_key.ciphertext),
            "keyId": data_key.key_id,
        }


def build_request(
    message: Dict[str, Any], operation: str, key_id: Optional[str]
) -> OperationRequest:
    """Request for ``operation`` from an inbound message, with the message's ``keyId`` taking precedence."""
    override = message.get("keyId")
    if isinstance(override, str) and override:
        key_id = override
    return OperationRequest.from_message(message, operation=operation, key_id=key_id)
