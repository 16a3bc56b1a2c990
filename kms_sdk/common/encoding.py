"""Binary/text conversions applied around KMS calls.

Only ciphertext travels as base64. Plaintext strings are UTF-8 encoded and
never base64-decoded.
"""

import base64
import binascii
from typing import Any, Union

from kms_sdk.handlers.exceptions import InvalidCiphertextError, InvalidPayloadError


def is_base64(value: Any) -> bool:
    """True if ``value`` is a canonical, padded base64 string."""
    if not value or not isinstance(value, str):
        return False
    try:
        decoded = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return False
    return base64.b64encode(decoded).decode("ascii") == value


def b64encode_text(data: Union[bytes, bytearray]) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def to_plaintext_bytes(plaintext: Any) -> bytes:
    """
    Normalize an encrypt payload to bytes.

    Raises:
        InvalidPayloadError: If nothing was provided or the type is unsupported.
    """
    if plaintext is None or (isinstance(plaintext, (str, bytes, bytearray)) and not plaintext):
        raise InvalidPayloadError("No plaintext data provided for encryption")
    if isinstance(plaintext, (bytes, bytearray)):
        return bytes(plaintext)
    if isinstance(plaintext, str):
        return plaintext.encode("utf-8")
    raise InvalidPayloadError("Plaintext must be a string or bytes")


def to_ciphertext_bytes(ciphertext: Any) -> bytes:
    """
    Normalize a decrypt payload to the raw ciphertext blob.

    Raises:
        InvalidPayloadError: If nothing was provided.
        InvalidCiphertextError: If a string is not base64 or the type is unsupported.
    """
    if ciphertext is None or (isinstance(ciphertext, (str, bytes, bytearray)) and not ciphertext):
        raise InvalidPayloadError("No ciphertext data provided for decryption")
    if isinstance(ciphertext, (bytes, bytearray)):
        return bytes(ciphertext)
    if isinstance(ciphertext, str):
        if not is_base64(ciphertext):
            raise InvalidCiphertextError("Ciphertext string must be base64 encoded")
        return base64.b64decode(ciphertext)
    raise InvalidCiphertextError("Ciphertext must be a base64 string or bytes")


def decode_plaintext(data: Union[bytes, bytearray]) -> str:
    """
    Decode decrypted bytes as UTF-8 text.

    Raises:
        InvalidPayloadError: If the bytes are not valid UTF-8.
    """
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidPayloadError(
            f"Decrypted plaintext is not valid UTF-8 text: {str(e)}"
        ) from e
