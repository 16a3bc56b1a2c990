"""In-memory stand-in for a boto3 KMS client.

``FakeKMSBackend`` answers ``encrypt``, ``decrypt`` and ``generate_data_key``
with the same keyword arguments and response shapes as boto3, so it can be
returned from a patched ``create_boto3_client``. Ciphertext blobs embed the
key ID, which makes decrypt independent of the caller, like real KMS.
"""

import os
from typing import Any, Dict, List, Optional, Tuple

from botocore.exceptions import ClientError

_BLOB_SEPARATOR = b"::"
_KEY_SPEC_LENGTHS = {"AES_256": 32, "AES_128": 16}


class FakeKMSBackend:
    """Reversible fake KMS that records every call.

    Attributes:
        calls: ``(method, kwargs)`` for every call received, in order.
        closed: True once ``close`` was called.
        fail_with: When set, every call raises a ``ClientError`` with this code.
    """

    def __init__(self, fail_with: Optional[str] = None):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False
        self.fail_with = fail_with

    def _record(self, method: str, kwargs: Dict[str, Any]) -> None:
        self.calls.append((method, dict(kwargs)))
        if self.fail_with:
            raise ClientError(
                {"Error": {"Code": self.fail_with, "Message": f"{self.fail_with} raised"}},
                method,
            )

    def _seal(self, key_id: str, plaintext: bytes) -> bytes:
        return key_id.encode("utf-8") + _BLOB_SEPARATOR + plaintext[::-1]

    def encrypt(self, KeyId: str, Plaintext: bytes, **kwargs: Any) -> Dict[str, Any]:
        self._record("encrypt", {"KeyId": KeyId, "Plaintext": Plaintext, **kwargs})
        return {"CiphertextBlob": self._seal(KeyId, Plaintext), "KeyId": KeyId}

    def decrypt(self, CiphertextBlob: bytes, **kwargs: Any) -> Dict[str, Any]:
        self._record("decrypt", {"CiphertextBlob": CiphertextBlob, **kwargs})
        key_id, separator, sealed = CiphertextBlob.partition(_BLOB_SEPARATOR)
        if not separator:
            raise ClientError(
                {
                    "Error": {
                        "Code": "InvalidCiphertextException",
                        "Message": "The ciphertext is invalid",
                    }
                },
                "Decrypt",
            )
        return {"Plaintext": sealed[::-1], "KeyId": key_id.decode("utf-8")}

    def generate_data_key(
        self, KeyId: str, KeySpec: str = "AES_256", **kwargs: Any
    ) -> Dict[str, Any]:
        self._record("generate_data_key", {"KeyId": KeyId, "KeySpec": KeySpec, **kwargs})
        plaintext = os.urandom(_KEY_SPEC_LENGTHS.get(KeySpec, 32))
        return {
            "Plaintext": plaintext,
            "CiphertextBlob": self._seal(KeyId, plaintext),
            "KeyId": f"arn:aws:kms:eu-central-1:111122223333:key/{KeyId}",
        }

    def close(self) -> None:
        self.closed = True

