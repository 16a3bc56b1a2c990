from dataclasses import dataclass
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


@dataclass(frozen=True)
class DataKey:
    """Data key returned by GenerateDataKey.

    Attributes:
        plaintext: The raw symmetric key, for local envelope encryption.
        ciphertext: The same key encrypted under the KMS key.
        key_id: The KMS key that encrypted the data key, as reported by KMS.
    """

    plaintext: bytes
    ciphertext: bytes
    key_id: str

    def __repr__(self) -> str:
        return f"DataKey(key_id={self.key_id!r}, plaintext=<redacted>, ciphertext=<{len(self.ciphertext)} bytes>)"


class KMSConfigNodeModel(BaseModel):
    """Flat configuration of a KMS config node, as stored by the flow editor.

    Literal (``str``) credentials are not part of this model; they live in
    the node's separate credentials store.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = "AWS KMS Config"
    region: Optional[str] = None
    use_iam_role: bool = Field(default=False, alias="useIAMRole")
    access_key_id_type: str = Field(default="str", alias="accessKeyIdType")
    access_key_id_context: Optional[str] = Field(
        default=None, alias="accessKeyIdContext"
    )
    secret_access_key_type: str = Field(default="str", alias="secretAccessKeyType")
    secret_access_key_context: Optional[str] = Field(
        default=None, alias="secretAccessKeyContext"
    )
    session_token_type: Optional[str] = Field(default=None, alias="sessionTokenType")
    session_token_context: Optional[str] = Field(
        default=None, alias="sessionTokenContext"
    )

    @field_validator("use_iam_role", mode="before")
    @classmethod
    def parse_use_iam_role(cls, value: Any) -> bool:
        # Only explicit truthy markers enable the ambient role
        return value is True or value == "true" or (
            isinstance(value, int) and not isinstance(value, bool) and value == 1
        )

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, value: Any) -> str:
        return value or "AWS KMS Config"

    @field_validator(
        "access_key_id_type", "secret_access_key_type", mode="before"
    )
    @classmethod
    def default_source_type(cls, value: Any) -> str:
        return value or "str"
