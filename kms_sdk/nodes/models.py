from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class KMSNodeModel(BaseModel):
    """Flat configuration of a KMS operation node, as stored by the flow editor."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = "aws-kms"
    aws_config: Optional[str] = Field(default=None, alias="awsConfig")
    operation: str = ""
    key_id: Optional[str] = Field(default=None, alias="keyId")
    key_id_type: str = Field(default="str", alias="keyIdType")

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, value: Any) -> str:
        return value or "aws-kms"

    @field_validator("key_id_type", mode="before")
    @classmethod
    def default_key_id_type(cls, value: Any) -> str:
        return value or "str"

    @field_validator("operation", mode="before")
    @classmethod
    def default_operation(cls, value: Any) -> str:
        return "" if value is None else str(value)
