"""Credential schema declarations and credential request/response DTOs."""


from typing import Any, Literal

from pydantic import Field

from vendor_hub.schemas.common import CamelModel

CredentialFieldType = Literal[
    "text",
    "password",
    "email",
    "url",
    "number",
    "apiKey",
    "secret",
    "token",
    "certificate",
    "privateKey",
]

# Field types whose values are masked in every response
SECRET_FIELD_TYPES: frozenset[str] = frozenset(
    {"password", "apiKey", "secret", "token", "certificate", "privateKey"}
)


class CredentialFieldValidation(CamelModel):
    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None


class CredentialField(CamelModel):
    """One entry of a vendor type's declared credential schema."""

    name: str
    label: str
    type: CredentialFieldType = "text"
    required: bool = False
    aliases: list[str] = Field(default_factory=list)
    placeholder: str | None = None
    description: str | None = None
    validation: CredentialFieldValidation | None = None

    @property
    def is_secret(self) -> bool:
        return self.type in SECRET_FIELD_TYPES


class CredentialsIn(CamelModel):
    """PUT body: credential keys are passed through untouched (no camelCase mapping)."""

    credentials: dict[str, Any]


class CredentialsOut(CamelModel):
    vendor_slug: str
    instance_slug: str
    credentials: dict[str, Any]


class CredentialSaveOut(CamelModel):
    vendor_slug: str
    saved_keys: list[str]
    legacy_columns: list[str]
