"""Validation of credential payloads against a vendor type's declared fields.

Runs before any storage write; every failure is a SchemaValidationError naming
the offending field so UI callers can show it next to the form input.
"""


import re
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from vendor_hub.core.exceptions import SchemaValidationError
from vendor_hub.schemas.credential import CredentialField

_SCALARS = (str, int, float, bool)


def parse_fields(raw_fields: Iterable[Any] | None) -> list[CredentialField]:
    """Turn the JSON stored on a vendor type into CredentialField models."""
    try:
        return [CredentialField.model_validate(raw) for raw in raw_fields or []]
    except PydanticValidationError as exc:
        raise SchemaValidationError(f"Vendor type declares an invalid credential schema: {exc}")


def _lookup(payload: Mapping[str, Any], field: CredentialField) -> Any:
    for key in (field.name, *field.aliases):
        if payload.get(key) is not None:
            return payload[key]
    return None


def validate_payload(payload: Mapping[str, Any], fields: list[CredentialField]) -> None:
    """Raise SchemaValidationError if ``payload`` does not satisfy ``fields``."""
    if not isinstance(payload, Mapping):
        raise SchemaValidationError("Credentials must be an object of field/value pairs")

    for key, value in payload.items():
        if not isinstance(key, str) or not key:
            raise SchemaValidationError("Credential field names must be non-empty strings")
        if value is not None and not isinstance(value, _SCALARS):
            raise SchemaValidationError(f"{key} must be a plain value", field=key)

    for field in fields:
        value = _lookup(payload, field)
        text = "" if value is None else str(value)

        if field.required and not text.strip():
            raise SchemaValidationError(f"Required field missing: {field.label}", field=field.name)

        rules = field.validation
        if not text or rules is None:
            continue
        if rules.min_length is not None and len(text) < rules.min_length:
            raise SchemaValidationError(
                f"{field.label} must be at least {rules.min_length} characters", field=field.name
            )
        if rules.max_length is not None and len(text) > rules.max_length:
            raise SchemaValidationError(
                f"{field.label} must be no more than {rules.max_length} characters",
                field=field.name,
            )
        if rules.pattern and not re.search(rules.pattern, text):
            raise SchemaValidationError(f"{field.label} format is invalid", field=field.name)
