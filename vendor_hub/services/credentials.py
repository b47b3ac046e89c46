"""Organization-facing credential workflow on top of the credential store.

Adds what the settings form needs around CredentialStore.save / load:
  - masked values echoed back by the form keep the stored value
  - secret fields are masked in every response
  - each save and read leaves an audit_trail row listing key names only
"""


import re
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.config import settings
from vendor_hub.core.exceptions import CredentialsNotFound
from vendor_hub.domain.vendor_instance import VendorInstance
from vendor_hub.repositories.credential import AuditRepository
from vendor_hub.schemas.credential import CredentialField, CredentialSaveOut, CredentialsOut
from vendor_hub.services.credential_schema import parse_fields
from vendor_hub.services.credential_store import CredentialStore, DualShapeCredentialStore
from vendor_hub.services.vendor_instance import VendorInstanceService

# Undeclared keys that still look like secrets
_SECRET_KEY_HINT = re.compile(r"password|secret|token|key", re.IGNORECASE)


def mask_value(value: Any) -> Any:
    if value is None or value == "":
        return value
    return settings.credential_mask_char * 8


def is_masked(value: Any) -> bool:
    return isinstance(value, str) and value.startswith(settings.credential_mask_char)


def mask_credentials(payload: dict[str, Any], fields: list[CredentialField]) -> dict[str, Any]:
    declared = {f.name: f for f in fields}
    for field in fields:
        for alias in field.aliases:
            declared.setdefault(alias, field)

    masked: dict[str, Any] = {}
    for key, value in payload.items():
        field = declared.get(key)
        secret = field.is_secret if field else bool(_SECRET_KEY_HINT.search(key))
        masked[key] = mask_value(value) if secret else value
    return masked


def merge_submitted(submitted: dict[str, Any], stored: dict[str, Any]) -> dict[str, Any]:
    """Overlay a submitted form on the stored payload.

    Blank or masked submitted values keep what is stored; keys the form did
    not send are carried over unchanged.
    """
    merged = dict(stored)
    for key, value in submitted.items():
        if is_masked(value):
            continue
        if (value is None or value == "") and key in stored:
            continue
        merged[key] = value
    return merged


class CredentialService:
    def __init__(
        self,
        session: AsyncSession,
        organization_id: int,
        store: CredentialStore | None = None,
    ):
        self._organization_id = organization_id
        self._instances = VendorInstanceService(session, organization_id)
        self._store = store or DualShapeCredentialStore(session)
        self._audit = AuditRepository(session, organization_id)

    async def _stored(self, instance: VendorInstance) -> dict[str, Any]:
        try:
            return await self._store.load(self._organization_id, instance.supported_vendor_type_id)
        except CredentialsNotFound:
            return {}

    async def get_credentials(self, identifier: str, user_id: str | None = None) -> CredentialsOut:
        instance = await self.get_instance(identifier)
        payload = await self._store.load(self._organization_id, instance.supported_vendor_type_id)
        fields = parse_fields(instance.vendor_type.credential_fields)

        await self._audit.record(
            user_id=user_id,
            action="credentials.viewed",
            entity_type="vendor_instance",
            entity_id=str(instance.id),
            new_value={"keys": sorted(payload)},
        )
        return CredentialsOut(
            vendor_slug=instance.vendor_slug,
            instance_slug=instance.instance_slug,
            credentials=mask_credentials(payload, fields),
        )

    async def save_credentials(
        self, identifier: str, submitted: dict[str, Any], user_id: str | None = None
    ) -> CredentialSaveOut:
        instance = await self.get_instance(identifier)
        stored = await self._stored(instance)
        payload = merge_submitted(submitted, stored)

        result = await self._store.save(
            self._organization_id, instance.supported_vendor_type_id, payload
        )
        await self._audit.record(
            user_id=user_id,
            action="credentials.updated",
            entity_type="vendor_instance",
            entity_id=str(instance.id),
            old_value={"keys": sorted(stored)},
            new_value={"keys": result.saved_keys},
            description=f"Updated credentials for {instance.vendor_slug}",
        )
        # result.mismatch is already logged as an event; callers never see it
        return CredentialSaveOut(
            vendor_slug=instance.vendor_slug,
            saved_keys=result.saved_keys,
            legacy_columns=result.legacy_columns,
        )

    async def get_instance(self, identifier: str) -> VendorInstance:
        return await self._instances.get_by_identifier(identifier)
