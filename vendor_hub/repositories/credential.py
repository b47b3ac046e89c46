"""Row access for vendor_credentials and the audit trail.

The repository only moves rows; deciding which column group a key belongs to
is the credential store's job (services.credential_store).
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import or_, select, update

from vendor_hub.domain.audit import AuditTrail
from vendor_hub.domain.credential import VendorCredentialRecord
from vendor_hub.repositories.base import BaseRepository, TenantRepository


class CredentialRecordRepository(TenantRepository[VendorCredentialRecord]):
    model = VendorCredentialRecord

    async def get_for_type(self, vendor_type_id: int) -> VendorCredentialRecord | None:
        result = await self._session.execute(
            self._base_query()
            .where(VendorCredentialRecord.supported_vendor_type_id == vendor_type_id)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_or_create(self, vendor_type_id: int) -> VendorCredentialRecord:
        record = await self.get_for_type(vendor_type_id)
        if record is None:
            record = await self.create(supported_vendor_type_id=vendor_type_id)
        return record

    async def write_columns(self, record_id: int, values: dict[str, Any]) -> None:
        """Single UPDATE of the given columns on one row."""
        values = {**values, "updated_at": datetime.now(timezone.utc)}
        await self._session.execute(
            self._scope(update(VendorCredentialRecord))
            .where(VendorCredentialRecord.id == record_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self._session.flush()


class FleetCredentialRepository(BaseRepository[VendorCredentialRecord]):
    """Cross-organization operational queries (admin / monitoring only)."""

    model = VendorCredentialRecord

    async def list_failed_syncs(self) -> list[VendorCredentialRecord]:
        result = await self._session.execute(
            select(VendorCredentialRecord)
            .where(
                or_(
                    VendorCredentialRecord.catalog_sync_status == "error",
                    VendorCredentialRecord.inventory_sync_status == "error",
                )
            )
            .order_by(VendorCredentialRecord.organization_id, VendorCredentialRecord.id)
        )
        return list(result.scalars().all())

    async def list_legacy_only(self) -> list[VendorCredentialRecord]:
        """Rows written before the document column existed."""
        result = await self._session.execute(
            select(VendorCredentialRecord)
            .where(VendorCredentialRecord.credentials.is_(None))
            .order_by(VendorCredentialRecord.id)
        )
        return list(result.scalars().all())


class AuditRepository(TenantRepository[AuditTrail]):
    model = AuditTrail

    async def record(self, **kwargs: Any) -> AuditTrail:
        entry = AuditTrail(organization_id=self._organization_id, **kwargs)
        self._session.add(entry)
        await self._session.flush()
        return entry
