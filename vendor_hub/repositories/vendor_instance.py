"""Per-organization vendor instance repository."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from vendor_hub.domain.vendor_instance import VendorInstance
from vendor_hub.repositories.base import TenantRepository
from vendor_hub.repositories.guards import immutable_fields


class VendorInstanceRepository(TenantRepository[VendorInstance]):
    model = VendorInstance

    async def list_active(self) -> list[VendorInstance]:
        result = await self._session.execute(
            self._base_query().order_by(
                VendorInstance.supported_vendor_type_id.asc(), VendorInstance.id.asc()
            )
        )
        return list(result.scalars().all())

    async def count_active(self) -> int:
        return len(await self.list_active())

    async def list_for_type(
        self, vendor_type_id: int, *, include_removed: bool = False
    ) -> list[VendorInstance]:
        q = self._scope(select(VendorInstance)) if include_removed else self._base_query()
        result = await self._session.execute(
            q.where(VendorInstance.supported_vendor_type_id == vendor_type_id)
            .order_by(VendorInstance.id.asc())
        )
        return list(result.scalars().all())

    async def taken_instance_slugs(self) -> set[str]:
        """Every slug the organization ever used, soft-removed instances included."""
        result = await self._session.execute(
            self._scope(select(VendorInstance.instance_slug))
        )
        return set(result.scalars().all())

    async def get_by_instance_slug(self, instance_slug: str) -> VendorInstance | None:
        result = await self._session.execute(
            self._base_query().where(VendorInstance.instance_slug == instance_slug)
        )
        return result.scalars().first()

    async def get_first_by_vendor_slug(self, vendor_slug: str) -> VendorInstance | None:
        result = await self._session.execute(
            self._base_query()
            .where(VendorInstance.vendor_slug == vendor_slug)
            .order_by(VendorInstance.id.asc())
        )
        return result.scalars().first()

    @immutable_fields("vendor_slug", "instance_slug", "supported_vendor_type_id")
    async def update(self, entity_id: int, **kwargs: Any) -> VendorInstance | None:
        return await super().update(entity_id, **kwargs)
