"""Vendor catalog repositories (catalog-wide, not tenant scoped)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import select

from vendor_hub.domain.vendor_type import RetailVertical, SupportedVendorType
from vendor_hub.repositories.base import BaseRepository
from vendor_hub.repositories.guards import immutable_fields


class RetailVerticalRepository(BaseRepository[RetailVertical]):
    model = RetailVertical

    async def get_many(self, ids: Sequence[int]) -> list[RetailVertical]:
        if not ids:
            return []
        result = await self._session.execute(
            select(RetailVertical).where(RetailVertical.id.in_(ids)).order_by(RetailVertical.id)
        )
        return list(result.scalars().all())


class SupportedVendorTypeRepository(BaseRepository[SupportedVendorType]):
    model = SupportedVendorType

    async def get_by_slug(self, vendor_slug: str) -> SupportedVendorType | None:
        result = await self._session.execute(
            select(SupportedVendorType).where(SupportedVendorType.vendor_slug == vendor_slug)
        )
        return result.scalars().first()

    async def slug_taken(self, vendor_slug: str) -> bool:
        """Slugs stay reserved forever, disabled types included."""
        return await self.get_by_slug(vendor_slug) is not None

    async def name_taken(self, name: str) -> bool:
        result = await self._session.execute(
            select(SupportedVendorType.id).where(SupportedVendorType.name == name)
        )
        return result.first() is not None

    async def list_enabled(self, retail_vertical_id: int | None = None) -> list[SupportedVendorType]:
        """Enabled types in ascending id order, optionally limited to one vertical."""
        q = select(SupportedVendorType).where(SupportedVendorType.is_enabled.is_(True))
        if retail_vertical_id is not None:
            q = q.where(
                SupportedVendorType.retail_verticals.any(RetailVertical.id == retail_vertical_id)
            )
        result = await self._session.execute(q.order_by(SupportedVendorType.id.asc()))
        return list(result.scalars().all())

    async def set_retail_verticals(
        self, vendor_type: SupportedVendorType, verticals: list[RetailVertical]
    ) -> None:
        vendor_type.retail_verticals = verticals
        await self._session.flush()

    @immutable_fields("vendor_slug")
    async def update(self, entity_id: int, **kwargs: Any) -> SupportedVendorType | None:
        return await super().update(entity_id, **kwargs)
