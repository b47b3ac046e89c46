"""Vendor catalog service — supported vendor types and retail verticals.

Rule: No FastAPI here. Raise AppException subclasses for business rule violations.

vendor_slug is decided exactly once, in create_vendor_type(). Updates go through
SupportedVendorTypeRepository.update, whose guard drops any vendor_slug key.
"""


from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.exceptions import ConflictError, NotFoundError, ValidationError
from vendor_hub.core.pagination import PaginationParams
from vendor_hub.domain.vendor_type import RetailVertical, SupportedVendorType
from vendor_hub.repositories.vendor_type import (
    RetailVerticalRepository,
    SupportedVendorTypeRepository,
)
from vendor_hub.schemas.vendor import RetailVerticalCreate, VendorTypeCreate, VendorTypeUpdate
from vendor_hub.services.identifiers import is_valid_vendor_slug, slugify_vendor_name

# Columns that may not be cleared to NULL through an update
_NOT_NULLABLE = {"name", "api_type", "is_enabled", "credential_fields"}

class VendorTypeService:
    def __init__(self, session: AsyncSession):
        self._repo = SupportedVendorTypeRepository(session)
        self._verticals = RetailVerticalRepository(session)

    # ------------------------------------------------------------------
    # Retail verticals
    # ------------------------------------------------------------------

    async def list_retail_verticals(self) -> list[RetailVertical]:
        items, _ = await self._verticals.list(limit=1000, order_by="sort_order")
        return items

    async def create_retail_vertical(self, data: RetailVerticalCreate) -> RetailVertical:
        return await self._verticals.create(**data.model_dump())

    async def _resolve_verticals(self, ids: list[int]) -> list[RetailVertical]:
        verticals = await self._verticals.get_many(ids)
        missing = set(ids) - {v.id for v in verticals}
        if missing:
            raise NotFoundError("Retail vertical", min(missing))
        return verticals

    # ------------------------------------------------------------------
    # Vendor types
    # ------------------------------------------------------------------

    async def list_vendor_types(self, pagination: PaginationParams, enabled: bool | None = None):
        filters = {"is_enabled": enabled} if enabled is not None else None
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def get_vendor_type(self, vendor_type_id: int) -> SupportedVendorType:
        vendor_type = await self._repo.get_by_id(vendor_type_id)
        if not vendor_type:
            raise NotFoundError("Vendor type", vendor_type_id)
        return vendor_type

    async def get_by_slug(self, vendor_slug: str) -> SupportedVendorType:
        vendor_type = await self._repo.get_by_slug(vendor_slug)
        if not vendor_type:
            raise NotFoundError("Vendor type", vendor_slug)
        return vendor_type

    async def create_vendor_type(self, data: VendorTypeCreate) -> SupportedVendorType:
        name = data.name.strip()
        if not name:
            raise ValidationError("Vendor type name is required")

        slug = (data.vendor_slug or "").strip().lower() or slugify_vendor_name(name)
        if not is_valid_vendor_slug(slug):
            raise ValidationError(
                f"Invalid vendor slug '{slug}': use 1-50 lower-case letters, digits, '-' or '_'"
            )
        if await self._repo.slug_taken(slug):
            raise ConflictError(f"Vendor slug '{slug}' is already in use")
        if await self._repo.name_taken(name):
            raise ConflictError(f"Vendor type '{name}' already exists")

        verticals = await self._resolve_verticals(data.retail_vertical_ids)
        return await self._repo.create(
            name=name,
            vendor_slug=slug,
            vendor_short_code=data.vendor_short_code,
            description=data.description,
            api_type=data.api_type,
            credential_fields=[
                f.model_dump(by_alias=True, exclude_none=True) for f in data.credential_fields
            ],
            is_enabled=data.is_enabled,
            retail_verticals=verticals,
        )

    async def update_vendor_type(
        self, vendor_type_id: int, data: VendorTypeUpdate
    ) -> SupportedVendorType:
        vendor_type = await self.get_vendor_type(vendor_type_id)  # raises 404 if missing

        changes = data.model_dump(exclude_unset=True)
        vertical_ids = changes.pop("retail_vertical_ids", None)
        if data.credential_fields is not None:
            changes["credential_fields"] = [
                f.model_dump(by_alias=True, exclude_none=True) for f in data.credential_fields
            ]
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None or key not in _NOT_NULLABLE
        }
        if "name" in changes and changes["name"] != vendor_type.name:
            if await self._repo.name_taken(changes["name"]):
                raise ConflictError(f"Vendor type '{changes['name']}' already exists")

        if vertical_ids is not None:
            await self._repo.set_retail_verticals(
                vendor_type, await self._resolve_verticals(vertical_ids)
            )
        updated = await self._repo.update(vendor_type_id, **changes)
        return updated  # type: ignore[return-value]

    async def disable_vendor_type(self, vendor_type_id: int) -> SupportedVendorType:
        """Soft-disable; the slug stays reserved."""
        await self.get_vendor_type(vendor_type_id)
        return await self._repo.update(vendor_type_id, is_enabled=False)  # type: ignore[return-value]
