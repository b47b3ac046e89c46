"""Organization-scoped reads and display edits of vendor instances.

URLs address instances by identifier, never by database id: the instance slug
is tried first, then the vendor slug (first active instance of that type).
"""


from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.exceptions import NotFoundError, OrganizationRequired
from vendor_hub.domain.vendor_instance import VendorInstance
from vendor_hub.repositories.vendor_instance import VendorInstanceRepository
from vendor_hub.schemas.vendor import VendorInstanceUpdate

class VendorInstanceService:
    def __init__(self, session: AsyncSession, organization_id: int):
        if organization_id is None:
            raise OrganizationRequired()
        self._repo = VendorInstanceRepository(session, organization_id)

    async def list_instances(self) -> list[VendorInstance]:
        return await self._repo.list_active()

    async def get_by_identifier(self, identifier: str) -> VendorInstance:
        instance = await self._repo.get_by_instance_slug(identifier)
        if instance is None:
            instance = await self._repo.get_first_by_vendor_slug(identifier)
        if instance is None:
            raise NotFoundError("Vendor", identifier)
        return instance

    async def update_instance(self, identifier: str, data: VendorInstanceUpdate) -> VendorInstance:
        instance = await self.get_by_identifier(identifier)
        updated = await self._repo.update(
            instance.id, **data.model_dump(exclude_none=True, exclude_unset=True)
        )
        return updated  # type: ignore[return-value]
