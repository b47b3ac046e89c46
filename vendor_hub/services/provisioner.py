"""Vendor Catalog Provisioner — per-organization vendor instances.

Which vendor types an organization gets is decided by its retail vertical:
  - vertical given  -> enabled types tagged with that vertical
  - vertical absent -> every enabled type (organizations created before
                       verticals existed keep seeing the full catalog)

Eligible types are walked in ascending id order so a plan limit always keeps
the same prefix and repeated calls converge on the same instance set.

Each "is it instantiated? / create it" pair runs in its own savepoint. The
unique constraint on (organization_id, supported_vendor_type_id, instance_slug)
catches concurrent provisioning of the same organization; the loser reuses
the winner's row.
"""


import logging
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.config import settings
from vendor_hub.core.events import PROVISIONING_RACE_RESOLVED, VENDOR_LIMIT_REACHED, emit_event
from vendor_hub.core.exceptions import ConflictError, NotFoundError, OrganizationRequired
from vendor_hub.domain.vendor_instance import VendorInstance
from vendor_hub.domain.vendor_type import SupportedVendorType
from vendor_hub.repositories.vendor_instance import VendorInstanceRepository
from vendor_hub.repositories.vendor_type import SupportedVendorTypeRepository
from vendor_hub.services.identifiers import next_instance_slug

logger = logging.getLogger(__name__)


class PlanLimits(Protocol):
    """Subscription collaborator. None means unbounded."""

    async def get_vendor_limit(self, organization_id: int) -> int | None: ...


class SettingsPlanLimits:
    """Same limit for every organization, taken from DEFAULT_VENDOR_LIMIT."""

    async def get_vendor_limit(self, organization_id: int) -> int | None:
        return settings.vendor_limit


class VendorProvisioner:
    def __init__(self, session: AsyncSession, plan_limits: PlanLimits | None = None):
        self._session = session
        self._types = SupportedVendorTypeRepository(session)
        self._plan_limits = plan_limits or SettingsPlanLimits()

    def _instances(self, organization_id: int) -> VendorInstanceRepository:
        if organization_id is None:
            raise OrganizationRequired()
        return VendorInstanceRepository(self._session, organization_id)

    async def _remaining(self, organization_id: int, repo: VendorInstanceRepository) -> int | None:
        limit = await self._plan_limits.get_vendor_limit(organization_id)
        if limit is None:
            return None
        return max(limit - await repo.count_active(), 0)

    async def _create_instance(
        self, repo: VendorInstanceRepository, vendor_type: SupportedVendorType
    ) -> VendorInstance:
        slug = next_instance_slug(vendor_type.vendor_slug, await repo.taken_instance_slugs())
        name = vendor_type.name
        if slug != vendor_type.vendor_slug:
            name = f"{vendor_type.name} ({slug[len(vendor_type.vendor_slug) + 1:]})"
        return await repo.create(
            supported_vendor_type_id=vendor_type.id,
            vendor_slug=vendor_type.vendor_slug,  # copied once, never re-synced
            instance_slug=slug,
            name=name,
            vendor_short_code=vendor_type.vendor_short_code,
        )

    # ------------------------------------------------------------------
    # Provisioning
    # ------------------------------------------------------------------

    async def provision_for_organization(
        self, organization_id: int, retail_vertical_id: int | None = None
    ) -> list[VendorInstance]:
        """Instantiate every eligible, not-yet-instantiated vendor type.

        Returns the organization's active instances of all eligible types
        (pre-existing and newly created), ordered by vendor type id. A
        vertical with no matching types yields an empty list.
        """
        repo = self._instances(organization_id)
        eligible = await self._types.list_enabled(retail_vertical_id)
        remaining = await self._remaining(organization_id, repo)

        result: list[VendorInstance] = []
        created = 0
        skipped: list[int] = []
        for vendor_type in eligible:
            # Disconnected types count as instantiated; add_instance reconnects them
            if await repo.list_for_type(vendor_type.id, include_removed=True):
                result.extend(await repo.list_for_type(vendor_type.id))
                continue
            if remaining is not None and remaining <= 0:
                skipped.append(vendor_type.id)
                continue

            try:
                async with self._session.begin_nested():
                    # re-check inside the savepoint
                    existing = await repo.list_for_type(vendor_type.id, include_removed=True)
                    if not existing:
                        await self._create_instance(repo, vendor_type)
                        created += 1
                        if remaining is not None:
                            remaining -= 1
            except IntegrityError:
                emit_event(
                    PROVISIONING_RACE_RESOLVED,
                    "Concurrent provisioning created this instance first; reusing it",
                    organization_id=organization_id,
                    vendor_type_id=vendor_type.id,
                )
            result.extend(await repo.list_for_type(vendor_type.id))

        if skipped:
            emit_event(
                VENDOR_LIMIT_REACHED,
                "Plan vendor limit reached; remaining eligible vendor types not provisioned",
                organization_id=organization_id,
                retail_vertical_id=retail_vertical_id,
                skipped_vendor_type_ids=skipped,
            )
        logger.info(
            "Provisioned org=%s vertical=%s created=%d total=%d",
            organization_id, retail_vertical_id, created, len(result),
        )
        return result

    async def add_instance(self, organization_id: int, vendor_type_id: int) -> VendorInstance:
        """Explicitly add another account with a supplier (``lipseys-2``)."""
        repo = self._instances(organization_id)
        vendor_type = await self._types.get_by_id(vendor_type_id)
        if vendor_type is None:
            raise NotFoundError("Vendor type", vendor_type_id)
        if not vendor_type.is_enabled:
            raise ConflictError(f"Vendor type '{vendor_type.vendor_slug}' is disabled")

        remaining = await self._remaining(organization_id, repo)
        if remaining is not None and remaining <= 0:
            emit_event(
                VENDOR_LIMIT_REACHED,
                "Plan vendor limit reached; instance not added",
                organization_id=organization_id,
                skipped_vendor_type_ids=[vendor_type_id],
            )
            raise ConflictError("Vendor limit for the current plan has been reached")

        try:
            async with self._session.begin_nested():
                instance = await self._create_instance(repo, vendor_type)
        except IntegrityError as exc:
            raise ConflictError("Vendor instance was created concurrently; retry") from exc
        logger.info(
            "Added vendor instance org=%s slug=%s", organization_id, instance.instance_slug
        )
        return instance

    async def disconnect_instance(self, organization_id: int, instance_id: int) -> None:
        """Soft-remove; orders and shipments keep referencing the row."""
        deleted = await self._instances(organization_id).soft_delete(instance_id)
        if not deleted:
            raise NotFoundError("Vendor instance", instance_id)
        logger.info("Disconnected vendor instance org=%s id=%s", organization_id, instance_id)
