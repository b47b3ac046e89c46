"""Per-organization vendor provisioning."""

import pytest

from vendor_hub.core.events import PROVISIONING_RACE_RESOLVED, VENDOR_LIMIT_REACHED
from vendor_hub.core.exceptions import ConflictError, NotFoundError, OrganizationRequired
from vendor_hub.domain.vendor_type import RetailVertical
from vendor_hub.repositories.vendor_instance import VendorInstanceRepository
from vendor_hub.schemas.vendor import VendorTypeCreate
from vendor_hub.services.provisioner import VendorProvisioner
from vendor_hub.services.vendor_type import VendorTypeService

ORG = 7

FIREARMS_SLUGS = ["lipseys", "chattanooga", "bill-hicks", "sports-south", "gunbroker"]


class FixedPlanLimits:
    def __init__(self, limit):
        self.limit = limit

    async def get_vendor_limit(self, organization_id):
        return self.limit


def _slugs(instances):
    return [i.instance_slug for i in instances]


class TestProvisionForOrganization:
    async def test_vertical_without_vendor_types(self, session, vendor_types, verticals):
        instances = await VendorProvisioner(session).provision_for_organization(
            ORG, verticals["appliances"].id
        )
        assert instances == []

    async def test_unknown_vertical_is_empty_not_an_error(self, session, vendor_types):
        assert await VendorProvisioner(session).provision_for_organization(ORG, 999) == []

    async def test_vertical_filters_enabled_types(self, session, vendor_types, verticals):
        instances = await VendorProvisioner(session).provision_for_organization(
            ORG, verticals["firearms"].id
        )
        assert _slugs(instances) == FIREARMS_SLUGS
        by_id = {t.id: t for t in vendor_types.values()}
        for instance in instances:
            assert instance.vendor_slug == by_id[instance.supported_vendor_type_id].vendor_slug
            assert instance.organization_id == ORG

    async def test_no_vertical_means_every_enabled_type(self, session, vendor_types):
        instances = await VendorProvisioner(session).provision_for_organization(ORG)
        assert _slugs(instances) == [*FIREARMS_SLUGS, "unclassified"]

    async def test_plan_limit_keeps_lowest_type_ids(self, session, vendor_types, verticals, events):
        provisioner = VendorProvisioner(session, FixedPlanLimits(3))
        instances = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)

        assert _slugs(instances) == FIREARMS_SLUGS[:3]
        type_ids = [i.supported_vendor_type_id for i in instances]
        assert type_ids == sorted(type_ids)

        [record] = events(VENDOR_LIMIT_REACHED)
        assert record.context["skipped_vendor_type_ids"] == [
            vendor_types["sports-south"].id,
            vendor_types["gunbroker"].id,
        ]

    async def test_plan_limit_counts_existing_instances(self, session, vendor_types, verticals):
        limited = VendorProvisioner(session, FixedPlanLimits(3))
        await limited.provision_for_organization(ORG, verticals["firearms"].id)
        again = await limited.provision_for_organization(ORG)

        assert _slugs(again) == FIREARMS_SLUGS[:3]
        assert len(await VendorInstanceRepository(session, ORG).list_active()) == 3

    async def test_idempotent(self, session, vendor_types, verticals):
        provisioner = VendorProvisioner(session)
        first = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)
        second = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)

        assert [i.id for i in second] == [i.id for i in first]
        assert len(await VendorInstanceRepository(session, ORG).list_active()) == 5

    async def test_adds_newly_eligible_types_only(self, session, vendor_types, verticals):
        provisioner = VendorProvisioner(session)
        first = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)

        unclassified = vendor_types["unclassified"]
        unclassified.retail_verticals = [verticals["firearms"]]
        await session.flush()
        second = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)

        assert [i.id for i in second[:5]] == [i.id for i in first]
        assert second[5].instance_slug == "unclassified"

    async def test_organizations_are_provisioned_independently(self, session, vendor_types):
        provisioner = VendorProvisioner(session)
        ours = await provisioner.provision_for_organization(ORG)
        theirs = await provisioner.provision_for_organization(ORG + 1)

        assert _slugs(ours) == _slugs(theirs)
        assert not {i.id for i in ours} & {i.id for i in theirs}

    async def test_organization_required(self, session, vendor_types):
        with pytest.raises(OrganizationRequired):
            await VendorProvisioner(session).provision_for_organization(None)

    async def test_end_to_end_plan_limit_scenario(self, session):
        """Vertical 2 has no vendor types; vertical 1 has five, plan allows three."""
        session.add_all(
            [
                RetailVertical(id=1, name="Firearms", slug="firearms"),
                RetailVertical(id=2, name="Appliances", slug="appliances"),
            ]
        )
        await session.flush()

        svc = VendorTypeService(session)
        created = [
            await svc.create_vendor_type(
                VendorTypeCreate(name=f"Vendor {n}", retail_vertical_ids=[1])
            )
            for n in range(1, 6)
        ]

        provisioner = VendorProvisioner(session, FixedPlanLimits(3))
        assert await provisioner.provision_for_organization(100, retail_vertical_id=2) == []
        instances = await provisioner.provision_for_organization(101, retail_vertical_id=1)
        assert [i.supported_vendor_type_id for i in instances] == [t.id for t in created[:3]]


class TestInstanceLifecycle:
    async def test_add_instance_disambiguates_slug(self, session, vendor_types):
        provisioner = VendorProvisioner(session)
        lipseys = vendor_types["lipseys"]
        first = await provisioner.add_instance(ORG, lipseys.id)
        second = await provisioner.add_instance(ORG, lipseys.id)

        assert first.instance_slug == "lipseys"
        assert second.instance_slug == "lipseys-2"
        assert second.vendor_slug == "lipseys"
        assert second.name == "Lipsey's (2)"

    async def test_add_instance_respects_plan_limit(self, session, vendor_types, events):
        provisioner = VendorProvisioner(session, FixedPlanLimits(1))
        await provisioner.add_instance(ORG, vendor_types["lipseys"].id)
        with pytest.raises(ConflictError):
            await provisioner.add_instance(ORG, vendor_types["lipseys"].id)
        assert len(events(VENDOR_LIMIT_REACHED)) == 1

    async def test_add_disabled_or_missing_type(self, session, vendor_types):
        provisioner = VendorProvisioner(session)
        with pytest.raises(ConflictError):
            await provisioner.add_instance(ORG, vendor_types["retired"].id)
        with pytest.raises(NotFoundError):
            await provisioner.add_instance(ORG, 999)

    async def test_disconnected_type_is_not_reprovisioned(self, session, vendor_types, verticals):
        provisioner = VendorProvisioner(session, FixedPlanLimits(5))
        instances = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)
        lipseys = instances[0]

        await provisioner.disconnect_instance(ORG, lipseys.id)
        again = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)

        assert _slugs(again) == FIREARMS_SLUGS[1:]
        assert len(await VendorInstanceRepository(session, ORG).list_active()) == 4

    async def test_add_instance_reconnects_disconnected_type(self, session, vendor_types, verticals):
        provisioner = VendorProvisioner(session)
        [lipseys, *_] = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)
        await provisioner.disconnect_instance(ORG, lipseys.id)

        reconnected = await provisioner.add_instance(ORG, vendor_types["lipseys"].id)
        assert reconnected.instance_slug == "lipseys-2"
        assert reconnected.id != lipseys.id

        again = await provisioner.provision_for_organization(ORG, verticals["firearms"].id)
        assert _slugs(again)[0] == "lipseys-2"
        active = await VendorInstanceRepository(session, ORG).list_active()
        assert lipseys.id not in {i.id for i in active}

    async def test_disconnect_unknown_instance(self, session, vendor_types):
        with pytest.raises(NotFoundError):
            await VendorProvisioner(session).disconnect_instance(ORG, 12345)

    async def test_disconnect_is_tenant_scoped(self, session, vendor_types):
        provisioner = VendorProvisioner(session)
        [instance, *_] = await provisioner.provision_for_organization(ORG)
        with pytest.raises(NotFoundError):
            await provisioner.disconnect_instance(ORG + 1, instance.id)


class TestProvisioningRace:
    async def test_unique_constraint_backstop_reuses_existing(
        self, session, vendor_types, verticals, monkeypatch, events
    ):
        # Only Unclassified Supply is eligible for the appliances vertical
        unclassified = vendor_types["unclassified"]
        unclassified.retail_verticals = [verticals["appliances"]]
        await session.flush()

        provisioner = VendorProvisioner(session)
        [existing] = await provisioner.provision_for_organization(ORG, verticals["appliances"].id)

        # Simulate a concurrent request that has not seen the committed row yet
        original = VendorInstanceRepository.list_for_type
        calls = {"n": 0}

        async def stale_list_for_type(self, vendor_type_id, **kwargs):
            calls["n"] += 1
            if calls["n"] <= 2:
                return []
            return await original(self, vendor_type_id, **kwargs)

        async def no_taken_slugs(self):
            return set()

        monkeypatch.setattr(VendorInstanceRepository, "list_for_type", stale_list_for_type)
        monkeypatch.setattr(VendorInstanceRepository, "taken_instance_slugs", no_taken_slugs)

        instances = await provisioner.provision_for_organization(ORG, verticals["appliances"].id)

        assert [i.id for i in instances] == [existing.id]
        [record] = events(PROVISIONING_RACE_RESOLVED)
        assert record.context["vendor_type_id"] == unclassified.id
