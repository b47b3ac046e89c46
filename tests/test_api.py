"""HTTP surface: catalog administration and organization-scoped vendor routes."""

import pytest
from sqlalchemy import select

from vendor_hub.core.events import IMMUTABLE_FIELD_REJECTED, PERSISTENCE_MISMATCH
from vendor_hub.domain.audit import AuditTrail

ORG = 12
MASK = "••••••••"


@pytest.fixture
async def catalog(client):
    """Two verticals and three firearms vendor types created through the admin API."""
    firearms = (
        await client.post("/api/v1/retail-verticals", json={"name": "Firearms", "slug": "firearms"})
    ).json()["data"]
    appliances = (
        await client.post(
            "/api/v1/retail-verticals",
            json={"name": "Appliances", "slug": "appliances", "sortOrder": 2},
        )
    ).json()["data"]

    types = {}
    for body in (
        {
            "name": "Lipsey's",
            "vendorSlug": "lipseys",
            "vendorShortCode": "LIP",
            "retailVerticalIds": [firearms["id"]],
            "credentialFields": [
                {"name": "email", "label": "Email", "type": "email", "required": True},
                {"name": "password", "label": "Password", "type": "password", "required": True},
            ],
        },
        {"name": "Chattanooga Shooting Supplies", "retailVerticalIds": [firearms["id"]]},
        {"name": "Sports South", "retailVerticalIds": [firearms["id"]]},
    ):
        resp = await client.post("/api/v1/vendor-types", json=body)
        assert resp.status_code == 201, resp.text
        created = resp.json()["data"]
        types[created["vendorSlug"]] = created
    return {"firearms": firearms, "appliances": appliances, "types": types}


async def _provision(client, vertical_id=None, org=ORG):
    resp = await client.post(
        f"/org/{org}/api/vendors/provision", json={"retailVerticalId": vertical_id}
    )
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestHealth:
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["database"] == "ok"


class TestVendorTypeRoutes:
    async def test_created_types(self, client, catalog):
        assert sorted(catalog["types"]) == ["chattanooga-shooting-supplies", "lipseys", "sports-south"]
        lipseys = catalog["types"]["lipseys"]
        assert lipseys["retailVerticalIds"] == [catalog["firearms"]["id"]]
        assert lipseys["credentialFields"][1]["type"] == "password"

    async def test_list_is_paginated(self, client, catalog):
        resp = await client.get("/api/v1/vendor-types", params={"limit": 2})
        body = resp.json()
        assert [t["vendorSlug"] for t in body["data"]] == ["lipseys", "chattanooga-shooting-supplies"]
        assert body["meta"] == {"total": 3, "page": 1, "limit": 2, "pages": 2}

    async def test_put_cannot_change_slug(self, client, catalog, events):
        lipseys = catalog["types"]["lipseys"]
        resp = await client.put(
            f"/api/v1/vendor-types/{lipseys['id']}",
            json={"vendorSlug": "lipseys-inc", "vendorShortCode": "LPS", "name": "Lipsey's Inc"},
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["vendorSlug"] == "lipseys"
        assert data["vendorShortCode"] == "LPS"
        assert data["name"] == "Lipsey's Inc"
        assert len(events(IMMUTABLE_FIELD_REJECTED)) == 1

    async def test_duplicate_slug_conflict(self, client, catalog):
        resp = await client.post("/api/v1/vendor-types", json={"name": "Other", "vendorSlug": "lipseys"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "CONFLICT"

    async def test_disable_excludes_from_provisioning(self, client, catalog):
        sports_south = catalog["types"]["sports-south"]
        resp = await client.delete(f"/api/v1/vendor-types/{sports_south['id']}")
        assert resp.json()["data"]["isEnabled"] is False

        provisioned = await _provision(client, catalog["firearms"]["id"])
        assert [i["vendorSlug"] for i in provisioned["data"]] == [
            "lipseys",
            "chattanooga-shooting-supplies",
        ]

    async def test_unknown_type(self, client):
        resp = await client.get("/api/v1/vendor-types/404")
        assert resp.status_code == 404
        assert resp.json() == {"error": {"code": "NOT_FOUND", "message": "Vendor type '404' not found"}}

    async def test_retail_verticals_listed_in_sort_order(self, client, catalog):
        resp = await client.get("/api/v1/retail-verticals")
        assert [v["slug"] for v in resp.json()["data"]] == ["firearms", "appliances"]


class TestOrganizationVendorRoutes:
    async def test_provision_and_list(self, client, catalog):
        provisioned = await _provision(client, catalog["firearms"]["id"])
        assert [i["instanceSlug"] for i in provisioned["data"]] == [
            "lipseys",
            "chattanooga-shooting-supplies",
            "sports-south",
        ]

        listed = (await client.get(f"/org/{ORG}/api/vendors")).json()
        assert listed["data"] == provisioned["data"]
        assert listed["meta"]["total"] == 3

    async def test_provision_is_idempotent(self, client, catalog):
        first = await _provision(client, catalog["firearms"]["id"])
        second = await _provision(client, catalog["firearms"]["id"])
        assert [i["id"] for i in second["data"]] == [i["id"] for i in first["data"]]

    async def test_vertical_without_vendors(self, client, catalog):
        assert (await _provision(client, catalog["appliances"]["id"]))["data"] == []

    async def test_add_second_account_and_disconnect(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        lipseys = catalog["types"]["lipseys"]

        resp = await client.post(
            f"/org/{ORG}/api/vendors", json={"supportedVendorTypeId": lipseys["id"]}
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["instanceSlug"] == "lipseys-2"

        resp = await client.delete(f"/org/{ORG}/api/vendors/lipseys-2")
        assert resp.status_code == 204
        resp = await client.get(f"/org/{ORG}/api/vendors/lipseys-2")
        assert resp.status_code == 404

    async def test_vendor_slug_addresses_first_instance(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        resp = await client.patch(
            f"/org/{ORG}/api/vendors/lipseys", json={"vendorShortCode": "LIP-EAST"}
        )
        assert resp.status_code == 200
        assert resp.json()["data"]["vendorShortCode"] == "LIP-EAST"
        assert resp.json()["data"]["instanceSlug"] == "lipseys"


class TestCredentialRoutes:
    async def test_save_and_read_masked(self, client, catalog, events):
        await _provision(client, catalog["firearms"]["id"])
        url = f"/org/{ORG}/api/vendors/lipseys/credentials"

        resp = await client.put(
            url, json={"credentials": {"email": "dealer@example.com", "password": "s3cret"}}
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["data"] == {
            "vendorSlug": "lipseys",
            "savedKeys": ["email", "password"],
            "legacyColumns": ["password", "user_name"],
        }
        assert events(PERSISTENCE_MISMATCH) == []

        resp = await client.get(url)
        assert resp.json()["data"]["credentials"] == {
            "email": "dealer@example.com",
            "password": MASK,
        }

    async def test_masked_value_keeps_stored_secret(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        url = f"/org/{ORG}/api/vendors/lipseys/credentials"
        await client.put(url, json={"credentials": {"email": "a@example.com", "password": "s3cret"}})

        resp = await client.put(url, json={"credentials": {"email": "b@example.com", "password": MASK}})
        assert resp.status_code == 200

        # Blank values keep what is stored as well
        resp = await client.put(url, json={"credentials": {"email": "", "password": ""}})
        assert resp.json()["data"]["savedKeys"] == ["email", "password"]
        masked = (await client.get(url)).json()["data"]["credentials"]
        assert masked == {"email": "b@example.com", "password": MASK}

    async def test_missing_required_field(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        resp = await client.put(
            f"/org/{ORG}/api/vendors/lipseys/credentials",
            json={"credentials": {"email": "dealer@example.com"}},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "SCHEMA_VALIDATION_ERROR"
        assert resp.json()["error"]["field"] == "password"

    async def test_no_credentials_yet(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        resp = await client.get(f"/org/{ORG}/api/vendors/sports-south/credentials")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "CREDENTIALS_NOT_FOUND"

    async def test_undeclared_secret_looking_keys_are_masked(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        url = f"/org/{ORG}/api/vendors/sports-south/credentials"
        await client.put(url, json={"credentials": {"userName": "dealer", "apiKey": "abc"}})

        creds = (await client.get(url)).json()["data"]["credentials"]
        assert creds == {"userName": "dealer", "apiKey": MASK}

    async def test_unknown_vendor(self, client, catalog):
        resp = await client.get(f"/org/{ORG}/api/vendors/nope/credentials")
        assert resp.status_code == 404

    async def test_reads_and_writes_are_audited_by_key_name(self, client, catalog, session_factory):
        await _provision(client, catalog["firearms"]["id"])
        url = f"/org/{ORG}/api/vendors/lipseys/credentials"
        headers = {"X-User-Id": "user-42"}
        await client.put(
            url, json={"credentials": {"email": "a@example.com", "password": "s3cret"}}, headers=headers
        )
        await client.get(url, headers=headers)

        async with session_factory() as session:
            rows = (
                await session.execute(select(AuditTrail).order_by(AuditTrail.id))
            ).scalars().all()

        assert [r.action for r in rows] == ["credentials.updated", "credentials.viewed"]
        assert {r.user_id for r in rows} == {"user-42"}
        assert {r.organization_id for r in rows} == {ORG}
        assert rows[0].new_value == {"keys": ["email", "password"]}
        assert "s3cret" not in repr([r.old_value for r in rows] + [r.new_value for r in rows])

    async def test_oversized_user_header_rejected(self, client, catalog, session_factory):
        await _provision(client, catalog["firearms"]["id"])
        resp = await client.get(
            f"/org/{ORG}/api/vendors/lipseys/credentials", headers={"X-User-Id": "u" * 37}
        )
        assert resp.status_code == 422

        async with session_factory() as session:
            rows = (await session.execute(select(AuditTrail))).scalars().all()
        assert rows == []

    async def test_bad_sync_toggle_is_a_form_error(self, client, catalog):
        await _provision(client, catalog["firearms"]["id"])
        resp = await client.put(
            f"/org/{ORG}/api/vendors/sports-south/credentials",
            json={"credentials": {"apiKey": "abc", "catalogSyncEnabled": None}},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "SCHEMA_VALIDATION_ERROR"
        assert resp.json()["error"]["field"] == "catalogSyncEnabled"
