"""Shared fixtures: in-memory database, session, HTTP client, catalog seed data."""

import logging

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

import vendor_hub.domain  # noqa: F401  (register every model on Base.metadata)
from vendor_hub.db.base import Base, build_engine, get_db
from vendor_hub.domain.vendor_type import RetailVertical, SupportedVendorType
from vendor_hub.main import app


@pytest.fixture
async def engine():
    engine = build_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def events(caplog):
    """Return a callable listing the structured event ids logged so far."""
    caplog.set_level(logging.INFO, logger="vendor_hub.events")

    def _events(name: str | None = None) -> list:
        records = [r for r in caplog.records if hasattr(r, "event")]
        if name is None:
            return [r.event for r in records]
        return [r for r in records if r.event == name]

    return _events


# ---------------------------------------------------------------------------
# Catalog seed data
# ---------------------------------------------------------------------------

LIPSEYS_FIELDS = [
    {"name": "email", "label": "Email", "type": "email", "required": True},
    {"name": "password", "label": "Password", "type": "password", "required": True},
]

CHATTANOOGA_FIELDS = [
    {"name": "sid", "label": "Account SID", "type": "text", "required": True},
    {"name": "token", "label": "API Token", "type": "token", "required": True},
]

BILL_HICKS_FIELDS = [
    {"name": "ftpServer", "label": "FTP Server", "type": "text", "required": True},
    {"name": "ftpPort", "label": "FTP Port", "type": "number"},
    {"name": "ftpUsername", "label": "FTP Username", "type": "text", "required": True},
    {"name": "ftpPassword", "label": "FTP Password", "type": "password", "required": True},
]


@pytest.fixture
async def verticals(session):
    firearms = RetailVertical(name="Firearms", slug="firearms", sort_order=1)
    appliances = RetailVertical(name="Appliances", slug="appliances", sort_order=2)
    session.add_all([firearms, appliances])
    await session.flush()
    return {"firearms": firearms, "appliances": appliances}


@pytest.fixture
async def vendor_types(session, verticals):
    """Five enabled firearms vendors, one disabled one, one with no vertical."""
    firearms = verticals["firearms"]
    rows = [
        SupportedVendorType(
            name="Lipsey's", vendor_slug="lipseys", vendor_short_code="LIP",
            credential_fields=LIPSEYS_FIELDS, retail_verticals=[firearms],
        ),
        SupportedVendorType(
            name="Chattanooga Shooting Supplies", vendor_slug="chattanooga",
            vendor_short_code="CSSI", credential_fields=CHATTANOOGA_FIELDS,
            retail_verticals=[firearms],
        ),
        SupportedVendorType(
            name="Bill Hicks & Co.", vendor_slug="bill-hicks", api_type="ftp",
            credential_fields=BILL_HICKS_FIELDS, retail_verticals=[firearms],
        ),
        SupportedVendorType(
            name="Sports South", vendor_slug="sports-south", retail_verticals=[firearms],
        ),
        SupportedVendorType(
            name="GunBroker", vendor_slug="gunbroker", retail_verticals=[firearms],
        ),
        SupportedVendorType(
            name="Retired Distributor", vendor_slug="retired", is_enabled=False,
            retail_verticals=[firearms],
        ),
        SupportedVendorType(
            name="Unclassified Supply", vendor_slug="unclassified", retail_verticals=[],
        ),
    ]
    session.add_all(rows)
    await session.flush()
    return {row.vendor_slug: row for row in rows}
