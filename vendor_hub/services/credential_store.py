"""Credential Store Adapter — dual-write / dual-read over two storage shapes.

Credentials moved from one fixed column per known field (legacy shape) to a
schema-on-read JSON document. Until every reader is on the document, each
``save`` writes both shapes in one savepoint and each ``load`` prefers the
document, falling back to the legacy columns for absent documents or missing
keys. Callers only ever see :class:`CredentialStore`; deleting the legacy
branch later means deleting ``_write_legacy`` / ``_read_legacy`` here and
nothing else.

Operational keys (sync toggles and schedules) are peeled off the payload and
written to their own columns, never into the document.

Rule: keys are stored exactly as supplied. No casing or renaming on write.
"""


import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.config import settings
from vendor_hub.core.events import PERSISTENCE_MISMATCH, emit_event
from vendor_hub.core.exceptions import (
    CredentialsNotFound,
    NotFoundError,
    OrganizationRequired,
    SchemaValidationError,
    StorageError,
)
from vendor_hub.domain.credential import VendorCredentialRecord
from vendor_hub.domain.vendor_type import SupportedVendorType
from vendor_hub.repositories.credential import CredentialRecordRepository, FleetCredentialRepository
from vendor_hub.schemas.credential import CredentialField
from vendor_hub.services.credential_schema import parse_fields, validate_payload

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Legacy column mapping
# ---------------------------------------------------------------------------

# normalized payload key -> legacy column
_LEGACY_COLUMN_BY_KEY: dict[str, str] = {
    "ftpserver": "ftp_server",
    "ftphost": "ftp_server",
    "ftpport": "ftp_port",
    "ftpusername": "ftp_username",
    "ftppassword": "ftp_password",
    "ftpbasepath": "ftp_base_path",
    "email": "user_name",
    "username": "user_name",
    "password": "password",
    "customernumber": "customer_number",
    "apikey": "api_key",
    "apisecret": "api_secret",
    "sid": "sid",
    "token": "token",
}

LEGACY_COLUMNS: tuple[str, ...] = tuple(dict.fromkeys(_LEGACY_COLUMN_BY_KEY.values()))

# normalized payload key -> operational column
_OPERATIONAL_COLUMN_BY_KEY: dict[str, str] = {
    "catalogsyncenabled": "catalog_sync_enabled",
    "catalogsyncschedule": "catalog_sync_schedule",
    "inventorysyncenabled": "inventory_sync_enabled",
    "inventorysyncschedule": "inventory_sync_schedule",
}

_KEY_NOISE = re.compile(r"[\s_\-]")


def _normalize_key(key: str) -> str:
    return _KEY_NOISE.sub("", key.lower())


def legacy_column_for(key: str) -> str | None:
    return _LEGACY_COLUMN_BY_KEY.get(_normalize_key(key))


def operational_column_for(key: str) -> str | None:
    return _OPERATIONAL_COLUMN_BY_KEY.get(_normalize_key(key))


def split_operational(payload: dict[str, Any]) -> tuple[dict[str, Any], dict[str, Any]]:
    """Return (secret document payload, operational column values)."""
    secret: dict[str, Any] = {}
    operational: dict[str, Any] = {}
    for key, value in payload.items():
        column = operational_column_for(key)
        if column is None:
            secret[key] = value
        else:
            operational[column] = value
    return secret, operational


_SCHEDULE_MAX_LENGTH = 50


def validate_operational(payload: dict[str, Any]) -> None:
    """Reject operational values the dedicated columns cannot hold."""
    for key, value in payload.items():
        column = operational_column_for(key)
        if column is None:
            continue
        if column.endswith("_enabled"):
            if not isinstance(value, bool):
                raise SchemaValidationError(f"{key} must be true or false", field=key)
        elif value is not None:
            if not isinstance(value, str):
                raise SchemaValidationError(f"{key} must be a string", field=key)
            if len(value) > _SCHEDULE_MAX_LENGTH:
                raise SchemaValidationError(
                    f"{key} must be no more than {_SCHEDULE_MAX_LENGTH} characters", field=key
                )


def map_to_legacy(payload: dict[str, Any]) -> dict[str, Any]:
    """Best-effort projection of a payload onto the legacy columns.

    Unrecognized keys are skipped; the first key mapping to a column wins.
    Every legacy column is present in the result so stale values are cleared.
    """
    values: dict[str, Any] = dict.fromkeys(LEGACY_COLUMNS)
    assigned: set[str] = set()
    for key, value in payload.items():
        column = legacy_column_for(key)
        if column is None or column in assigned or value is None:
            continue
        if column == "ftp_port":
            try:
                value = int(value)
            except (TypeError, ValueError):
                continue
        else:
            value = str(value)
        values[column] = value
        assigned.add(column)
    return values


def reconstruct_from_legacy(
    record: VendorCredentialRecord, fields: list[CredentialField]
) -> dict[str, Any]:
    """Assemble a payload from legacy columns under document-shape key names.

    Key names come from the vendor type's declared fields; without a declared
    schema the column names themselves are used (the pre-migration key names).
    """
    names = [f.name for f in fields] or list(LEGACY_COLUMNS)
    payload: dict[str, Any] = {}
    for name in names:
        column = legacy_column_for(name)
        if column is None:
            continue
        value = getattr(record, column)
        if value is not None:
            payload[name] = str(value)
    return payload


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PersistenceMismatch:
    """Soft warning: keys supplied to save() that a re-load did not return."""

    organization_id: int
    vendor_type_id: int
    missing_keys: tuple[str, ...]


@dataclass
class CredentialSaveResult:
    record_id: int
    saved_keys: list[str]
    legacy_columns: list[str]
    operational_columns: list[str] = field(default_factory=list)
    mismatch: PersistenceMismatch | None = None


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------

class CredentialStore(Protocol):
    async def save(
        self, organization_id: int, vendor_type_id: int, payload: dict[str, Any]
    ) -> CredentialSaveResult: ...

    async def load(self, organization_id: int, vendor_type_id: int) -> dict[str, Any]: ...


SyncKind = Literal["catalog", "inventory"]


class DualShapeCredentialStore:
    """CredentialStore writing the JSON document and the legacy columns together."""

    def __init__(self, session: AsyncSession, *, verify: bool | None = None):
        self._session = session
        self._verify = settings.verify_credential_writes if verify is None else verify

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _repo(self, organization_id: int) -> CredentialRecordRepository:
        if organization_id is None:
            raise OrganizationRequired()
        return CredentialRecordRepository(self._session, organization_id)

    async def _declared_fields(self, vendor_type_id: int) -> list[CredentialField]:
        vendor_type = await self._session.get(SupportedVendorType, vendor_type_id)
        if vendor_type is None:
            raise NotFoundError("Vendor type", vendor_type_id)
        return parse_fields(vendor_type.credential_fields)

    async def _write_document(
        self,
        repo: CredentialRecordRepository,
        record_id: int,
        document: dict[str, Any],
        operational: dict[str, Any],
    ) -> None:
        await repo.write_columns(record_id, {"credentials": document, **operational})

    async def _write_legacy(
        self, repo: CredentialRecordRepository, record_id: int, legacy: dict[str, Any]
    ) -> None:
        await repo.write_columns(record_id, legacy)

    def _read_legacy(
        self, record: VendorCredentialRecord, fields: list[CredentialField]
    ) -> dict[str, Any]:
        return reconstruct_from_legacy(record, fields)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def save(
        self, organization_id: int, vendor_type_id: int, payload: dict[str, Any]
    ) -> CredentialSaveResult:
        repo = self._repo(organization_id)
        fields = await self._declared_fields(vendor_type_id)

        validate_operational(payload)
        document, operational = split_operational(dict(payload))
        validate_payload(document, fields)
        legacy = map_to_legacy(document)

        try:
            async with self._session.begin_nested():
                record = await repo.get_or_create(vendor_type_id)
                await self._write_document(repo, record.id, document, operational)
                await self._write_legacy(repo, record.id, legacy)
        except SQLAlchemyError as exc:
            logger.error(
                "Credential save failed for org=%s vendor_type=%s: %s",
                organization_id, vendor_type_id, exc.__class__.__name__,
            )
            raise StorageError("Could not save vendor credentials") from exc

        logger.info(
            "Saved credentials org=%s vendor_type=%s keys=%s",
            organization_id, vendor_type_id, sorted(document),
        )
        result = CredentialSaveResult(
            record_id=record.id,
            saved_keys=sorted(document),
            legacy_columns=sorted(c for c, v in legacy.items() if v is not None),
            operational_columns=sorted(operational),
        )
        if self._verify:
            result.mismatch = await self._verify_persisted(
                organization_id, vendor_type_id, set(document)
            )
        return result

    async def _verify_persisted(
        self, organization_id: int, vendor_type_id: int, expected: set[str]
    ) -> PersistenceMismatch | None:
        try:
            persisted = set(await self.load(organization_id, vendor_type_id))
        except CredentialsNotFound:
            persisted = set()

        missing = tuple(sorted(expected - persisted))
        if not missing:
            return None
        emit_event(
            PERSISTENCE_MISMATCH,
            "Credential keys missing after save",
            organization_id=organization_id,
            vendor_type_id=vendor_type_id,
            missing_keys=list(missing),
        )
        return PersistenceMismatch(organization_id, vendor_type_id, missing)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def load(self, organization_id: int, vendor_type_id: int) -> dict[str, Any]:
        repo = self._repo(organization_id)
        try:
            record = await repo.get_for_type(vendor_type_id)
        except SQLAlchemyError as exc:
            raise StorageError("Could not read vendor credentials") from exc
        if record is None:
            raise CredentialsNotFound(organization_id, vendor_type_id)

        fields = await self._declared_fields(vendor_type_id)
        document = record.credentials

        if document:
            payload = dict(document)
            if fields:
                # Declared keys the document lacks, for columns no document key covers
                covered = {legacy_column_for(key) for key in payload}
                for key, value in self._read_legacy(record, fields).items():
                    if key not in payload and legacy_column_for(key) not in covered:
                        payload[key] = value
            return payload

        legacy = self._read_legacy(record, fields)
        if legacy:
            return legacy
        if document is not None:
            return {}  # saved empty, distinct from never saved
        raise CredentialsNotFound(organization_id, vendor_type_id)

    # ------------------------------------------------------------------
    # Operational columns
    # ------------------------------------------------------------------

    async def record_sync_status(
        self,
        organization_id: int,
        vendor_type_id: int,
        kind: SyncKind,
        status: str,
        error: str | None = None,
        synced_at: datetime | None = None,
    ) -> VendorCredentialRecord:
        values: dict[str, Any] = {f"{kind}_sync_status": status}
        if kind == "catalog":
            values["catalog_sync_error"] = error
        if status == "success":
            values[f"last_{kind}_sync"] = synced_at or datetime.now(timezone.utc)
        return await self._write_operational(organization_id, vendor_type_id, values)

    async def record_connection_test(
        self, organization_id: int, vendor_type_id: int, status: str, error: str | None = None
    ) -> VendorCredentialRecord:
        return await self._write_operational(
            organization_id,
            vendor_type_id,
            {
                "connection_status": status,
                "connection_error": error,
                "last_connection_test": datetime.now(timezone.utc),
            },
        )

    async def _write_operational(
        self, organization_id: int, vendor_type_id: int, values: dict[str, Any]
    ) -> VendorCredentialRecord:
        repo = self._repo(organization_id)
        try:
            async with self._session.begin_nested():
                record = await repo.get_or_create(vendor_type_id)
                await repo.write_columns(record.id, values)
        except SQLAlchemyError as exc:
            raise StorageError("Could not update credential status") from exc
        return await repo.get_for_type(vendor_type_id)  # type: ignore[return-value]

    async def list_failed_syncs(self) -> list[VendorCredentialRecord]:
        return await FleetCredentialRepository(self._session).list_failed_syncs()

    # ------------------------------------------------------------------
    # Migration
    # ------------------------------------------------------------------

    async def backfill_documents(self) -> int:
        """Copy legacy-only rows into the document shape. Safe to re-run."""
        migrated = 0
        for record in await FleetCredentialRepository(self._session).list_legacy_only():
            fields = await self._declared_fields(record.supported_vendor_type_id)
            document = self._read_legacy(record, fields)
            if not document:
                continue
            repo = self._repo(record.organization_id)
            try:
                async with self._session.begin_nested():
                    await repo.write_columns(record.id, {"credentials": document})
            except SQLAlchemyError as exc:
                raise StorageError("Could not backfill vendor credentials") from exc
            migrated += 1
        logger.info("Backfilled %d credential document(s) from legacy columns", migrated)
        return migrated
