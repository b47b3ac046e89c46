"""SQLAlchemy ORM model backing VendorInstance credentials.

One row per (organization, vendor type). Three column groups live side by side
while the credential migration is in flight:

  document     — ``credentials`` JSON, keyed exactly as callers supply them
  legacy       — one fixed column per historically known credential field
  operational  — non-secret sync/connection state, kept out of the document so
                 fleet-wide queries stay plain column scans

Only services.credential_store reads or writes the document and legacy groups.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from vendor_hub.db.base import Base
from vendor_hub.domain.mixins import TenantMixin, TimestampMixin


class VendorCredentialRecord(Base, TenantMixin, TimestampMixin):
    __tablename__ = "vendor_credentials"
    __table_args__ = (
        UniqueConstraint(
            "organization_id", "supported_vendor_type_id", name="uq_vendor_credentials_org_type"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supported_vendor_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("supported_vendor_types.id"), nullable=False, index=True
    )

    # Document shape
    credentials: Mapped[Optional[dict[str, Any]]] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )

    # Legacy shape: FTP vendors
    ftp_server: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ftp_port: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    ftp_username: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ftp_password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    ftp_base_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # Legacy shape: API vendors
    user_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    customer_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    api_key: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    api_secret: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    sid: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    token: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    # Operational
    catalog_sync_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    catalog_sync_schedule: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    inventory_sync_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    inventory_sync_schedule: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    last_catalog_sync: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # "never_synced" | "in_progress" | "success" | "error"
    catalog_sync_status: Mapped[str] = mapped_column(
        String(20), default="never_synced", nullable=False, index=True
    )
    catalog_sync_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_inventory_sync: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    inventory_sync_status: Mapped[str] = mapped_column(
        String(20), default="never_synced", nullable=False, index=True
    )
    # "not_tested" | "online" | "offline" | "error"
    connection_status: Mapped[str] = mapped_column(
        String(20), default="not_tested", nullable=False, index=True
    )
    last_connection_test: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    connection_error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
