"""SQLAlchemy ORM model for one organization's binding to a vendor type."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vendor_hub.db.base import Base
from vendor_hub.domain.mixins import SoftDeleteMixin, TenantMixin, TimestampMixin
from vendor_hub.domain.vendor_type import SupportedVendorType


class VendorInstance(Base, TenantMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "vendor_instances"
    __table_args__ = (
        # Backstop against duplicate provisioning races
        UniqueConstraint(
            "organization_id",
            "supported_vendor_type_id",
            "instance_slug",
            name="uq_vendor_instance_org_type_slug",
        ),
        UniqueConstraint("organization_id", "instance_slug", name="uq_vendor_instance_org_slug"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    supported_vendor_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("supported_vendor_types.id"), nullable=False, index=True
    )

    # Copied from the vendor type at creation; never edited independently
    vendor_slug: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    # Unique within the organization, e.g. "lipseys" then "lipseys-2"
    instance_slug: Mapped[str] = mapped_column(String(60), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Organization-local display override
    vendor_short_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    enabled_for_price_comparison: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    vendor_type: Mapped[SupportedVendorType] = relationship(lazy="selectin")
