"""SQLAlchemy ORM models for the vendor catalog (supported vendor types).

A SupportedVendorType is catalog-wide and shared by every organization:
  - vendor_slug is the canonical routing key: lower-case, unique, set once at
    creation and never changed (see repositories.guards)
  - vendor_short_code / name / retail_verticals / is_enabled stay editable
  - rows are never hard-deleted; is_enabled=False retires a type but its slug
    stays reserved forever
"""

from __future__ import annotations

from typing import Any, List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Integer,
    JSON,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from vendor_hub.db.base import Base
from vendor_hub.domain.mixins import TimestampMixin


supported_vendor_type_retail_verticals = Table(
    "supported_vendor_type_retail_verticals",
    Base.metadata,
    Column(
        "supported_vendor_type_id",
        Integer,
        ForeignKey("supported_vendor_types.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "retail_vertical_id",
        Integer,
        ForeignKey("retail_verticals.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    UniqueConstraint(
        "supported_vendor_type_id", "retail_vertical_id", name="uq_vendor_type_vertical"
    ),
)


class RetailVertical(Base, TimestampMixin):
    """Classification tag deciding which vendor types an organization sees."""

    __tablename__ = "retail_verticals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class SupportedVendorType(Base, TimestampMixin):
    __tablename__ = "supported_vendor_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    vendor_slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    # Display-only abbreviation for reports/exports; no uniqueness guarantee
    vendor_short_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # "rest_api" | "soap" | "ftp" | "excel"
    api_type: Mapped[str] = mapped_column(String(20), default="rest_api", nullable=False)

    # Declared credential schema: [{name, label, type, required, aliases, validation}]
    credential_fields: Mapped[List[Any]] = mapped_column(JSON, default=list, nullable=False)

    is_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    retail_verticals: Mapped[List[RetailVertical]] = relationship(
        secondary=supported_vendor_type_retail_verticals,
        lazy="selectin",
        order_by=RetailVertical.id,
    )

    @property
    def retail_vertical_ids(self) -> list[int]:
        return [rv.id for rv in self.retail_verticals]
