"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  vendor_type.py      — catalog-wide SupportedVendorType + RetailVertical
  vendor_instance.py  — per-organization VendorInstance
  credential.py       — VendorCredentialRecord (document + legacy + operational columns)
  audit.py            — Immutable audit trail (never updated or deleted)
  mixins.py           — Shared TimestampMixin, SoftDeleteMixin, TenantMixin
"""

from vendor_hub.domain.audit import AuditTrail
from vendor_hub.domain.credential import VendorCredentialRecord
from vendor_hub.domain.vendor_instance import VendorInstance
from vendor_hub.domain.vendor_type import (
    RetailVertical,
    SupportedVendorType,
    supported_vendor_type_retail_verticals,
)

__all__ = [
    "AuditTrail",
    "RetailVertical",
    "SupportedVendorType",
    "VendorCredentialRecord",
    "VendorInstance",
    "supported_vendor_type_retail_verticals",
]
