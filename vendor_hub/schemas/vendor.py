"""Vendor catalog and vendor instance Pydantic schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import Field

from vendor_hub.schemas.common import CamelModel
from vendor_hub.schemas.credential import CredentialField

class RetailVerticalCreate(CamelModel):
    name: str
    slug: str
    sort_order: int = 0

class RetailVerticalOut(CamelModel):
    id: int
    name: str
    slug: str
    sort_order: int

class VendorTypeCreate(CamelModel):
    name: str
    vendor_slug: str | None = None  # derived from name when omitted
    vendor_short_code: str | None = None
    description: str | None = None
    api_type: str = "rest_api"
    credential_fields: list[CredentialField] = Field(default_factory=list)
    retail_vertical_ids: list[int] = Field(default_factory=list)
    is_enabled: bool = True

class VendorTypeUpdate(CamelModel):
    name: str | None = None
    # Accepted so full-record admin forms validate; always dropped before the write
    vendor_slug: str | None = None
    vendor_short_code: str | None = None
    description: str | None = None
    api_type: str | None = None
    credential_fields: list[CredentialField] | None = None
    retail_vertical_ids: list[int] | None = None
    is_enabled: bool | None = None

class VendorTypeOut(CamelModel):
    id: int
    name: str
    vendor_slug: str
    vendor_short_code: str | None = None
    description: str | None = None
    api_type: str
    credential_fields: list[CredentialField]
    retail_vertical_ids: list[int]
    is_enabled: bool
    created_at: datetime
    updated_at: datetime

class ProvisionRequest(CamelModel):
    retail_vertical_id: int | None = None

class VendorInstanceCreate(CamelModel):
    supported_vendor_type_id: int

class VendorInstanceUpdate(CamelModel):
    name: str | None = None
    vendor_short_code: str | None = None
    enabled_for_price_comparison: bool | None = None

class VendorInstanceOut(CamelModel):
    id: int
    organization_id: int
    supported_vendor_type_id: int
    vendor_slug: str
    instance_slug: str
    name: str
    vendor_short_code: str | None = None
    enabled_for_price_comparison: bool
    created_at: datetime
    updated_at: datetime
