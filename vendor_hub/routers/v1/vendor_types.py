"""Supported vendor type administration.

vendor_slug is accepted on create only. On update it is silently dropped by
the repository guard and logged as an immutable_field_rejected event, so
admin forms that PUT the whole record keep working.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.pagination import PaginationParams
from vendor_hub.core.response import DataResponse, ListResponse, paginated
from vendor_hub.db.base import get_db
from vendor_hub.schemas.vendor import VendorTypeCreate, VendorTypeOut, VendorTypeUpdate
from vendor_hub.services.vendor_type import VendorTypeService

router = APIRouter(prefix="/vendor-types", tags=["Vendor Types"])


@router.get("", response_model=ListResponse[VendorTypeOut])
async def list_vendor_types(
    enabled: Optional[bool] = Query(default=None, description="Filter by isEnabled"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await VendorTypeService(session).list_vendor_types(pagination, enabled=enabled)
    return paginated([VendorTypeOut.model_validate(v) for v in items], total, pagination)


@router.post("", response_model=DataResponse[VendorTypeOut], status_code=status.HTTP_201_CREATED)
async def create_vendor_type(
    body: VendorTypeCreate,
    session: AsyncSession = Depends(get_db),
):
    """Create a vendor type. vendorSlug is derived from name when omitted."""
    vendor_type = await VendorTypeService(session).create_vendor_type(body)
    return {"data": VendorTypeOut.model_validate(vendor_type)}


@router.get("/{vendor_type_id}", response_model=DataResponse[VendorTypeOut])
async def get_vendor_type(
    vendor_type_id: int,
    session: AsyncSession = Depends(get_db),
):
    vendor_type = await VendorTypeService(session).get_vendor_type(vendor_type_id)
    return {"data": VendorTypeOut.model_validate(vendor_type)}


@router.put("/{vendor_type_id}", response_model=DataResponse[VendorTypeOut])
async def update_vendor_type(
    vendor_type_id: int,
    body: VendorTypeUpdate,
    session: AsyncSession = Depends(get_db),
):
    vendor_type = await VendorTypeService(session).update_vendor_type(vendor_type_id, body)
    return {"data": VendorTypeOut.model_validate(vendor_type)}


@router.delete("/{vendor_type_id}", response_model=DataResponse[VendorTypeOut])
async def disable_vendor_type(
    vendor_type_id: int,
    session: AsyncSession = Depends(get_db),
):
    """Soft-disable. The type and its slug are never deleted."""
    vendor_type = await VendorTypeService(session).disable_vendor_type(vendor_type_id)
    return {"data": VendorTypeOut.model_validate(vendor_type)}
