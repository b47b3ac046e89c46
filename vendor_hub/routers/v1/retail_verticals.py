from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.response import DataResponse, ListResponse, complete
from vendor_hub.db.base import get_db
from vendor_hub.schemas.vendor import RetailVerticalCreate, RetailVerticalOut
from vendor_hub.services.vendor_type import VendorTypeService

router = APIRouter(prefix="/retail-verticals", tags=["Retail Verticals"])


@router.get("", response_model=ListResponse[RetailVerticalOut])
async def list_retail_verticals(session: AsyncSession = Depends(get_db)):
    items = await VendorTypeService(session).list_retail_verticals()
    return complete([RetailVerticalOut.model_validate(v) for v in items])


@router.post("", response_model=DataResponse[RetailVerticalOut], status_code=status.HTTP_201_CREATED)
async def create_retail_vertical(
    body: RetailVerticalCreate,
    session: AsyncSession = Depends(get_db),
):
    vertical = await VendorTypeService(session).create_retail_vertical(body)
    return {"data": RetailVerticalOut.model_validate(vertical)}
