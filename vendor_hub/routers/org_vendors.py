"""Organization-scoped vendor routes — /org/{organization_id}/api/vendors/*.

Vendors are addressed by resolved identifier (instance slug, else vendor
slug), never by database id, matching paths built by
services.identifiers.build_api_path.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.ext.asyncio import AsyncSession

from vendor_hub.core.response import DataResponse, ListResponse, complete
from vendor_hub.db.base import get_db
from vendor_hub.schemas.credential import CredentialSaveOut, CredentialsIn, CredentialsOut
from vendor_hub.schemas.vendor import (
    ProvisionRequest,
    VendorInstanceCreate,
    VendorInstanceOut,
    VendorInstanceUpdate,
)
from vendor_hub.services.credentials import CredentialService
from vendor_hub.services.provisioner import VendorProvisioner
from vendor_hub.services.vendor_instance import VendorInstanceService

router = APIRouter(prefix="/org/{organization_id}/api/vendors", tags=["Organization Vendors"])


def _instances_out(instances) -> dict:
    return complete([VendorInstanceOut.model_validate(i) for i in instances])


# ------------------------------------------------------------------
# Instances
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[VendorInstanceOut])
async def list_vendors(
    organization_id: int,
    session: AsyncSession = Depends(get_db),
):
    instances = await VendorInstanceService(session, organization_id).list_instances()
    return _instances_out(instances)


@router.post("/provision", response_model=ListResponse[VendorInstanceOut])
async def provision_vendors(
    organization_id: int,
    body: ProvisionRequest,
    session: AsyncSession = Depends(get_db),
):
    """Create instances for every eligible vendor type. Safe to call repeatedly."""
    instances = await VendorProvisioner(session).provision_for_organization(
        organization_id, body.retail_vertical_id
    )
    return _instances_out(instances)


@router.post("", response_model=DataResponse[VendorInstanceOut], status_code=status.HTTP_201_CREATED)
async def add_vendor(
    organization_id: int,
    body: VendorInstanceCreate,
    session: AsyncSession = Depends(get_db),
):
    """Add another account with a supplier; gets the next free instance slug."""
    instance = await VendorProvisioner(session).add_instance(
        organization_id, body.supported_vendor_type_id
    )
    return {"data": VendorInstanceOut.model_validate(instance)}


@router.get("/{identifier}", response_model=DataResponse[VendorInstanceOut])
async def get_vendor(
    organization_id: int,
    identifier: str,
    session: AsyncSession = Depends(get_db),
):
    instance = await VendorInstanceService(session, organization_id).get_by_identifier(identifier)
    return {"data": VendorInstanceOut.model_validate(instance)}


@router.patch("/{identifier}", response_model=DataResponse[VendorInstanceOut])
async def update_vendor(
    organization_id: int,
    identifier: str,
    body: VendorInstanceUpdate,
    session: AsyncSession = Depends(get_db),
):
    instance = await VendorInstanceService(session, organization_id).update_instance(
        identifier, body
    )
    return {"data": VendorInstanceOut.model_validate(instance)}


@router.delete("/{identifier}", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect_vendor(
    organization_id: int,
    identifier: str,
    session: AsyncSession = Depends(get_db),
):
    instance = await VendorInstanceService(session, organization_id).get_by_identifier(identifier)
    await VendorProvisioner(session).disconnect_instance(organization_id, instance.id)


# ------------------------------------------------------------------
# Credentials
# ------------------------------------------------------------------

@router.get("/{identifier}/credentials", response_model=DataResponse[CredentialsOut])
async def get_credentials(
    organization_id: int,
    identifier: str,
    x_user_id: Optional[str] = Header(default=None, max_length=36),
    session: AsyncSession = Depends(get_db),
):
    """Stored credentials with secret fields masked."""
    out = await CredentialService(session, organization_id).get_credentials(identifier, x_user_id)
    return {"data": out}


@router.put("/{identifier}/credentials", response_model=DataResponse[CredentialSaveOut])
async def save_credentials(
    organization_id: int,
    identifier: str,
    body: CredentialsIn,
    x_user_id: Optional[str] = Header(default=None, max_length=36),
    session: AsyncSession = Depends(get_db),
):
    """Save credentials. Masked or blank values keep what is already stored."""
    out = await CredentialService(session, organization_id).save_credentials(
        identifier, body.credentials, x_user_id
    )
    return {"data": out}
