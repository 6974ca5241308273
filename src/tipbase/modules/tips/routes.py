"""Tip API routes."""

from typing import Annotated

from fastapi import Depends, Query, status

from tipbase.core.audit import AuditOperation, Auditor, audited
from tipbase.core.identity import get_identity_name
from tipbase.modules.tips import router
from tipbase.modules.tips.schemas import TipCreate, TipResponse, TipUpdate
from tipbase.modules.tips.services import TipSvc


IdentityName = Annotated[str | None, Depends(get_identity_name)]


@router.get(
    "",
    response_model=list[TipResponse],
    summary="List tips",
    description="List active tips, most recently updated first.",
)
async def list_tips(
    service: TipSvc,
    q: str | None = Query(None, description="Search text"),
) -> list[TipResponse]:
    """List tips, optionally filtered by a search string."""
    tips = await service.list_tips(q)
    return [TipResponse.model_validate(t) for t in tips]


@router.get(
    "/{tip_id}",
    response_model=TipResponse,
    summary="Get tip by ID",
)
async def get_tip(tip_id: int, service: TipSvc) -> TipResponse:
    """Get a single tip."""
    tip = await service.get_tip(tip_id)
    return TipResponse.model_validate(tip)


@router.post(
    "",
    response_model=TipResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create tip",
)
@audited(AuditOperation.TIP_CREATE)
async def create_tip(
    data: TipCreate,
    service: TipSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
    identity_name: IdentityName,
) -> TipResponse:
    """Create a tip."""
    tip = await service.create_tip(data, identity_name)
    return TipResponse.model_validate(tip)


@router.put(
    "/{tip_id}",
    response_model=TipResponse,
    summary="Update tip",
)
@audited(AuditOperation.TIP_UPDATE, id_param="tip_id")
async def update_tip(
    tip_id: int,
    data: TipUpdate,
    service: TipSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
) -> TipResponse:
    """Replace a tip's content."""
    tip = await service.update_tip(tip_id, data)
    return TipResponse.model_validate(tip)


@router.delete(
    "/{tip_id}",
    response_model=TipResponse,
    summary="Delete tip",
    description="Soft-delete a tip. The deleted tip is returned.",
)
@audited(AuditOperation.TIP_DELETE, id_param="tip_id")
async def delete_tip(tip_id: int, service: TipSvc, audit: Auditor) -> TipResponse:  # noqa: ARG001
    """Delete a tip."""
    tip = await service.delete_tip(tip_id)
    return TipResponse.model_validate(tip)
