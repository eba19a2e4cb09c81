"""Customer / management number format endpoints.

GET  /customer/settings/number-format            effective format for target (+org)
GET  /customer/settings/number-format/{id}
POST /customer/settings/number-format
PUT  /customer/settings/number-format/{id}       optimistic, requires version
POST /customer/settings/number-format/preview    never advances counters
POST /customer/settings/number-format/generate   allocates the next value
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db
from app.schemas.number_format import (
    FormatSettingCreate,
    FormatSettingResponse,
    FormatSettingUpdate,
    GenerateRequest,
    GenerateResponse,
    PreviewRequest,
    PreviewResponse,
    Target,
)
from app.services import number_format as service

router = APIRouter()


@router.get("", response_model=FormatSettingResponse)
async def get_effective_format(
    target: Target,
    org_id: uuid.UUID | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Org override if one is enabled for org_id, else the global format."""
    return await service.get_effective_format(db, target, org_id)


@router.post("/preview", response_model=PreviewResponse)
async def preview_format(
    body: PreviewRequest,
    db: AsyncSession = Depends(get_db),
):
    return await service.preview(db, body)


@router.post("/generate", response_model=GenerateResponse)
async def generate_number(
    body: GenerateRequest,
    db: AsyncSession = Depends(get_db),
):
    value = await service.generate(db, body.target, body.org_id, body.date)
    return GenerateResponse(value=value)


@router.get("/{setting_id}", response_model=FormatSettingResponse)
async def get_format(
    setting_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await service.get_format(db, setting_id)


@router.post("", response_model=FormatSettingResponse, status_code=201)
async def create_format(
    body: FormatSettingCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a GLOBAL or ORG setting. 409 if one already exists for scope/org/target."""
    return await service.create_format(db, body)


@router.put("/{setting_id}", response_model=FormatSettingResponse)
async def update_format(
    setting_id: uuid.UUID,
    body: FormatSettingUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Patch a setting. 409 if body.version is not the stored version."""
    return await service.update_format(db, setting_id, body)
