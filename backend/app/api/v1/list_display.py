"""Customer list display settings (GET / PUT)."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import get_db
from app.schemas.list_display import ListDisplayResponse, ListDisplayUpsert
from app.services import list_display as service

router = APIRouter()


@router.get("", response_model=ListDisplayResponse)
async def get_list_display(
    org_id: uuid.UUID | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Org override, else global, else defaults (customer no. shown, management no. hidden)."""
    return await service.get_list_display(db, org_id)


@router.put("", response_model=ListDisplayResponse)
async def upsert_list_display(
    body: ListDisplayUpsert,
    db: AsyncSession = Depends(get_db),
):
    """Create or update the setting for scope/org. 409 on if_match_version mismatch."""
    return await service.upsert_list_display(db, body)
