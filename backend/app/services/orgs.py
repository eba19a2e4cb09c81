"""Read-only org lookups used by the numbering engine."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import OrgNotFoundError
from app.models.org import Org


async def get_org(db: AsyncSession, org_id: uuid.UUID) -> Org:
    result = await db.execute(select(Org).where(Org.id == org_id))
    org = result.scalar_one_or_none()
    if org is None:
        raise OrgNotFoundError(f"Organization {org_id} not found")
    return org
