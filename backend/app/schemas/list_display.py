"""List display setting request/response schemas."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from app.schemas.number_format import Scope


class ListDisplayUpsert(BaseModel):
    scope: Scope
    org_id: uuid.UUID | None = None
    show_customer_no: bool = True
    show_management_no: bool = False
    if_match_version: int | None = Field(None, ge=1)

    @model_validator(mode="after")
    def check_scope_org(self) -> "ListDisplayUpsert":
        if self.scope == "ORG" and self.org_id is None:
            raise ValueError("org_id is required when scope is ORG")
        if self.scope == "GLOBAL":
            self.org_id = None
        return self


class ListDisplayResponse(BaseModel):
    # id/version are None for the built-in default (nothing stored yet)
    id: uuid.UUID | None = None
    scope: Scope
    org_id: uuid.UUID | None = None
    show_customer_no: bool
    show_management_no: bool
    version: int | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
