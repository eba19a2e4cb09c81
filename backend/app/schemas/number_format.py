"""Number format request/response schemas.

A format is an ordered list of parts. Each part is a tagged union keyed on
``type``; the options of each kind are validated here, before anything is
persisted.
"""

import datetime as dt
import re
import uuid
from typing import Annotated, Literal

from pydantic import (
    AfterValidator,
    BeforeValidator,
    BaseModel,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)

from app.core.config import settings

Target = Literal["CUSTOMER_NO", "MANAGEMENT_NO"]
Scope = Literal["GLOBAL", "ORG"]
ResetPolicy = Literal["NEVER", "DAILY", "MONTHLY", "YEARLY", "FISCAL_YEARLY"]
# FISCAL_YEAR is accepted for compatibility but does not change the counter context.
SerialScope = Literal["GLOBAL", "ORG", "FISCAL_YEAR"]
DateFormat = Literal["YYYYMMDD", "YYMMDD", "YYYY-MM", "YYYY-MM-DD"]

# Largest value a 12-digit serial can show
MAX_SERIAL = 10**12 - 1

_HALFWIDTH_RE = re.compile(r"^[\x20-\x7E]*$")


def _halfwidth(v: str) -> str:
    v = v.strip()
    if not _HALFWIDTH_RE.match(v):
        raise ValueError("Must contain halfwidth ASCII characters only")
    return v


def _slash_date(v: object) -> object:
    """Accept YYYY/MM/DD as well as YYYY-MM-DD."""
    if isinstance(v, str):
        return v.replace("/", "-")
    return v


HalfwidthStr = Annotated[str, AfterValidator(_halfwidth)]
InputDate = Annotated[dt.date, BeforeValidator(_slash_date)]


# ---------------------------------------------------------------------------
# Part options
# ---------------------------------------------------------------------------


class LiteralOptions(BaseModel):
    value: HalfwidthStr = ""


class DateOptions(BaseModel):
    format: DateFormat = "YYYYMMDD"


class FiscalYearOptions(BaseModel):
    style: Literal["YYYY", "YY"] = "YYYY"
    # None = use the setting's fiscal_year_start_month
    start_month: int | None = Field(None, ge=1, le=12)


class OrgCodeOptions(BaseModel):
    pass


class SerialOptions(BaseModel):
    digits: int = Field(4, ge=1, le=12)
    reset_policy: ResetPolicy = "NEVER"
    scope: SerialScope = "GLOBAL"
    start_from: int = Field(0, ge=0, le=MAX_SERIAL)
    step: int = Field(1, gt=0, le=MAX_SERIAL)


# ---------------------------------------------------------------------------
# Parts (discriminated on "type")
# ---------------------------------------------------------------------------


class LiteralPart(BaseModel):
    type: Literal["LITERAL"]
    options: LiteralOptions = Field(default_factory=LiteralOptions)


class DatePart(BaseModel):
    type: Literal["DATE"]
    options: DateOptions = Field(default_factory=DateOptions)


class FiscalYearPart(BaseModel):
    type: Literal["FISCAL_YEAR"]
    options: FiscalYearOptions = Field(default_factory=FiscalYearOptions)


class OrgCodePart(BaseModel):
    type: Literal["ORG_CODE"]
    options: OrgCodeOptions = Field(default_factory=OrgCodeOptions)


class SerialPart(BaseModel):
    type: Literal["SERIAL"]
    options: SerialOptions = Field(default_factory=SerialOptions)


FormatPart = Annotated[
    LiteralPart | DatePart | FiscalYearPart | OrgCodePart | SerialPart,
    Field(discriminator="type"),
]

_parts_adapter = TypeAdapter(list[FormatPart])


def parse_parts(raw: list) -> list[FormatPart]:
    """Load stored JSON parts back into typed part models."""
    return _parts_adapter.validate_python(raw)


def dump_parts(parts: list[FormatPart]) -> list[dict]:
    """Serialize parts for the JSON column, with every option spelled out."""
    return [p.model_dump() for p in parts]


# ---------------------------------------------------------------------------
# Settings CRUD
# ---------------------------------------------------------------------------


class FormatSettingCreate(BaseModel):
    target: Target
    scope: Scope
    org_id: uuid.UUID | None = None
    enabled: bool = True
    parts: list[FormatPart] = Field(..., min_length=1)
    joiner: HalfwidthStr | None = Field(None, max_length=64)
    fiscal_year_start_month: int = Field(
        default_factory=lambda: settings.DEFAULT_FISCAL_YEAR_START_MONTH, ge=1, le=12
    )
    description: str | None = None

    @field_validator("joiner")
    @classmethod
    def empty_joiner_is_none(cls, v: str | None) -> str | None:
        return v or None

    @model_validator(mode="after")
    def check_scope_org(self) -> "FormatSettingCreate":
        if self.scope == "ORG" and self.org_id is None:
            raise ValueError("org_id is required when scope is ORG")
        if self.scope == "GLOBAL":
            self.org_id = None
        return self


class FormatSettingUpdate(BaseModel):
    """PUT body: version is required, everything else optional (patch semantics)."""

    version: int = Field(..., ge=1)
    enabled: bool | None = None
    parts: list[FormatPart] | None = Field(None, min_length=1)
    joiner: HalfwidthStr | None = Field(None, max_length=64)
    fiscal_year_start_month: int | None = Field(None, ge=1, le=12)
    description: str | None = None

    @field_validator("joiner")
    @classmethod
    def empty_joiner_is_none(cls, v: str | None) -> str | None:
        return v or None


class FormatSettingResponse(BaseModel):
    id: uuid.UUID
    target: Target
    scope: Scope
    org_id: uuid.UUID | None = None
    enabled: bool
    parts: list[FormatPart]
    joiner: str | None = None
    fiscal_year_start_month: int
    description: str | None = None
    version: int
    created_at: dt.datetime | None = None
    updated_at: dt.datetime | None = None

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# Preview / generate
# ---------------------------------------------------------------------------


class PreviewSample(BaseModel):
    date: InputDate | None = None
    org_id: uuid.UUID | None = None


class PreviewRequest(BaseModel):
    """Preview a stored setting (``id``) or an unsaved draft (``config``)."""

    id: uuid.UUID | None = None
    config: FormatSettingCreate | None = None
    sample: PreviewSample = Field(default_factory=PreviewSample)

    @model_validator(mode="after")
    def check_id_or_config(self) -> "PreviewRequest":
        if (self.id is None) == (self.config is None):
            raise ValueError("Exactly one of id or config is required")
        return self


class RenderedPart(BaseModel):
    type: str
    value: str


class PreviewResponse(BaseModel):
    sample: str
    parts: list[RenderedPart]


class GenerateRequest(BaseModel):
    target: Target
    org_id: uuid.UUID | None = None
    date: InputDate | None = None


class GenerateResponse(BaseModel):
    value: str
