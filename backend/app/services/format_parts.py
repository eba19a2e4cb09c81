"""Pure expansion of number format parts.

Nothing in here touches the database. Serial values come in already
allocated (generate) or are synthesized as the would-be-first value
(preview).
"""

import uuid
from dataclasses import dataclass, replace
from datetime import date

from app.core.exceptions import OrgRequiredError
from app.schemas.number_format import (
    DatePart,
    FiscalYearPart,
    FormatPart,
    LiteralPart,
    OrgCodePart,
    SerialOptions,
    SerialPart,
)


@dataclass(frozen=True)
class RenderContext:
    target: str
    on_date: date
    fiscal_year_start_month: int
    org_id: uuid.UUID | None = None
    org_code: str | None = None

    def with_org_code(self, org_code: str | None) -> "RenderContext":
        return replace(self, org_code=org_code)


@dataclass(frozen=True)
class SerialContext:
    key: str
    step: int
    start_from: int


def format_date(on_date: date, fmt: str) -> str:
    if fmt == "YYYYMMDD":
        return on_date.strftime("%Y%m%d")
    if fmt == "YYMMDD":
        return on_date.strftime("%y%m%d")
    if fmt == "YYYY-MM":
        return on_date.strftime("%Y-%m")
    return on_date.strftime("%Y-%m-%d")


def fiscal_year_of(on_date: date, start_month: int) -> int:
    """Fiscal year = calendar year if on/after start_month, else the year before."""
    if on_date.month >= start_month:
        return on_date.year
    return on_date.year - 1


def serial_context_key(ctx: RenderContext, options: SerialOptions) -> str:
    """Deterministic counter bucket for one SERIAL part, e.g. ``target=CUSTOMER_NO&date=20250310``."""
    fragments = [f"target={ctx.target}"]
    org = str(ctx.org_id) if ctx.org_id else "none"
    if options.scope == "ORG":
        fragments.append(f"org={org}")

    policy = options.reset_policy
    if policy == "DAILY":
        fragments.append(f"date={format_date(ctx.on_date, 'YYYYMMDD')}")
    elif policy == "MONTHLY":
        fragments.append(f"month={format_date(ctx.on_date, 'YYYY-MM')}")
    elif policy == "YEARLY":
        fragments.append(f"year={ctx.on_date.year:04d}")
    elif policy == "FISCAL_YEARLY":
        fragments.append(f"fy={fiscal_year_of(ctx.on_date, ctx.fiscal_year_start_month)}")
        if options.scope == "ORG" and ctx.org_id:
            fragments.append(f"org={org}")
    else:
        fragments.append("global")
    return "&".join(fragments)


def serial_contexts(parts: list[FormatPart], ctx: RenderContext) -> list[SerialContext]:
    """Distinct serial contexts in first-appearance order, deduplicated by key."""
    seen: dict[str, SerialContext] = {}
    for part in parts:
        if not isinstance(part, SerialPart):
            continue
        key = serial_context_key(ctx, part.options)
        if key not in seen:
            seen[key] = SerialContext(key, part.options.step, part.options.start_from)
    return list(seen.values())


def render_part(
    part: FormatPart,
    ctx: RenderContext,
    serial_values: dict[str, int] | None = None,
) -> str:
    if isinstance(part, LiteralPart):
        return part.options.value
    if isinstance(part, DatePart):
        return format_date(ctx.on_date, part.options.format)
    if isinstance(part, FiscalYearPart):
        start_month = part.options.start_month or ctx.fiscal_year_start_month
        fy = fiscal_year_of(ctx.on_date, start_month)
        return f"{fy % 100:02d}" if part.options.style == "YY" else str(fy)
    if isinstance(part, OrgCodePart):
        if ctx.org_id is None or ctx.org_code is None:
            raise OrgRequiredError()
        return ctx.org_code.strip()
    if isinstance(part, SerialPart):
        opts = part.options
        key = serial_context_key(ctx, opts)
        # preview has no allocation: show the first value a fresh counter would hand out
        value = (serial_values or {}).get(key, opts.start_from + opts.step)
        return str(value).zfill(opts.digits)
    raise TypeError(f"Unsupported format part: {part!r}")


def render_parts(
    parts: list[FormatPart],
    ctx: RenderContext,
    serial_values: dict[str, int] | None = None,
) -> list[tuple[str, str]]:
    """Expand every part into ``(type, fragment)`` pairs, in order."""
    return [(part.type, render_part(part, ctx, serial_values)) for part in parts]


def join_fragments(fragments: list[tuple[str, str]], joiner: str | None) -> str:
    return (joiner or "").join(value for _type, value in fragments if value != "")
