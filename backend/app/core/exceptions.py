"""RFC 7807 Problem Details error handling."""

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


class ProblemDetailError(Exception):
    """Raise for RFC 7807 problem+json responses."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: str,
        error_type: str | None = None,
    ):
        super().__init__(detail)
        self.status = status
        self.title = title
        self.detail = detail
        self.error_type = error_type or "about:blank"


# ---------------------------------------------------------------------------
# Number format domain errors
# ---------------------------------------------------------------------------


class FormatNotFoundError(ProblemDetailError):
    def __init__(self, detail: str = "Number format not found"):
        super().__init__(404, "Number format not found", detail, "format-not-found")


class OrgNotFoundError(ProblemDetailError):
    def __init__(self, detail: str = "Organization not found"):
        super().__init__(404, "Organization not found", detail, "org-not-found")


class OrgRequiredError(ProblemDetailError):
    def __init__(self, detail: str = "org_id is required for ORG_CODE"):
        super().__init__(400, "Organization required", detail, "org-required")


class FormatConflictError(ProblemDetailError):
    def __init__(self, detail: str = "Setting already exists for scope/org/target"):
        super().__init__(409, "Number format conflict", detail, "format-conflict")


class VersionConflictError(ProblemDetailError):
    def __init__(self, detail: str = "Version mismatch"):
        super().__init__(409, "Version conflict", detail, "version-conflict")


class FormatDisabledError(ProblemDetailError):
    def __init__(self, detail: str = "Number format is disabled"):
        super().__init__(409, "Number format disabled", detail, "format-disabled")


class SerialAllocationError(ProblemDetailError):
    """Allocation aborted and rolled back; safe for the caller to retry."""

    def __init__(self, detail: str = "Serial allocation failed"):
        super().__init__(503, "Serial allocation failed", detail, "serial-allocation-failed")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def problem_detail_handler(request: Request, exc: ProblemDetailError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status,
        content={
            "type": exc.error_type,
            "title": exc.title,
            "status": exc.status,
            "detail": exc.detail,
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "type": "about:blank",
            "title": exc.detail if isinstance(exc.detail, str) else "Error",
            "status": exc.status_code,
            "detail": exc.detail,
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "type": "about:blank",
            "title": "Validation Error",
            "status": 422,
            "detail": jsonable_encoder(exc.errors()),
            "instance": str(request.url.path),
        },
        media_type="application/problem+json",
    )
