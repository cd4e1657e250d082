from fastapi import APIRouter, Depends, Request

from cvtailor.ai.failover import FailoverCaller
from cvtailor.api.deps import get_failover_caller
from cvtailor.core.rate_limit import rate_limit
from cvtailor.schemas.tailor import (
    CVTextRequest,
    ParseContactResponse,
    ParseCVResponse,
    TailorRequest,
    TailorResponse,
)
from cvtailor.services.tailor_service import TailoringError, parse_contact, parse_cv, tailor_cv

router = APIRouter()


def _require_cv_text(payload: CVTextRequest) -> str:
    if not payload.cv_text.strip():
        raise TailoringError(
            "cvText is required",
            code="missing_input",
            status_code=400,
            suggestion="Provide a non-empty cvText.",
        )
    return payload.cv_text


@router.post("/ai/tailor-cv", response_model=TailorResponse)
@rate_limit()
async def tailor_cv_endpoint(
    request: Request,
    payload: TailorRequest,
    caller: FailoverCaller = Depends(get_failover_caller),
):
    _ = request
    return await tailor_cv(caller, payload.job_description, payload.cv_text)


@router.post("/parse-contact", response_model=ParseContactResponse)
@rate_limit()
async def parse_contact_endpoint(
    request: Request,
    payload: CVTextRequest,
    caller: FailoverCaller = Depends(get_failover_caller),
):
    _ = request
    contact = await parse_contact(caller, _require_cv_text(payload))
    return ParseContactResponse(contact=contact)


@router.post("/parse-cv", response_model=ParseCVResponse)
@rate_limit()
async def parse_cv_endpoint(
    request: Request,
    payload: CVTextRequest,
    caller: FailoverCaller = Depends(get_failover_caller),
):
    _ = request
    cv_data = await parse_cv(caller, _require_cv_text(payload))
    return ParseCVResponse(cv_data=cv_data)
