from fastapi import APIRouter, Depends, Request

from cvtailor.ai.failover import FailoverCaller
from cvtailor.api.deps import get_failover_caller
from cvtailor.core.rate_limit import rate_limit
from cvtailor.schemas.tailor import ATSScoreRequest, ATSScoreResponse, TailorRequest
from cvtailor.services.tailor_service import keyword_fallback_analysis, score_cv

router = APIRouter()


@router.post("/ats/score", response_model=ATSScoreResponse)
@rate_limit()
async def ats_score(
    request: Request,
    payload: ATSScoreRequest,
    caller: FailoverCaller = Depends(get_failover_caller),
):
    _ = request
    return await score_cv(caller, payload.job_description, payload.cv_text, use_ai=payload.use_ai)


@router.post("/ats/keyword-fallback", response_model=ATSScoreResponse)
@rate_limit()
async def ats_keyword_fallback(request: Request, payload: TailorRequest):
    _ = request
    return keyword_fallback_analysis(payload.cv_text, payload.job_description)
