from fastapi import HTTPException, Request, status

from cvtailor.ai.failover import FailoverCaller


def get_failover_caller(request: Request) -> FailoverCaller:
    caller = getattr(request.app.state, "failover_caller", None)
    if caller is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Generation backend is not configured",
        )
    return caller
