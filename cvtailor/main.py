import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from cvtailor.api.v1.ats import router as ats_router
from cvtailor.api.v1.health import router as health_router
from cvtailor.api.v1.keys import router as keys_router
from cvtailor.api.v1.tailor import router as tailor_router
from cvtailor.core.cors import cors_allow_origin_regex, cors_allowed_origins
from cvtailor.core.rate_limit import limiter
from cvtailor.core.config import settings
from dotenv import load_dotenv
from cvtailor.core.lifespan import lifespan
from cvtailor.services.tailor_service import TailoringError

load_dotenv()
logging.basicConfig(level=settings.log_level, format="%(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

logger = logging.getLogger(__name__)

app = FastAPI(title="CV Tailor API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allowed_origins(),
    allow_origin_regex=cors_allow_origin_regex(),
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


@app.exception_handler(TailoringError)
async def tailoring_error_handler(request: Request, exc: TailoringError):
    logger.warning("request_failed path=%s code=%s status=%s", request.url.path, exc.code, exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(keys_router, prefix="/v1", tags=["Keys"])
app.include_router(tailor_router, prefix="/v1", tags=["Tailor"])
app.include_router(ats_router, prefix="/v1", tags=["ATS"])
