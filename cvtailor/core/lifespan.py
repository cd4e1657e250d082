from contextlib import asynccontextmanager
import logging

from cvtailor.ai.factory import build_failover_caller

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    # ConfigurationError propagates: the app must not serve without credentials.
    if getattr(app.state, "failover_caller", None) is None:
        app.state.failover_caller = build_failover_caller()
    caller = app.state.failover_caller
    logger.info("failover_caller_ready keys=%s", len(caller.pool))
    yield
    await caller.aclose()
