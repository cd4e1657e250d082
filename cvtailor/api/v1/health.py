import asyncio
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from cvtailor.ai.failover import FailoverCaller, classify_failure
from cvtailor.ai.keys import key_preview
from cvtailor.ai.prompts import KEY_STATUS_PROBE_PROMPT
from cvtailor.api.deps import get_failover_caller

logger = logging.getLogger(__name__)

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check(caller: FailoverCaller = Depends(get_failover_caller)):
    return {
        "status": "healthy",
        "timestamp": _now(),
        "apiKeys": caller.describe_keys(),
    }


@router.get("/api-status", summary="API Key Status", description="Probe every configured API key.")
async def api_status(caller: FailoverCaller = Depends(get_failover_caller)):
    results = []
    for idx, key in enumerate(caller.pool):
        entry = {"id": idx + 1, "preview": key_preview(key), "active": idx == caller.current_index}
        backend = caller.backend_for(idx)
        try:
            await asyncio.wait_for(
                backend.generate(KEY_STATUS_PROBE_PROMPT, caller.default_config),
                timeout=caller.timeout_s,
            )
        except Exception as exc:  # noqa: BLE001 - probe reports per-key failures
            failure = classify_failure(exc)
            logger.warning("api_status_key_failed key=%s class=%s", idx + 1, failure or "unclassified")
            entry.update({"status": "failed", "reason": failure or "error", "error": str(exc)[:200]})
        else:
            entry["status"] = "working"
        results.append(entry)

    working = sum(1 for entry in results if entry["status"] == "working")
    return {
        "timestamp": _now(),
        "total": len(results),
        "working": working,
        "current": caller.current_index + 1,
        "keys": results,
    }
