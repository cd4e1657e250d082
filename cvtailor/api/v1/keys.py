from fastapi import APIRouter, Depends

from cvtailor.ai.failover import FailoverCaller
from cvtailor.api.deps import get_failover_caller

router = APIRouter()


@router.post("/switch-key", summary="Switch API Key", description="Rotate to the next configured API key.")
async def switch_key(caller: FailoverCaller = Depends(get_failover_caller)):
    old_key = caller.current_index + 1
    switched = await caller.rotate()
    new_key = caller.current_index + 1
    return {
        "success": switched,
        "message": f"Switched from key {old_key} to key {new_key}" if switched else "Only one API key configured",
        "oldKey": old_key,
        "newKey": new_key,
        "totalKeys": len(caller.pool),
    }
