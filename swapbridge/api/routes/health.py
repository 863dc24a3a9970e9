"""Health & Readiness Probes — liveness and readiness for the bridge API.

Invariants:
    - GET /api/v1/health/ is 200 whenever the process is up (liveness)
    - GET /api/v1/health/ready is 503 unless the database answers AND a client
      is registered for every Network (readiness)
    - Probes never call the wallet RPC or chain APIs: a slow explorer must not
      take the API out of rotation
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

import swapbridge.infrastructure.database as db_module
from swapbridge import __version__
from swapbridge.core.domain_types import Network
from swapbridge.core.network_protocols import NetworkClients
from swapbridge.infrastructure.network_registry import get_network_clients

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "swapbridge-api",
        "version": __version__,
    }


@router.get("/ready")
async def readiness_check(
    network_clients: NetworkClients = Depends(get_network_clients),
):
    manager = db_module.db_manager
    db_ok = await manager.health_check() if manager else False
    missing = [n.value for n in Network if n not in network_clients]
    checks = {
        "database": "healthy" if db_ok else "unavailable",
        "networks": {
            n.value: "missing" if n.value in missing else "configured" for n in Network
        },
    }
    if not db_ok or missing:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
