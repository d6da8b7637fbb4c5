"""
Connection administration: driver catalogue, connection test, pool cache.

test never touches the cache; the cache endpoints close pooled sources.
"""

from typing import Any

from fastapi import APIRouter, HTTPException

from sqlrunner.api.deps import PoolManagerDep
from sqlrunner.core.pool import test_connection
from sqlrunner.models import DatabaseDriver
from sqlrunner.schemas import (
    ConnectionTestIn,
    ConnectionTestResult,
    DriverPublic,
    Message,
    PoolStats,
)

router = APIRouter(prefix="/connections", tags=["connections"])


@router.get("/drivers", response_model=list[DriverPublic])
def get_drivers() -> Any:
    """List predefined drivers with their URL templates."""
    return [
        DriverPublic(
            name=d.name,
            display_name=d.display_name,
            driver_class=d.value,
            url_template=d.url_template,
        )
        for d in DatabaseDriver
    ]


@router.post("/test", response_model=ConnectionTestResult)
def test_connection_params(body: ConnectionTestIn) -> Any:
    """Open a throwaway connection with the given params, validate it, close it."""
    ok, message = test_connection(
        body.driver_class, body.url, body.username, body.password
    )
    return ConnectionTestResult(ok=ok, message=message)


@router.get("/stats", response_model=PoolStats)
def get_stats(pool_manager: PoolManagerDep) -> Any:
    return PoolStats(**pool_manager.stats())


@router.delete("/cache", response_model=Message)
def clear_cache(pool_manager: PoolManagerDep) -> Any:
    """Close and evict every pooled source."""
    n = pool_manager.invalidate_all()
    return Message(message=f"Cleared {n} cached connection(s)")


@router.delete("/cache/{connection_id}", response_model=Message)
def remove_cached_connection(connection_id: str, pool_manager: PoolManagerDep) -> Any:
    """Close and evict the pooled source of one connection."""
    if not pool_manager.invalidate(connection_id):
        raise HTTPException(
            status_code=404, detail=f"No cached pool for connection '{connection_id}'"
        )
    return Message(message=f"Removed cached connection '{connection_id}'")
