from fastapi import APIRouter

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
async def health_check() -> bool:
    """
    Liveness probe. No database I/O: targets are checked per connection via
    /connections/test.
    """
    return True
