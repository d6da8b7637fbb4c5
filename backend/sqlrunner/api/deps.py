from typing import Annotated

from fastapi import Depends

from sqlrunner.core.pool import PoolManager, get_pool_manager
from sqlrunner.engines import StepExecutor


def get_executor(
    pool_manager: Annotated[PoolManager, Depends(get_pool_manager)],
) -> StepExecutor:
    return StepExecutor(pool_manager)


PoolManagerDep = Annotated[PoolManager, Depends(get_pool_manager)]
ExecutorDep = Annotated[StepExecutor, Depends(get_executor)]
