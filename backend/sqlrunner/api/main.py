from fastapi import APIRouter

from sqlrunner.api.routes import connections, sql, utils

api_router = APIRouter()
api_router.include_router(utils.router)
api_router.include_router(connections.router)
api_router.include_router(sql.router)
