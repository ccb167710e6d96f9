"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from organize_folder.packages.scanner.api.v1.endpoints import app_state, entries, scan

api_router = APIRouter()
api_router.include_router(scan.router)
api_router.include_router(entries.router)
api_router.include_router(app_state.router)
