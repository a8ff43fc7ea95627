# vulnscan_api/api/router.py
from fastapi import APIRouter
from vulnscan_api.api.endpoints import (
    auth,
    scans,
    users,
    utils,
)

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(scans.router)
api_router.include_router(users.router)
api_router.include_router(utils.router)
