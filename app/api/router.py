# app/api/router.py
from fastapi import APIRouter
from app.api import (
    routes_auth,
    routes_navigation,
    routes_permissions,
    routes_roles,
)

api_router = APIRouter()

api_router.include_router(routes_auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(routes_permissions.router, prefix="/permissions", tags=["permissions"])
api_router.include_router(routes_roles.router, prefix="/roles", tags=["roles"])
api_router.include_router(routes_navigation.router, prefix="/navigation", tags=["navigation"])
