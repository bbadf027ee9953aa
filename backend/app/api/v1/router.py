from fastapi import APIRouter

from app.api.v1 import auth, installation_requests

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(
    installation_requests.router, prefix="/installation-requests", tags=["installation-requests"]
)
