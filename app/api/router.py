from fastapi import APIRouter

from app.api.routes.appointments import router as appointments_router
from app.api.routes.auth import router as auth_router
from app.api.routes.availability import router as availability_router
from app.api.routes.health import router as health_router
from app.api.routes.stylists import router as stylists_router

api_router = APIRouter()
v1_router = APIRouter(prefix="/v1")

api_router.include_router(health_router)

# Unversioned routes used by the current booking frontend.
api_router.include_router(auth_router)
api_router.include_router(stylists_router)
api_router.include_router(availability_router)
api_router.include_router(appointments_router)

# Versioned routes for long-term API evolution.
v1_router.include_router(auth_router)
v1_router.include_router(stylists_router)
v1_router.include_router(availability_router)
v1_router.include_router(appointments_router)
api_router.include_router(v1_router)
