from fastapi import APIRouter
from app.api.v1.routes.auth import router as auth_router
from app.api.v1.routes.store import router as store_router
from app.api.v1.routes.vouchers import router as vouchers_router
from app.api.v1.routes.registration import router as registration_router
from app.api.v1.routes.admin import router as admin_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth_router)
api_router.include_router(store_router)
api_router.include_router(vouchers_router)
api_router.include_router(registration_router)
api_router.include_router(admin_router)
