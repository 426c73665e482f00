"""Aggregates all v1 routers."""
from fastapi import APIRouter
from daycare.api.v1.admin import router as admin_router
from daycare.api.v1.auth import router as auth_router
from daycare.api.v1.children import router as children_router
from daycare.api.v1.parents import router as parents_router
from daycare.api.v1.reports import daily_router, monthly_router
from daycare.api.v1.required_items import router as required_items_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(admin_router)
router.include_router(parents_router)
router.include_router(children_router)
router.include_router(daily_router)
router.include_router(monthly_router)
router.include_router(required_items_router)
