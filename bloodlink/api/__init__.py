# API routes
from fastapi import APIRouter
from bloodlink.api.donors import router as donors_router
from bloodlink.api.recipients import router as recipients_router
from bloodlink.api.hospitals import router as hospitals_router
from bloodlink.api.referrals import router as referrals_router
from bloodlink.api.matches import router as matches_router
from bloodlink.api.appointments import router as appointments_router
from bloodlink.api.notifications import router as notifications_router
from bloodlink.api.users import router as users_router

# Combine all routers
router = APIRouter()
router.include_router(donors_router)
router.include_router(recipients_router)
router.include_router(hospitals_router)
router.include_router(referrals_router)
router.include_router(matches_router)
router.include_router(appointments_router)
router.include_router(notifications_router)
router.include_router(users_router)

__all__ = ["router"]
