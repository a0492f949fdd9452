"""API router initializers."""

from fastapi import APIRouter


def get_api_router() -> APIRouter:
    """Construct and return the API router."""

    from bastadental.routers.analytics import router as analytics_router
    from bastadental.routers.appointments import router as appointments_router
    from bastadental.routers.auth import router as auth_router
    from bastadental.routers.clinic import router as clinic_router
    from bastadental.routers.contacts import router as contacts_router
    from bastadental.routers.dentist import router as dentist_router
    from bastadental.routers.users import router as users_router

    api_router = APIRouter()
    api_router.include_router(auth_router, tags=["auth"])
    api_router.include_router(users_router, prefix="/users", tags=["users"])
    api_router.include_router(
        appointments_router,
        prefix="/appointments",
        tags=["appointments"],
    )
    api_router.include_router(dentist_router, prefix="/dentist", tags=["dentist"])
    api_router.include_router(clinic_router, prefix="/clinic", tags=["clinic"])
    api_router.include_router(contacts_router, prefix="/contacts", tags=["contacts"])
    api_router.include_router(analytics_router, prefix="/analytics", tags=["analytics"])
    return api_router
