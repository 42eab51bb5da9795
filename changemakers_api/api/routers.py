from fastapi import APIRouter

from changemakers_api.api.urls_events import events_router
from changemakers_api.api.urls_membership import membership_router
from changemakers_api.api.urls_users import users_router

main_router = APIRouter()

# Register API routers ---------------------------------------
main_router.include_router(users_router)
main_router.include_router(events_router)
main_router.include_router(membership_router)
