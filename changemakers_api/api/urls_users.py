from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from loguru import logger

from changemakers_api.api.envelope import success_response
from changemakers_api.services.record_store import RecordStore, get_record_store

users_router = APIRouter(tags=["users"])


@users_router.post("/user")
async def create_user(
        user: Dict[str, Any] = Body(..., description="Arbitrary user document, normally carrying userId."),
        store: RecordStore = Depends(get_record_store),
):
    """Store a user document as-is and return its generated id."""
    logger.debug(f"Registering user: {user.get('userId')}")
    inserted_id = await store.create_user(user)
    return success_response(message="User created", inserted_id=inserted_id)
