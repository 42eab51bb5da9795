from typing import Optional

from fastapi import APIRouter, Depends

from changemakers_api.api.envelope import success_response
from changemakers_api.api.params import require
from changemakers_api.schemas.membership import JoinEventRequest
from changemakers_api.services.record_store import RecordStore, get_record_store

membership_router = APIRouter(tags=["membership"])


@membership_router.post("/join-event/{event_id}")
async def join_event(
        event_id: str,
        payload: Optional[JoinEventRequest] = None,
        store: RecordStore = Depends(get_record_store),
):
    """Add the user to the event's members; repeated joins add new entries."""
    event_id = require(event_id, "eventId")
    user_id = require(payload.userId if payload else None, "userId")
    entry = await store.join_event(event_id, user_id)
    return success_response(entry, message="Joined event")


@membership_router.get("/joined-event/{event_id}")
async def list_members(event_id: str, store: RecordStore = Depends(get_record_store)):
    event_id = require(event_id, "eventId")
    return success_response(await store.list_members(event_id))


@membership_router.get("/joined-events/{user_id}")
async def list_joined_events(user_id: str, store: RecordStore = Depends(get_record_store)):
    """Events whose member list contains ``user_id``."""
    user_id = require(user_id, "userId")
    return success_response(await store.list_joined_events_for_user(user_id))
