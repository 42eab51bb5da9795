from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from changemakers_api.api.envelope import success_response
from changemakers_api.api.params import require
from changemakers_api.core.exceptions import NotFoundError
from changemakers_api.services.record_store import RecordStore, get_record_store

events_router = APIRouter(tags=["events"])


@events_router.post("/event")
async def create_event(
        event: Dict[str, Any] = Body(..., description="Event document with eventDate and userId."),
        store: RecordStore = Depends(get_record_store),
):
    inserted_id = await store.create_event(event)
    return success_response(message="Event created", inserted_id=inserted_id)


@events_router.get("/event")
async def list_events(store: RecordStore = Depends(get_record_store)):
    """All events, earliest eventDate first."""
    return success_response(await store.list_events())


@events_router.get("/event/{event_id}")
async def get_event(event_id: str, store: RecordStore = Depends(get_record_store)):
    """One event with its creator merged under ``creator``."""
    event_id = require(event_id, "id")
    event = await store.get_event(event_id)
    if event is None:
        raise NotFoundError(f"Event {event_id} not found", message="Event not found")
    return success_response(event)


@events_router.get("/manage-event/{user_id}")
async def list_owned_events(user_id: str, store: RecordStore = Depends(get_record_store)):
    user_id = require(user_id, "userId")
    return success_response(await store.list_events_by_owner(user_id))


@events_router.put("/manage-event/{event_id}")
async def update_event(
        event_id: str,
        fields: Optional[Dict[str, Any]] = Body(None),
        store: RecordStore = Depends(get_record_store),
):
    """Partial update; 404 when the event is absent or nothing changed."""
    event_id = require(event_id, "id")
    updated = await store.update_event(event_id, fields)
    if updated is None:
        raise NotFoundError(
            f"Event {event_id} not found or no changes applied",
            message="Event not updated",
        )
    return success_response(updated, message="Event updated")


@events_router.delete("/manage-event/{event_id}")
async def delete_event(event_id: str, store: RecordStore = Depends(get_record_store)):
    event_id = require(event_id, "id")
    if not await store.delete_event(event_id):
        raise NotFoundError(f"Event {event_id} not found", message="Event not deleted")
    return success_response({"deletedCount": 1}, message="Event deleted")
