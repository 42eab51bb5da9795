import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from sqlalchemy import delete, literal, or_, select, update
from sqlalchemy.dialects.postgresql import JSONB, insert
from sqlalchemy.ext.asyncio import AsyncSession

from changemakers_api.db.db_helper import db_helper
from changemakers_api.db.models.event import Event as DBEvent
from changemakers_api.db.models.joined_event import JoinedEvent as DBJoinedEvent
from changemakers_api.db.models.users import User as DBUser

Document = Dict[str, Any]

ID_FIELD = "_id"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_id(record_id: str) -> Optional[uuid.UUID]:
    """Store identifiers are UUIDs; anything else cannot match a record."""
    try:
        return uuid.UUID(str(record_id))
    except ValueError:
        return None


def to_document(record: Union[DBEvent, DBUser, None]) -> Optional[Document]:
    if record is None:
        return None
    doc = {k: v for k, v in (record.doc or {}).items() if k != ID_FIELD}
    return {ID_FIELD: str(record.id), **doc}


def by_event_date():
    # jsonb ordering: numbers numerically, strings by collation, missing last
    return DBEvent.doc["eventDate"].asc()


class RecordStore:
    """Users, events and event memberships kept as JSON documents."""

    @db_helper.connection
    async def create_user(self, doc: Document, *, session: AsyncSession) -> str:
        db_user = DBUser(id=uuid.uuid4(), doc=doc)
        session.add(db_user)
        await session.commit()
        logger.info(f"User created (ID: {db_user.id}, userId: {doc.get('userId')})")
        return str(db_user.id)

    @db_helper.connection
    async def create_event(self, doc: Document, *, session: AsyncSession) -> str:
        db_event = DBEvent(id=uuid.uuid4(), doc=doc)
        session.add(db_event)
        await session.commit()
        logger.info(f"Event created (ID: {db_event.id}, owner: {doc.get('userId')})")
        return str(db_event.id)

    @db_helper.connection
    async def list_events(self, *, session: AsyncSession) -> List[Document]:
        result = await session.execute(select(DBEvent).order_by(by_event_date()))
        events = [to_document(e) for e in result.scalars().all()]
        logger.debug(f"Listed {len(events)} events")
        return events

    @db_helper.connection
    async def get_event(self, event_id: str, *, session: AsyncSession) -> Optional[Document]:
        """Fetch an event and merge its creator under ``creator``.

        The creator lookup only runs once the event is known to exist.
        """
        pk = parse_id(event_id)
        if pk is None:
            logger.debug(f"Malformed event id: {event_id!r}")
            return None

        db_event = await session.get(DBEvent, pk)
        if db_event is None:
            logger.debug(f"Event not found: {event_id}")
            return None

        event = to_document(db_event)
        creator = None
        owner_id = (db_event.doc or {}).get("userId")
        if owner_id is not None:
            stmt = (
                select(DBUser)
                .where(DBUser.doc["userId"] == literal(owner_id, JSONB))
                .limit(1)
            )
            result = await session.execute(stmt)
            creator = to_document(result.scalars().first())
        event["creator"] = creator
        return event

    @db_helper.connection
    async def list_events_by_owner(self, user_id: str, *, session: AsyncSession) -> List[Document]:
        stmt = (
            select(DBEvent)
            .where(DBEvent.doc.contains({"userId": user_id}))
            .order_by(by_event_date())
        )
        result = await session.execute(stmt)
        events = [to_document(e) for e in result.scalars().all()]
        logger.debug(f"Owner {user_id} has {len(events)} events")
        return events

    async def update_event(self, event_id: str, fields: Document) -> Optional[Document]:
        """Merge ``fields`` into the event document.

        Returns the updated event, or None when the event is absent or no
        field value would change. The identifier is never overwritten.
        """
        fields = {k: v for k, v in (fields or {}).items() if k != ID_FIELD}
        if not fields:
            logger.debug(f"Empty update for event {event_id}, nothing to do")
            return None
        pk = parse_id(event_id)
        if pk is None:
            return None
        return await self._merge_event_fields(pk, fields)

    @db_helper.connection
    async def _merge_event_fields(
            self, pk: uuid.UUID, fields: Document, *, session: AsyncSession
    ) -> Optional[Document]:
        changed = or_(*(
            DBEvent.doc[key].is_distinct_from(literal(value, JSONB))
            for key, value in fields.items()
        ))
        stmt = (
            update(DBEvent)
            .where(DBEvent.id == pk, changed)
            .values(doc=DBEvent.doc.op("||")(literal(fields, JSONB)))
            .returning(DBEvent)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        db_event = result.scalars().first()
        await session.commit()
        if db_event is None:
            logger.debug(f"Event {pk} absent or unchanged")
            return None
        logger.info(f"Event updated (ID: {pk}, fields: {sorted(fields)})")
        return to_document(db_event)

    async def delete_event(self, event_id: str) -> bool:
        pk = parse_id(event_id)
        if pk is None:
            return False
        return await self._delete_event(pk)

    @db_helper.connection
    async def _delete_event(self, pk: uuid.UUID, *, session: AsyncSession) -> bool:
        stmt = delete(DBEvent).where(DBEvent.id == pk).execution_options(synchronize_session=False)
        result = await session.execute(stmt)
        await session.commit()
        deleted = result.rowcount > 0
        logger.info(f"Delete event {pk}: {'removed' if deleted else 'not found'}")
        return deleted

    @db_helper.connection
    async def join_event(self, event_id: str, user_id: str, *, session: AsyncSession) -> Document:
        """Append ``{userId, joinedAt}`` to the event's membership list.

        The membership record is created on first join. An entry is only
        skipped when the exact same pair is already present.
        """
        entry = {"userId": user_id, "joinedAt": utcnow().isoformat()}
        stmt = insert(DBJoinedEvent).values(id=uuid.uuid4(), event_id=event_id, members=[entry])
        stmt = stmt.on_conflict_do_update(
            index_elements=["event_id"],
            set_={"members": DBJoinedEvent.members.op("||")(stmt.excluded.members)},
            where=~DBJoinedEvent.members.contains(stmt.excluded.members),
        )
        await session.execute(stmt)
        await session.commit()
        logger.info(f"User {user_id} joined event {event_id}")
        return entry

    @db_helper.connection
    async def list_members(self, event_id: str, *, session: AsyncSession) -> List[Document]:
        stmt = select(DBJoinedEvent.members).where(DBJoinedEvent.event_id == event_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() or []

    @db_helper.connection
    async def list_joined_events_for_user(
            self, user_id: str, *, session: AsyncSession
    ) -> List[Document]:
        stmt = select(DBJoinedEvent.event_id).where(
            DBJoinedEvent.members.contains([{"userId": user_id}])
        )
        result = await session.execute(stmt)
        pks = [pk for pk in map(parse_id, result.scalars().all()) if pk is not None]
        if not pks:
            logger.debug(f"User {user_id} has not joined any event")
            return []

        result = await session.execute(
            select(DBEvent).where(DBEvent.id.in_(pks)).order_by(by_event_date())
        )
        events = [to_document(e) for e in result.scalars().all()]
        logger.debug(f"User {user_id} joined {len(events)} events")
        return events


record_store = RecordStore()


def get_record_store() -> RecordStore:
    return record_store
