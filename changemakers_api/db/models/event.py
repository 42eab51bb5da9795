from sqlalchemy import Column, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
import uuid

from changemakers_api.db.models.base import BaseORM


class Event(BaseORM):
    __tablename__ = "events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    doc = Column(JSONB, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_events_doc", "doc", postgresql_using="gin"),
        Index("idx_events_event_date", doc["eventDate"]),
    )
