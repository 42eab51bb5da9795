from sqlalchemy import Column, String, Index, text
from sqlalchemy.dialects.postgresql import UUID, JSONB
import uuid

from changemakers_api.db.models.base import BaseORM


class JoinedEvent(BaseORM):
    """Membership list of one event: ``[{"userId": ..., "joinedAt": ...}, ...]``."""
    __tablename__ = "joined_events"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(String, unique=True, nullable=False)
    members = Column(JSONB, nullable=False, default=list, server_default=text("'[]'::jsonb"))

    __table_args__ = (
        Index("idx_joined_events_members", "members", postgresql_using="gin"),
    )
