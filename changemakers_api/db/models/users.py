from sqlalchemy import Column, Index
from sqlalchemy.dialects.postgresql import UUID, JSONB
import uuid

from changemakers_api.db.models.base import BaseORM


class User(BaseORM):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    doc = Column(JSONB, nullable=False, default=dict)

    __table_args__ = (
        Index("idx_users_doc", "doc", postgresql_using="gin"),
    )
