import os
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ.setdefault("APP_CONFIG__LOGGING__FILE_ENABLED", "false")

from changemakers_api.db.db_helper import db_helper  # noqa: E402
from changemakers_api.services.record_store import get_record_store  # noqa: E402
from main import main_app  # noqa: E402


def jsonb_sort_key(doc, field):
    """PostgreSQL jsonb ordering: null < string < number < boolean < array < object, missing last."""
    if field not in doc:
        return (6, 0)
    value = doc[field]
    if value is None:
        return (0, 0)
    if isinstance(value, str):
        return (1, value)
    if isinstance(value, bool):
        return (3, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, list):
        return (4, len(value))
    return (5, len(value))


class InMemoryRecordStore:
    """Dict-backed double with the same coroutine surface as RecordStore."""

    def __init__(self):
        self.users = {}
        self.events = {}
        self.joined = {}
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> str:
        self._clock += timedelta(seconds=1)
        return self._clock.isoformat()

    async def create_user(self, doc):
        key = str(uuid.uuid4())
        self.users[key] = dict(doc)
        return key

    async def create_event(self, doc):
        key = str(uuid.uuid4())
        self.events[key] = dict(doc)
        return key

    def _sorted(self, keys):
        docs = [{"_id": k, **self.events[k]} for k in keys if k in self.events]
        return sorted(docs, key=lambda d: jsonb_sort_key(d, "eventDate"))

    async def list_events(self):
        return self._sorted(self.events)

    async def get_event(self, event_id):
        if event_id not in self.events:
            return None
        event = {"_id": event_id, **self.events[event_id]}
        creator = next(
            ({"_id": k, **u} for k, u in self.users.items() if u.get("userId") == event.get("userId")),
            None,
        )
        event["creator"] = creator
        return event

    async def list_events_by_owner(self, user_id):
        return self._sorted(k for k, e in self.events.items() if e.get("userId") == user_id)

    async def update_event(self, event_id, fields):
        fields = {k: v for k, v in (fields or {}).items() if k != "_id"}
        event = self.events.get(event_id)
        if not fields or event is None:
            return None
        if all(event.get(k, object()) == v for k, v in fields.items()):
            return None
        event.update(fields)
        return {"_id": event_id, **event}

    async def delete_event(self, event_id):
        return self.events.pop(event_id, None) is not None

    async def join_event(self, event_id, user_id):
        entry = {"userId": user_id, "joinedAt": self._tick()}
        members = self.joined.setdefault(event_id, [])
        if entry not in members:
            members.append(entry)
        return entry

    async def list_members(self, event_id):
        return list(self.joined.get(event_id, []))

    async def list_joined_events_for_user(self, user_id):
        keys = [e for e, members in self.joined.items() if any(m["userId"] == user_id for m in members)]
        return self._sorted(keys)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest_asyncio.fixture
async def client(store):
    main_app.dependency_overrides[get_record_store] = lambda: store
    transport = ASGITransport(app=main_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    main_app.dependency_overrides.clear()


@pytest.fixture
def session(mocker):
    """Mocked AsyncSession handed to every ``db_helper.connection`` method."""
    session = AsyncMock()
    session.add = MagicMock()
    session.in_transaction = MagicMock(return_value=True)
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = session
    factory.return_value.__aexit__.return_value = False
    mocker.patch.object(db_helper, "session_factory", factory)
    return session


@pytest.fixture
def make_result():
    """Builds the Result object returned by a mocked ``session.execute``."""
    def _make(scalars=None, scalar=None, rowcount=0):
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(scalars or [])
        result.scalars.return_value.first.return_value = (scalars or [None])[0]
        result.scalar_one_or_none.return_value = scalar
        result.rowcount = rowcount
        return result
    return _make
