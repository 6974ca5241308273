"""Tests for the mutation interceptor and the @audited decorator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import BaseModel
from starlette.requests import Request

from tipbase.core.audit.interceptor import (
    AuditInterceptor,
    AuditOperation,
    audited,
    display_title,
    resolve_author,
)
from tipbase.core.audit.models import AuditAction, EntityType
from tipbase.core.audit.schemas import AuditEvent
from tipbase.core.audit.store import AuditAppendError
from tipbase.core.constants import CHANGES_KEY, DISPLAY_TITLE_KEY, NO_CHANGES_SENTINEL


PRINTER_TIP = {
    "id": 5,
    "title": "Fix printer jam",
    "category": "Hardware",
    "problem": "Paper stuck",
    "solution": "Open tray B",
    "location": None,
    "additional_details": None,
    "author_name": "Alice",
}


def make_request(query: bytes = b"", headers: dict[str, str] | None = None, user_name=None):
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/tips",
        "query_string": query,
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "state": {"user_name": user_name},
    }
    return Request(scope)


@pytest.fixture
def store():
    """Create a mock audit store that hands out sequential IDs."""
    store = MagicMock()
    counter = iter(range(1, 100))

    async def append(event: AuditEvent) -> int:
        return next(counter)

    store.append = AsyncMock(side_effect=append)
    return store


@pytest.fixture
def lookup():
    lookup = MagicMock()
    lookup.fetch_by_id = AsyncMock(return_value=dict(PRINTER_TIP))
    return lookup


@pytest.fixture
def interceptor(store, lookup):
    return AuditInterceptor(
        store,
        lookup,
        author_name="Header User",
        client_address="10.0.0.1",
        client_agent="pytest",
    )


def appended_events(store) -> list[AuditEvent]:
    return [call.args[0] for call in store.append.call_args_list]


class TestDisplayTitle:
    """Tests for display_title."""

    def test_tip_uses_title(self):
        assert display_title(EntityType.TIP, 5, PRINTER_TIP) == "Fix printer jam"

    def test_tip_without_title_uses_generated_label(self):
        assert display_title(EntityType.TIP, 5, None) == "Tip #5"
        assert display_title(EntityType.TIP, 5, {"title": ""}) == "Tip #5"

    def test_first_state_with_title_wins(self):
        result = display_title(EntityType.TIP, 5, {"id": 5}, {"title": "Older"})
        assert result == "Older"

    def test_attachment_uses_original_name(self):
        assert display_title(EntityType.ATTACHMENT, 7, {"original_name": "jam.png"}) == "jam.png"
        assert display_title(EntityType.ATTACHMENT, 7) == "Attachment #7"

    def test_comment_uses_author(self):
        """Verify comments are labelled by their author, then the actor."""
        assert display_title(EntityType.COMMENT, 3, {"author_name": "Jane"}) == "Comment by Jane"
        assert display_title(EntityType.COMMENT, 3, author_name="Bob") == "Comment by Bob"


class TestResolveAuthor:
    """Tests for actor resolution from the request."""

    def test_query_param_first(self):
        request = make_request(b"author=Bob", {"X-Author-Name": "Carol"}, user_name="Jane")
        assert resolve_author(request) == "Bob"

    def test_header_before_identity(self):
        request = make_request(headers={"X-Author-Name": "Carol"}, user_name="Jane")
        assert resolve_author(request) == "Carol"

    def test_identity(self):
        assert resolve_author(make_request(user_name="Jane")) == "Jane"

    def test_anonymous_fallback(self):
        assert resolve_author(make_request()) == "Anonymous"

    def test_blank_values_are_skipped(self):
        """Verify whitespace-only query and header values fall through."""
        request = make_request(b"author=%20%20", {"X-Author-Name": "   "}, user_name="Jane")
        assert resolve_author(request) == "Jane"

        request = make_request(b"author=", {"X-Author-Name": " "})
        assert resolve_author(request) == "Anonymous"

    def test_values_are_stripped(self):
        assert resolve_author(make_request(headers={"X-Author-Name": "  Carol "})) == "Carol"


class TestCapturePrior:
    """Tests for AuditInterceptor.capture_prior."""

    @pytest.mark.asyncio
    async def test_create_skips_lookup(self, interceptor, lookup):
        result = await interceptor.capture_prior(AuditOperation.TIP_CREATE, None)

        assert result is None
        lookup.fetch_by_id.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_fetches_by_id(self, interceptor, lookup):
        result = await interceptor.capture_prior(AuditOperation.TIP_UPDATE, 5)

        assert result == PRINTER_TIP
        lookup.fetch_by_id.assert_awaited_once_with(EntityType.TIP, 5)

    @pytest.mark.asyncio
    async def test_lookup_failure_is_swallowed(self, interceptor, lookup):
        """Verify a failing lookup never blocks the request."""
        lookup.fetch_by_id.side_effect = RuntimeError("db gone")

        assert await interceptor.capture_prior(AuditOperation.TIP_DELETE, 5) is None

    @pytest.mark.asyncio
    async def test_disabled_skips_lookup(self, store, lookup):
        interceptor = AuditInterceptor(store, lookup, enabled=False)

        assert await interceptor.capture_prior(AuditOperation.TIP_UPDATE, 5) is None
        lookup.fetch_by_id.assert_not_called()


class TestRecord:
    """Tests for AuditInterceptor.record."""

    @pytest.mark.asyncio
    async def test_create_records_new_state(self, interceptor, store):
        """Verify CREATE stores the result with a display title and no old state."""
        ids = await interceptor.record(AuditOperation.TIP_CREATE, dict(PRINTER_TIP))

        assert ids == [1]
        (event,) = appended_events(store)
        assert event.action is AuditAction.CREATE
        assert event.entity_type is EntityType.TIP
        assert event.entity_id == 5
        assert event.author_name == "Header User"
        assert event.old_state is None
        assert event.new_state[DISPLAY_TITLE_KEY] == "Fix printer jam"
        assert event.client_address == "10.0.0.1"
        assert event.client_agent == "pytest"

    @pytest.mark.asyncio
    async def test_attachment_batch_records_one_event_each(self, interceptor, store):
        """Verify K uploaded attachments produce K events with matching IDs."""
        result = {
            "message": "Successfully uploaded 3 file(s)",
            "attachments": [
                {"id": 11, "original_name": "a.png"},
                {"id": 12, "original_name": "b.pdf"},
                {"id": 13, "original_name": "c.txt"},
            ],
        }

        ids = await interceptor.record(AuditOperation.ATTACHMENT_CREATE, result)

        events = appended_events(store)
        assert len(ids) == 3
        assert [e.entity_id for e in events] == [11, 12, 13]
        assert [e.new_state[DISPLAY_TITLE_KEY] for e in events] == ["a.png", "b.pdf", "c.txt"]
        assert all(e.entity_type is EntityType.ATTACHMENT for e in events)

    @pytest.mark.asyncio
    async def test_update_describes_changes(self, interceptor, store):
        after = {**PRINTER_TIP, "category": "Printers"}

        await interceptor.record(
            AuditOperation.TIP_UPDATE, after, entity_id=5, prior_state=dict(PRINTER_TIP)
        )

        (event,) = appended_events(store)
        assert event.new_state[CHANGES_KEY] == 'Category: "Hardware" → "Printers"'
        assert event.new_state[DISPLAY_TITLE_KEY] == "Fix printer jam"
        assert event.old_state["category"] == "Hardware"
        assert event.old_state[DISPLAY_TITLE_KEY] == "Fix printer jam"

    @pytest.mark.asyncio
    async def test_update_without_changes_uses_sentinel(self, interceptor, store):
        await interceptor.record(
            AuditOperation.TIP_UPDATE,
            dict(PRINTER_TIP),
            entity_id=5,
            prior_state=dict(PRINTER_TIP),
        )

        (event,) = appended_events(store)
        assert event.new_state[CHANGES_KEY] == NO_CHANGES_SENTINEL

    @pytest.mark.asyncio
    async def test_update_without_prior_state_omits_changes(self, interceptor, store):
        await interceptor.record(AuditOperation.TIP_UPDATE, dict(PRINTER_TIP), entity_id=5)

        (event,) = appended_events(store)
        assert CHANGES_KEY not in event.new_state
        assert event.old_state == {DISPLAY_TITLE_KEY: "Fix printer jam"}

    @pytest.mark.asyncio
    async def test_delete_without_prior_state_keeps_generated_title(self, interceptor, store):
        """Verify an attachment delete records only a generated title."""
        await interceptor.record(
            AuditOperation.ATTACHMENT_DELETE,
            {"message": "Attachment deleted successfully"},
            entity_id=7,
        )

        (event,) = appended_events(store)
        assert event.action is AuditAction.DELETE
        assert event.entity_id == 7
        assert event.old_state == {DISPLAY_TITLE_KEY: "Attachment #7"}
        assert event.new_state is None

    @pytest.mark.asyncio
    async def test_body_author_overrides_request_author(self, interceptor, store):
        await interceptor.record(
            AuditOperation.TIP_CREATE, dict(PRINTER_TIP), author_name="Body Author"
        )

        (event,) = appended_events(store)
        assert event.author_name == "Body Author"

    @pytest.mark.asyncio
    async def test_append_failure_is_swallowed(self, interceptor, store):
        """Verify a failed append is logged, not raised."""
        async def failing_append(event: AuditEvent) -> int:
            raise AuditAppendError(event)

        store.append.side_effect = failing_append

        ids = await interceptor.record(AuditOperation.TIP_CREATE, dict(PRINTER_TIP))

        assert ids == []

    @pytest.mark.asyncio
    async def test_result_without_id_records_nothing(self, interceptor, store):
        ids = await interceptor.record(AuditOperation.TIP_UPDATE, {"title": "x"})

        assert ids == []
        store.append.assert_not_called()

    @pytest.mark.asyncio
    async def test_disabled_records_nothing(self, store, lookup):
        interceptor = AuditInterceptor(store, lookup, enabled=False)

        assert await interceptor.record(AuditOperation.TIP_CREATE, dict(PRINTER_TIP)) == []
        store.append.assert_not_called()


class TestCancellation:
    """A started append outlives the request task."""

    @pytest.mark.asyncio
    async def test_started_append_completes_after_cancel(self, lookup):
        started = asyncio.Event()
        release = asyncio.Event()
        finished = asyncio.Event()
        stored: list[AuditEvent] = []

        async def slow_append(event: AuditEvent) -> int:
            started.set()
            await release.wait()
            stored.append(event)
            finished.set()
            return 1

        store = MagicMock()
        store.append = AsyncMock(side_effect=slow_append)
        interceptor = AuditInterceptor(store, lookup, author_name="Alice")

        task = asyncio.create_task(
            interceptor.record(AuditOperation.TIP_CREATE, dict(PRINTER_TIP))
        )
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        release.set()
        await asyncio.wait_for(finished.wait(), timeout=1)

        (event,) = stored
        assert event.entity_id == 5
        assert event.author_name == "Alice"


class TipBody(BaseModel):
    title: str
    author_name: str | None = None


class TestAuditedDecorator:
    """Tests for the @audited route decorator."""

    @pytest.mark.asyncio
    async def test_records_after_success(self, interceptor, store, lookup):
        @audited(AuditOperation.TIP_UPDATE, id_param="tip_id")
        async def handler(tip_id: int, data: TipBody, audit: AuditInterceptor):
            return {**PRINTER_TIP, "title": data.title}

        result = await handler(tip_id=5, data=TipBody(title="Printer jam"), audit=interceptor)

        assert result["title"] == "Printer jam"
        lookup.fetch_by_id.assert_awaited_once_with(EntityType.TIP, 5)
        (event,) = appended_events(store)
        assert event.new_state[CHANGES_KEY] == 'Title: "Fix printer jam" → "Printer jam"'

    @pytest.mark.asyncio
    async def test_body_author_name_is_used(self, interceptor, store):
        @audited(AuditOperation.TIP_CREATE)
        async def handler(data: TipBody, audit: AuditInterceptor):
            return dict(PRINTER_TIP)

        await handler(data=TipBody(title="x", author_name="Dana"), audit=interceptor)

        (event,) = appended_events(store)
        assert event.author_name == "Dana"

    @pytest.mark.asyncio
    async def test_failed_handler_is_not_recorded(self, interceptor, store):
        """Verify an exception propagates and leaves no audit event."""

        @audited(AuditOperation.TIP_DELETE, id_param="tip_id")
        async def handler(tip_id: int, audit: AuditInterceptor):
            raise LookupError("missing")

        with pytest.raises(LookupError):
            await handler(tip_id=5, audit=interceptor)

        store.append.assert_not_called()

    @pytest.mark.asyncio
    async def test_without_interceptor_runs_handler(self):
        @audited(AuditOperation.TIP_CREATE)
        async def handler(value: int):
            return value * 2

        assert await handler(value=21) == 42

    def test_preserves_signature_metadata(self):
        @audited(AuditOperation.TIP_CREATE)
        async def create_tip(data: TipBody, audit: AuditInterceptor):
            """Create a tip."""

        assert create_tip.__name__ == "create_tip"
        assert create_tip.__doc__ == "Create a tip."
