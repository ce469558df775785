"""Unit tests for the collection service."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from collection_box.catalog import OriginCatalog
from collection_box.core import CollectionBoxError, ErrorKind
from collection_box.extractor import URLExtractor
from collection_box.service import CollectionService
from collection_box.storage import CollectionStore, SQLCollectionStore

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeStore(CollectionStore):
    """In-memory store that can be told to fail after N creates."""

    def __init__(self, fail_after=None):
        self.records = {}
        self.fail_after = fail_after
        self.calls = []

    async def create(self, collection):
        self.calls.append(("create", collection.url))
        if self.fail_after is not None and len(self.records) >= self.fail_after:
            raise CollectionBoxError.internal("disk I/O error")
        if collection.url in self.records:
            raise CollectionBoxError.conflict(collection.url)
        self.records[collection.url] = collection

    async def upsert_created_at(self, url, created_at):
        self.calls.append(("upsert", url))
        record = self.records.get(url)
        if record is None or record.created_at > created_at:
            return False
        record.created_at = created_at
        return True

    async def get_by_url(self, url):
        return self.records.get(url)

    async def get_by_origin(self, origin):
        return [c for c in self.records.values() if c.origin == origin]

    async def get_by_time_range(self, start, end, origin=""):
        self.calls.append(("range", start, end, origin))
        return [
            c
            for c in self.records.values()
            if start <= c.created_at <= end and (not origin or c.origin == origin)
        ]

    async def get_all_grouped_by_origin(self):
        grouped = {}
        for collection in self.records.values():
            grouped.setdefault(collection.origin, []).append(collection)
        return dict(sorted(grouped.items()))


class Clock:
    """Deterministic clock advanced by the tests."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


class TickingClock:
    """Clock that moves forward one second on every read."""

    def __init__(self, start=NOW):
        self.issued = []
        self._next = start

    def __call__(self):
        value = self._next
        self._next = value + timedelta(seconds=1)
        self.issued.append(value)
        return value


def make_service(store, clock=None):
    catalog = OriginCatalog({"bilibili.com": "Bilibili", "github.com": "GitHub"})
    return CollectionService(store, URLExtractor(catalog), clock=clock or Clock())


class TestCreateFromText:
    """Tests for CollectionService.create_from_text."""

    async def test_creates_one_record_per_pair(self):
        store = FakeStore()
        service = make_service(store)

        created = await service.create_from_text(
            "https://bilibili.com/video/1 and https://github.com/a/b"
        )

        assert [(c.url, c.origin) for c in created] == [
            ("https://bilibili.com/video/1", "Bilibili"),
            ("https://github.com/a/b", "GitHub"),
        ]
        assert all(c.created_at == NOW for c in created)
        assert len({c.id for c in created}) == 2

    async def test_empty_text_rejected(self):
        service = make_service(FakeStore())
        with pytest.raises(CollectionBoxError) as excinfo:
            await service.create_from_text("  ")
        assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
        assert excinfo.value.message == "url cannot be empty"

    async def test_extractor_errors_propagate(self):
        service = make_service(FakeStore())
        with pytest.raises(CollectionBoxError) as excinfo:
            await service.create_from_text("https://example.com/x")
        assert excinfo.value.message == "no *supported* origin found in input text"

    async def test_resubmission_refreshes_timestamp(self):
        store = FakeStore()
        clock = Clock()
        service = make_service(store, clock)

        first = await service.create_from_text("https://bilibili.com/video/1")
        clock.now = NOW + timedelta(minutes=5)
        second = await service.create_from_text("https://bilibili.com/video/1")

        assert len(store.records) == 1
        assert second[0].id == first[0].id
        assert second[0].created_at == NOW + timedelta(minutes=5)
        assert ("upsert", "https://bilibili.com/video/1") in store.calls

    async def test_internal_error_reports_partial_progress(self):
        store = FakeStore(fail_after=1)
        service = make_service(store)

        with pytest.raises(CollectionBoxError) as excinfo:
            await service.create_from_text(
                "https://bilibili.com/1 https://bilibili.com/2 https://bilibili.com/3"
            )

        err = excinfo.value
        assert err.kind is ErrorKind.INTERNAL
        assert [c.url for c in err.partial] == ["https://bilibili.com/1"]
        # nothing after the failing pair is attempted
        assert ("create", "https://bilibili.com/3") not in store.calls

    async def test_idempotent_membership_with_sql_store(self, database_url):
        store = SQLCollectionStore(database_url, db_log_level="silent")
        await store.open()
        try:
            clock = Clock()
            service = make_service(store, clock)
            text = "https://bilibili.com/video/1 www.github.com/a"

            await service.create_from_text(text)
            clock.now = NOW + timedelta(seconds=30)
            await service.create_from_text(text)

            grouped = await service.get_all_grouped_by_origin()
            urls = sorted(c.url for items in grouped.values() for c in items)
            assert urls == ["https://bilibili.com/video/1", "www.github.com/a"]
            assert all(
                c.created_at == NOW + timedelta(seconds=30)
                for items in grouped.values()
                for c in items
            )
        finally:
            await store.close()

    async def test_concurrent_submissions_share_one_record(self, database_url):
        store = SQLCollectionStore(database_url, db_log_level="silent")
        await store.open()
        try:
            clock = TickingClock()
            service = make_service(store, clock)
            url = "https://bilibili.com/video/shared"

            results = await asyncio.gather(
                *(service.create_from_text(url) for _ in range(20))
            )

            assert {created[0].id for created in results} == {results[0][0].id}
            stored = await store.get_by_origin("Bilibili")
            assert len(stored) == 1
            assert stored[0].created_at == max(clock.issued)
        finally:
            await store.close()


class TestQueries:
    """Tests for the read operations."""

    def setup_method(self):
        """Set up test fixtures."""
        self.store = FakeStore()
        self.service = make_service(self.store)

    async def test_get_by_origin_requires_label(self):
        with pytest.raises(CollectionBoxError) as excinfo:
            await self.service.get_by_origin("")
        assert excinfo.value.message == "the origin you want to search can't be empty"

    async def test_get_by_origin(self):
        await self.service.create_from_text("https://bilibili.com/1 https://github.com/x")
        results = await self.service.get_by_origin("GitHub")
        assert [c.url for c in results] == ["https://github.com/x"]

    async def test_time_range_defaults_to_last_day(self):
        await self.service.get_by_time_range()
        _, start, end, origin = self.store.calls[-1]
        assert end == NOW
        assert start == NOW - timedelta(hours=24)
        assert origin == ""

    async def test_time_range_start_defaults_relative_to_end(self):
        end = NOW - timedelta(days=3)
        await self.service.get_by_time_range(end=end)
        _, start, _, _ = self.store.calls[-1]
        assert start == end - timedelta(hours=24)

    async def test_naive_timestamps_are_utc(self):
        await self.service.get_by_time_range(
            start=datetime(2026, 3, 1, 0, 0), end=datetime(2026, 3, 1, 6, 0)
        )
        _, start, end, _ = self.store.calls[-1]
        assert start == datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)
        assert end.tzinfo is not None

    async def test_future_end_rejected(self):
        with pytest.raises(CollectionBoxError) as excinfo:
            await self.service.get_by_time_range(end=NOW + timedelta(minutes=1))
        assert excinfo.value.message == "can't get the url from future"

    async def test_start_after_end_rejected(self):
        with pytest.raises(CollectionBoxError) as excinfo:
            await self.service.get_by_time_range(start=NOW, end=NOW - timedelta(hours=1))
        assert excinfo.value.message == "start time can't be after end time"

    async def test_range_longer_than_fifteen_days_rejected(self):
        with pytest.raises(CollectionBoxError) as excinfo:
            await self.service.get_by_time_range(
                start=NOW - timedelta(days=15, seconds=1), end=NOW
            )
        assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
        assert excinfo.value.message == "time range can't be longer than 15 days"

    async def test_range_of_exactly_fifteen_days_allowed(self):
        await self.service.get_by_time_range(start=NOW - timedelta(days=15), end=NOW)
        assert self.store.calls[-1][0] == "range"
