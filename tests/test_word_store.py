import asyncio
import random

import pytest
from pymongo.errors import (
    AutoReconnect,
    DuplicateKeyError,
    NetworkTimeout,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from hourly_wordle.errors import StoreError, StoreErrorKind, TransientStoreError, friendly_message
from hourly_wordle.models.game import GameProgress
from hourly_wordle.models.word_record import WordRecord
from hourly_wordle.services.word_store import (
    CreateResult,
    InMemoryWordStore,
    MongoWordStore,
    RetryPolicy,
    translate_error,
    with_retry,
)

RECORD = WordRecord(word="dnN6emM=", created_at="2025-09-23T23:00:00+00:00",
                    source="client", dictionary_version="v1", hash="abc")
NO_DELAY = RetryPolicy(max_retries=3, base_delay=0.0, max_delay=0.0, jitter=0.0)


class FakeSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def flaky(kinds, result="ok"):
    calls = []

    async def fn():
        calls.append(1)
        if len(calls) <= len(kinds):
            kind = kinds[len(calls) - 1]
            raise StoreError.of(kind, f"fail {kind.value}")
        return result

    return fn, calls


def test_with_retry_recovers_from_transient_failures():
    fn, calls = flaky([StoreErrorKind.UNAVAILABLE, StoreErrorKind.DEADLINE_EXCEEDED])
    sleep = FakeSleep()
    policy = RetryPolicy(max_retries=3, base_delay=1.0, max_delay=5.0, jitter=0.0)

    assert asyncio.run(with_retry(fn, policy, sleep=sleep)) == "ok"
    assert len(calls) == 3
    assert sleep.delays == [1.0, 2.0]


def test_with_retry_caps_delay_and_adds_jitter():
    fn, _ = flaky([StoreErrorKind.INTERNAL] * 4)
    sleep = FakeSleep()
    policy = RetryPolicy(max_retries=4, base_delay=1.0, max_delay=3.0, jitter=0.5)

    asyncio.run(with_retry(fn, policy, sleep=sleep, rng=random.Random(0)))
    bases = [1.0, 2.0, 3.0, 3.0]
    assert len(sleep.delays) == 4
    for delay, base in zip(sleep.delays, bases):
        assert base <= delay < base + 0.5


@pytest.mark.parametrize("kind", [
    StoreErrorKind.PERMISSION_DENIED,
    StoreErrorKind.UNAUTHENTICATED,
    StoreErrorKind.ALREADY_EXISTS,
])
def test_with_retry_does_not_retry_permanent_failures(kind):
    fn, calls = flaky([kind])
    with pytest.raises(StoreError) as excinfo:
        asyncio.run(with_retry(fn, NO_DELAY, sleep=FakeSleep()))
    assert excinfo.value.kind == kind
    assert len(calls) == 1


def test_with_retry_gives_up_after_max_retries():
    fn, calls = flaky([StoreErrorKind.UNAVAILABLE] * 10)
    with pytest.raises(StoreError) as excinfo:
        asyncio.run(with_retry(fn, NO_DELAY, sleep=FakeSleep()))
    assert excinfo.value.kind == StoreErrorKind.MAX_RETRIES_EXCEEDED
    assert isinstance(excinfo.value.original_error, TransientStoreError)
    assert len(calls) == 4


def test_store_error_of_picks_transient_subclass():
    assert isinstance(StoreError.of(StoreErrorKind.ABORTED, "x"), TransientStoreError)
    assert not isinstance(StoreError.of(StoreErrorKind.PERMISSION_DENIED, "x"), TransientStoreError)


def test_friendly_messages_cover_every_kind():
    for kind in StoreErrorKind:
        assert friendly_message(kind)


def test_in_memory_create_is_write_once():
    store = InMemoryWordStore()

    async def scenario():
        first = await store.create("2025092323", RECORD)
        second = await store.create("2025092323", WordRecord("b3RoZXI=", "2025-09-23T23:00:00Z", "client", "v1"))
        return first, second, await store.get("2025092323")

    first, second, doc = asyncio.run(scenario())
    assert first == CreateResult.CREATED
    assert second == CreateResult.ALREADY_EXISTS
    assert doc == RECORD.to_document()


def test_in_memory_get_and_exists():
    store = InMemoryWordStore()
    assert asyncio.run(store.get("2025092323")) is None
    assert not asyncio.run(store.exists("2025092323"))
    asyncio.run(store.create("2025092323", RECORD))
    assert asyncio.run(store.exists("2025092323"))


def test_in_memory_injected_transient_failure_is_retried():
    store = InMemoryWordStore(retry_policy=NO_DELAY)
    store.inject_failure("get", StoreErrorKind.UNAVAILABLE, times=2)
    assert asyncio.run(store.get("2025092323")) is None
    assert store.calls.count(("get", "2025092323")) == 3


def test_in_memory_injected_permanent_failure_propagates():
    store = InMemoryWordStore(retry_policy=NO_DELAY)
    store.inject_failure("create", StoreErrorKind.PERMISSION_DENIED)
    with pytest.raises(StoreError) as excinfo:
        asyncio.run(store.create("2025092323", RECORD))
    assert excinfo.value.kind == StoreErrorKind.PERMISSION_DENIED
    assert "2025092323" not in store.records


def test_in_memory_save_progress():
    store = InMemoryWordStore()
    progress = GameProgress("2025092323", ["CRANE"], "won", "2025-09-23T23:10:00+00:00")
    doc_id = asyncio.run(store.save_progress(progress))
    assert store.progress[doc_id]["hourId"] == "2025092323"
    assert store.progress[doc_id]["gameStatus"] == "won"
    assert "createdAt" in store.progress[doc_id]
    assert asyncio.run(store.ping())


@pytest.mark.parametrize("error, kind", [
    (DuplicateKeyError("E11000 duplicate key", 11000), StoreErrorKind.ALREADY_EXISTS),
    (OperationFailure("not authorized", 13), StoreErrorKind.PERMISSION_DENIED),
    (OperationFailure("auth failed", 18), StoreErrorKind.UNAUTHENTICATED),
    (OperationFailure("rate too large", 16500), StoreErrorKind.RESOURCE_EXHAUSTED),
    (OperationFailure("something odd", 2), StoreErrorKind.INTERNAL),
    (AutoReconnect("connection reset"), StoreErrorKind.UNAVAILABLE),
    (ServerSelectionTimeoutError("no servers"), StoreErrorKind.UNAVAILABLE),
    (NetworkTimeout("timed out"), StoreErrorKind.DEADLINE_EXCEEDED),
])
def test_translate_error(error, kind):
    translated = translate_error(error)
    assert translated.kind == kind
    assert translated.original_error is error


class FakeInsertResult:
    def __init__(self, inserted_id):
        self.inserted_id = inserted_id


class FakeCollection:
    def __init__(self):
        self.docs = {}
        self.failures = []

    def _maybe_fail(self):
        if self.failures:
            raise self.failures.pop(0)

    def find_one(self, query, projection=None):
        self._maybe_fail()
        doc = self.docs.get(query["_id"])
        if doc is None:
            return None
        return {k: v for k, v in doc.items() if k != "_id"}

    def insert_one(self, doc):
        self._maybe_fail()
        # pymongo sets _id on the caller's dict
        doc_id = doc.setdefault("_id", f"generated-{len(self.docs)}")
        if doc_id in self.docs:
            raise DuplicateKeyError("E11000 duplicate key", 11000)
        self.docs[doc_id] = dict(doc)
        return FakeInsertResult(doc_id)

    def count_documents(self, query, limit=0):
        self._maybe_fail()
        return 1 if query["_id"] in self.docs else 0


class LostAckCollection(FakeCollection):
    """The first insert lands but the client only sees a dropped connection."""

    def __init__(self):
        super().__init__()
        self.acks_lost = 0

    def insert_one(self, doc):
        result = super().insert_one(doc)
        if not self.acks_lost:
            self.acks_lost += 1
            raise AutoReconnect("connection reset after write")
        return result


class FakeDatabase:
    def __init__(self):
        self.collections = {}

    def __getitem__(self, name):
        return self.collections.setdefault(name, FakeCollection())


class FakeAdmin:
    def __init__(self, healthy=True):
        self.healthy = healthy

    def command(self, name):
        if not self.healthy:
            raise ServerSelectionTimeoutError("no servers")
        return {"ok": 1}


class FakeMongoClient:
    def __init__(self, healthy=True):
        self.databases = {}
        self.admin = FakeAdmin(healthy)
        self.closed = False

    def __getitem__(self, name):
        return self.databases.setdefault(name, FakeDatabase())

    def close(self):
        self.closed = True


@pytest.fixture
def mongo_store():
    return MongoWordStore(client=FakeMongoClient(), retry_policy=NO_DELAY)


def test_mongo_store_create_if_absent(mongo_store):
    async def scenario():
        before = await mongo_store.get("2025092323")
        created = await mongo_store.create("2025092323", RECORD)
        again = await mongo_store.create("2025092323", RECORD)
        return before, created, again, await mongo_store.get("2025092323")

    before, created, again, doc = asyncio.run(scenario())
    assert before is None
    assert created == CreateResult.CREATED
    assert again == CreateResult.ALREADY_EXISTS
    assert doc == RECORD.to_document()
    assert mongo_store.words_collection.docs["2025092323"]["_id"] == "2025092323"


def test_mongo_store_retries_transient_errors(mongo_store):
    mongo_store.words_collection.failures = [AutoReconnect("reset"), NetworkTimeout("slow")]
    assert asyncio.run(mongo_store.get("2025092323")) is None
    assert mongo_store.words_collection.failures == []


def test_mongo_store_raises_permanent_errors(mongo_store):
    mongo_store.words_collection.failures = [OperationFailure("not authorized", 13)]
    with pytest.raises(StoreError) as excinfo:
        asyncio.run(mongo_store.create("2025092323", RECORD))
    assert excinfo.value.kind == StoreErrorKind.PERMISSION_DENIED


def test_mongo_store_exists_and_progress(mongo_store):
    asyncio.run(mongo_store.create("2025092323", RECORD))
    assert asyncio.run(mongo_store.exists("2025092323"))
    assert not asyncio.run(mongo_store.exists("2025092322"))

    progress_id = asyncio.run(mongo_store.save_progress(GameProgress("2025092323", ["CRANE"], "playing")))
    assert progress_id in mongo_store.progress_collection.docs


def test_mongo_store_ping():
    assert asyncio.run(MongoWordStore(client=FakeMongoClient()).ping())
    assert not asyncio.run(MongoWordStore(client=FakeMongoClient(healthy=False)).ping())


def test_mongo_store_close_connection():
    client = FakeMongoClient()
    MongoWordStore(client=client).close_connection()
    assert client.closed


def test_mongo_store_progress_survives_lost_ack(mongo_store):
    mongo_store.progress_collection = LostAckCollection()
    progress = GameProgress("2025092323", ["CRANE", "SLATE"], "won")

    progress_id = asyncio.run(mongo_store.save_progress(progress))
    assert mongo_store.progress_collection.acks_lost == 1
    assert list(mongo_store.progress_collection.docs) == [progress_id]
    assert mongo_store.progress_collection.docs[progress_id]["gameStatus"] == "won"
