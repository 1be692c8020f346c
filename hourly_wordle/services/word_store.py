"""
Word Store Service

Document store holding one write-once record per hour bucket. The only
coordination primitive is an atomic create-if-absent per key; losing a
creation race is reported as ``CreateResult.ALREADY_EXISTS``, not an error.

Two implementations:
- MongoWordStore: MongoDB via pymongo, ``_id`` is the hour id
- InMemoryWordStore: single-process store for development and tests
"""

import asyncio
import random
import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from pymongo import MongoClient
from pymongo.errors import (
    AutoReconnect,
    ConnectionFailure,
    DuplicateKeyError,
    ExecutionTimeout,
    NetworkTimeout,
    OperationFailure,
    PyMongoError,
    WTimeoutError,
)
from pymongo.server_api import ServerApi

from ..errors import StoreError, StoreErrorKind
from ..models.game import GameProgress
from ..models.word_record import WordRecord
from ..utils.game_logger import game_logger

T = TypeVar('T')


class CreateResult(Enum):
    """Outcome of a create-if-absent write."""
    CREATED = "created"
    ALREADY_EXISTS = "already-exists"


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff with jitter, in seconds."""
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 5.0
    jitter: float = 1.0

    def delay_for(self, attempt: int, rng: random.Random) -> float:
        delay = min(self.base_delay * (2 ** attempt), self.max_delay)
        return delay + rng.random() * self.jitter

    @classmethod
    def from_config(cls, config_class) -> "RetryPolicy":
        return cls(
            max_retries=config_class.STORE_MAX_RETRIES,
            base_delay=config_class.STORE_BASE_DELAY,
            max_delay=config_class.STORE_MAX_DELAY,
            jitter=config_class.STORE_JITTER,
        )


async def with_retry(fn: Callable[[], Awaitable[T]],
                     policy: RetryPolicy = RetryPolicy(),
                     sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
                     rng: Optional[random.Random] = None) -> T:
    """
    Run ``fn`` and retry transient StoreErrors with exponential backoff.

    Non-transient kinds (already-exists, permission-denied, unauthenticated)
    are raised on the first failure. Once retries are exhausted a
    StoreError of kind MAX_RETRIES_EXCEEDED is raised.
    """
    rng = rng or random.Random()
    last_error: Optional[StoreError] = None

    for attempt in range(policy.max_retries + 1):
        try:
            return await fn()
        except StoreError as e:
            if not e.kind.is_transient:
                raise
            last_error = e

        if attempt == policy.max_retries:
            break

        delay = policy.delay_for(attempt, rng)
        game_logger.logger.warning(
            f"Store operation failed ({last_error.kind.value}), retry {attempt + 1} in {delay:.2f}s"
        )
        await sleep(delay)

    raise StoreError(
        f"Operation failed after {policy.max_retries + 1} attempts: {last_error}",
        StoreErrorKind.MAX_RETRIES_EXCEEDED,
        last_error,
    )


class WordStore(ABC):
    """Async key-value document store keyed by hour id."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Raw record document for ``key``, or None when absent."""

    @abstractmethod
    async def create(self, key: str, record: WordRecord) -> CreateResult:
        """Atomically create ``key`` if absent. Never overwrites."""

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    @abstractmethod
    async def save_progress(self, progress: GameProgress) -> str:
        """Store a game progress document, returning its id."""

    @abstractmethod
    async def ping(self) -> bool:
        """True if the store answers."""


def translate_error(error: PyMongoError) -> StoreError:
    """Map a pymongo failure onto a StoreErrorKind."""
    if isinstance(error, DuplicateKeyError):
        kind = StoreErrorKind.ALREADY_EXISTS
    elif isinstance(error, (ExecutionTimeout, WTimeoutError, NetworkTimeout)):
        kind = StoreErrorKind.DEADLINE_EXCEEDED
    elif isinstance(error, (AutoReconnect, ConnectionFailure)):
        kind = StoreErrorKind.UNAVAILABLE
    elif isinstance(error, OperationFailure):
        if error.code == 13:
            kind = StoreErrorKind.PERMISSION_DENIED
        elif error.code == 18:
            kind = StoreErrorKind.UNAUTHENTICATED
        elif error.code == 16500:
            kind = StoreErrorKind.RESOURCE_EXHAUSTED
        elif error.has_error_label('TransientTransactionError'):
            kind = StoreErrorKind.ABORTED
        else:
            kind = StoreErrorKind.INTERNAL
    else:
        kind = StoreErrorKind.INTERNAL
    return StoreError.of(kind, f"MongoDB operation failed: {error}", error)


class MongoWordStore(WordStore):
    """
    MongoDB-backed word store.

    Word records live in ``words`` with ``_id`` set to the hour id, so the
    primary key index makes ``insert_one`` an atomic create-if-absent.
    Blocking pymongo calls run in a worker thread.
    """

    def __init__(self, mongo_uri: Optional[str] = None, db_name: str = 'hourly_wordle',
                 words_collection: str = 'words', progress_collection: str = 'guesses',
                 retry_policy: RetryPolicy = RetryPolicy(),
                 client: Optional[MongoClient] = None):
        """
        Initialize the store with a MongoDB connection.

        Args:
            mongo_uri: MongoDB connection string (ignored if ``client`` is given)
            db_name: Database name
            words_collection: Collection holding hourly word records
            progress_collection: Collection for game progress analytics
            retry_policy: Backoff policy for transient failures
            client: Pre-built client, mainly for tests
        """
        self.client = client or MongoClient(mongo_uri, server_api=ServerApi('1'))
        self.db = self.client[db_name]
        self.words_collection = self.db[words_collection]
        self.progress_collection = self.db[progress_collection]
        self.retry_policy = retry_policy

    async def _call(self, fn: Callable[[], T]) -> T:
        def run():
            try:
                return fn()
            except PyMongoError as e:
                raise translate_error(e) from e

        return await with_retry(lambda: asyncio.to_thread(run), self.retry_policy)

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        return await self._call(lambda: self.words_collection.find_one({'_id': key}, {'_id': 0}))

    async def create(self, key: str, record: WordRecord) -> CreateResult:
        def insert():
            try:
                self.words_collection.insert_one({'_id': key, **record.to_document()})
            except DuplicateKeyError:
                return CreateResult.ALREADY_EXISTS
            return CreateResult.CREATED

        return await self._call(insert)

    async def exists(self, key: str) -> bool:
        count = await self._call(lambda: self.words_collection.count_documents({'_id': key}, limit=1))
        return count > 0

    async def save_progress(self, progress: GameProgress) -> str:
        doc = {**progress.to_document(), 'createdAt': datetime.now(timezone.utc).isoformat()}

        def insert():
            # insert_one sets doc['_id'], so a retry after a lost ack hits our own write
            try:
                return self.progress_collection.insert_one(doc).inserted_id
            except DuplicateKeyError:
                return doc['_id']

        return str(await self._call(insert))

    async def ping(self) -> bool:
        try:
            await asyncio.to_thread(self.client.admin.command, 'ping')
            return True
        except PyMongoError as e:
            game_logger.logger.error(f"MongoDB connection test failed: {e}")
            return False

    def close_connection(self):
        """Close the MongoDB connection."""
        if self.client:
            self.client.close()


class InMemoryWordStore(WordStore):
    """
    Dict-backed store for one process.

    Create-if-absent is atomic because no ``await`` separates the key
    check from the insert. ``latency`` adds a suspension point before each
    operation so concurrent callers interleave; ``inject_failure`` queues
    store errors for an operation.
    """

    def __init__(self, retry_policy: RetryPolicy = RetryPolicy(0, 0.0, 0.0, 0.0), latency: float = 0.0):
        self.records: Dict[str, Dict[str, Any]] = {}
        self.progress: Dict[str, Dict[str, Any]] = {}
        self.retry_policy = retry_policy
        self.latency = latency
        self.calls: List[Tuple[str, str]] = []
        self._lock = threading.Lock()
        self._failures: Dict[str, List[StoreErrorKind]] = {}

    def inject_failure(self, operation: str, kind: StoreErrorKind, times: int = 1):
        """Make the next ``times`` calls of ``operation`` ('get' or 'create') fail."""
        self._failures.setdefault(operation, []).extend([kind] * times)

    async def _attempt(self, operation: str, key: str, fn: Callable[[], T]) -> T:
        async def run():
            await asyncio.sleep(self.latency)
            self.calls.append((operation, key))
            queued = self._failures.get(operation)
            if queued:
                kind = queued.pop(0)
                raise StoreError.of(kind, f"Injected {kind.value} failure on {operation}")
            return fn()

        return await with_retry(run, self.retry_policy)

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        def read():
            doc = self.records.get(key)
            return dict(doc) if doc is not None else None

        return await self._attempt('get', key, read)

    async def create(self, key: str, record: WordRecord) -> CreateResult:
        def insert():
            with self._lock:
                if key in self.records:
                    return CreateResult.ALREADY_EXISTS
                self.records[key] = record.to_document()
            return CreateResult.CREATED

        return await self._attempt('create', key, insert)

    async def save_progress(self, progress: GameProgress) -> str:
        doc_id = uuid.uuid4().hex
        self.progress[doc_id] = {**progress.to_document(), 'createdAt': datetime.now(timezone.utc).isoformat()}
        return doc_id

    async def ping(self) -> bool:
        return True


def create_word_store(config_class) -> WordStore:
    """Build the store selected by configuration."""
    policy = RetryPolicy.from_config(config_class)
    if config_class.MONGO_URI:
        return MongoWordStore(
            config_class.MONGO_URI,
            db_name=config_class.MONGO_DB_NAME,
            words_collection=config_class.WORDS_COLLECTION,
            progress_collection=config_class.PROGRESS_COLLECTION,
            retry_policy=policy,
        )
    game_logger.logger.warning("MONGO_URI not configured, using in-memory word store")
    return InMemoryWordStore(retry_policy=policy)
