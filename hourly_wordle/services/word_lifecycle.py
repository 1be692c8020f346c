"""
Word Lifecycle Service

Guarantees one canonical word per UTC hour without a central authority.

Every client runs the same sequence for an hour bucket:
lookup -> (absent) derive deterministically -> create-if-absent -> on
conflict, re-read. Derivation is a pure function of the hour id and the
record is write-once, so all clients end up with the same word whichever
one wins the creation race.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import CoordinationError, IntegrityError, StoreError, StoreErrorKind
from ..models.word_record import WordRecord
from ..utils.game_logger import game_logger
from . import obfuscation
from .lexicon import LexiconProvider
from .time_keying import bucket_id
from .word_store import CreateResult, WordStore, create_word_store


def validate_word_record(doc: Dict[str, Any]) -> bool:
    """
    Check that a stored document is a well-formed word record.

    Returns:
        bool: True if every required field is present and well formed
    """
    if not isinstance(doc, dict):
        return False
    for field_name in ('word', 'createdAt', 'source', 'dictionaryVersion'):
        value = doc.get(field_name)
        if not value or not isinstance(value, str):
            return False

    if not obfuscation.ENCODED_PAYLOAD_PATTERN.match(doc['word']):
        return False

    try:
        datetime.fromisoformat(doc['createdAt'].replace('Z', '+00:00'))
    except ValueError:
        return False

    if 'hash' in doc and doc['hash'] is not None and not isinstance(doc['hash'], str):
        return False

    return True


class WordLifecycle:
    """
    Resolves the hourly word against a shared document store.

    This class handles:
    - Reading and decoding existing hour records
    - Deterministic derivation and race-safe creation of missing ones
    - Pre-generation of upcoming hours
    """

    def __init__(self, store: WordStore, lexicon: LexiconProvider,
                 source: str = 'client', dictionary_version: str = 'v1',
                 clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.lexicon = lexicon
        self.source = source
        self.dictionary_version = dictionary_version
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def _decode(self, hour_id: str, doc: Dict[str, Any]) -> str:
        if not validate_word_record(doc):
            raise IntegrityError(f"Malformed word record for hour {hour_id}")
        word = obfuscation.decode(doc['word'], hour_id)
        if doc.get('hash') and not obfuscation.verify_fingerprint(word, doc['hash'], hour_id):
            raise IntegrityError(f"Word record fingerprint mismatch for hour {hour_id}")
        return word.upper()

    def build_record(self, word: str, hour_id: str) -> WordRecord:
        """Obfuscated record for ``word`` under ``hour_id``."""
        return WordRecord(
            word=obfuscation.encode(word, hour_id),
            created_at=self.clock().isoformat(),
            source=self.source,
            dictionary_version=self.dictionary_version,
            hash=obfuscation.fingerprint(word, hour_id),
        )

    async def get_or_create(self, hour_id: str) -> str:
        """
        Resolve the word for one hour bucket, creating the record if needed.

        Args:
            hour_id: Hour id in YYYYMMDDHH format

        Returns:
            str: The hour's word, uppercase

        Raises:
            IntegrityError: If a stored record is malformed
            CoordinationError: If creation failed and no record exists
            StoreError: If the store failed with a non-retryable error
        """
        word, _ = await self._resolve(hour_id)
        return word

    async def _resolve(self, hour_id: str) -> Tuple[str, Dict[str, Any]]:
        # Returns the word together with the record document it came from
        existing = await self.store.get(hour_id)
        if existing is not None:
            game_logger.log_word_event(hour_id, 'word_read', logging.DEBUG)
            return self._decode(hour_id, existing), existing

        await self.lexicon.load()
        word = self.lexicon.deterministic_solution(hour_id)
        record = self.build_record(word, hour_id)

        try:
            result = await self.store.create(hour_id, record)
        except StoreError as e:
            if e.kind == StoreErrorKind.ALREADY_EXISTS:
                result = CreateResult.ALREADY_EXISTS
            else:
                return await self._recover_after_failed_create(hour_id, e)

        if result == CreateResult.CREATED:
            game_logger.log_word_event(hour_id, 'word_created', source=self.source,
                                       dictionary_version=self.dictionary_version)
            return word, record.to_document()

        game_logger.log_word_event(hour_id, 'race_lost')
        winner = await self.store.get(hour_id)
        if winner is None:
            raise CoordinationError(f"Word for hour {hour_id} reported as existing but not found", hour_id)
        return self._decode(hour_id, winner), winner

    async def _recover_after_failed_create(self, hour_id: str, error: StoreError) -> Tuple[str, Dict[str, Any]]:
        # The write may have landed despite the error
        game_logger.log_word_event(hour_id, 'create_failed', logging.WARNING,
                                   kind=error.kind.value, error=str(error))
        try:
            doc = await self.store.get(hour_id)
        except StoreError as read_error:
            raise CoordinationError(
                f"Failed to get or create word for hour {hour_id}", hour_id, read_error
            ) from error
        if doc is None:
            raise CoordinationError(f"Failed to get or create word for hour {hour_id}", hour_id, error) from error
        return self._decode(hour_id, doc), doc

    async def current_word(self) -> str:
        """Word for the hour containing now."""
        return await self.get_or_create(bucket_id(self.clock()))

    async def word_for_instant(self, instant: datetime) -> str:
        """Word for the hour containing ``instant``."""
        return await self.get_or_create(bucket_id(instant))

    async def pre_generate(self, count: int = 24, start: Optional[datetime] = None) -> List[str]:
        """
        Warm up the next ``count`` hour buckets, starting with the current one.

        Failures are logged and skipped so one bad hour does not abort the batch.

        Returns:
            List[str]: Hour ids that resolved successfully, in order
        """
        start = start or self.clock()
        generated: List[str] = []

        for offset in range(count):
            hour_id = bucket_id(start + timedelta(hours=offset))
            try:
                await self.get_or_create(hour_id)
                generated.append(hour_id)
            except (StoreError, CoordinationError, IntegrityError) as e:
                game_logger.log_word_event(hour_id, 'pregenerate_failed', logging.ERROR,
                                           error_type=type(e).__name__, error=str(e))

        return generated

    async def describe_hour(self, hour_id: str) -> Dict[str, Any]:
        """Public view of an hour's record: payload and fingerprint, no plaintext."""
        _, doc = await self._resolve(hour_id)
        return {
            'hour_id': hour_id,
            'payload': doc['word'],
            'hash': doc.get('hash'),
            'dictionary_version': doc.get('dictionaryVersion'),
            'created_at': doc.get('createdAt'),
        }


# Global service instance
_word_lifecycle = None


def get_word_lifecycle() -> Optional[WordLifecycle]:
    """Get the global word lifecycle instance."""
    return _word_lifecycle


def initialize_word_lifecycle(config_class, lexicon: LexiconProvider,
                              store: Optional[WordStore] = None) -> WordLifecycle:
    """Initialize the global word lifecycle from configuration."""
    global _word_lifecycle
    _word_lifecycle = WordLifecycle(
        store or create_word_store(config_class),
        lexicon,
        source=config_class.WORD_SOURCE,
        dictionary_version=config_class.DICTIONARY_VERSION,
    )
    return _word_lifecycle
