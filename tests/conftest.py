from datetime import datetime, timezone

import pytest

from hourly_wordle.services.lexicon import LexiconProvider
from hourly_wordle.services.word_lifecycle import WordLifecycle
from hourly_wordle.services.word_store import InMemoryWordStore

SMALL_WORDS = ["crane", "crate", "trace", "grace", "brace", "slate", "plate", "zebra"]

FIXED_NOW = datetime(2025, 9, 23, 23, 15, tzinfo=timezone.utc)


@pytest.fixture
def lexicon():
    provider = LexiconProvider()
    provider.load_sync()
    return provider


@pytest.fixture
def small_lexicon():
    # zebra is an allowed guess but not a solution
    provider = LexiconProvider(words=SMALL_WORDS, solution_count=7)
    provider.load_sync()
    return provider


@pytest.fixture
def store():
    return InMemoryWordStore()


@pytest.fixture
def lifecycle(store, lexicon):
    return WordLifecycle(store, lexicon, clock=lambda: FIXED_NOW)
