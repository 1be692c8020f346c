"""
Services Package

Contains all business logic and service classes.
"""

from .lexicon import Lexicon, LexiconProvider, get_lexicon_provider, initialize_lexicon_provider
from .word_store import CreateResult, InMemoryWordStore, MongoWordStore, RetryPolicy, WordStore, with_retry
from .word_lifecycle import WordLifecycle, get_word_lifecycle, initialize_word_lifecycle, validate_word_record

__all__ = [
    'Lexicon', 'LexiconProvider', 'get_lexicon_provider', 'initialize_lexicon_provider',
    'CreateResult', 'InMemoryWordStore', 'MongoWordStore', 'RetryPolicy', 'WordStore', 'with_retry',
    'WordLifecycle', 'get_word_lifecycle', 'initialize_word_lifecycle', 'validate_word_record'
]
