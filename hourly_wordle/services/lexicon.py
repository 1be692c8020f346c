"""
Lexicon Service

Loads the bundled word list once per process and answers membership and
selection queries. Solutions are the most common words (a prefix of the
file); every word in the file is an allowed guess.
"""

import asyncio
import hashlib
import random
import threading
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple

from ..config.game_settings import SOLUTION_WORD_COUNT, load_word_list
from ..errors import InitializationOrderError, InputError
from ..utils.helpers import string_hash


@dataclass(frozen=True)
class Lexicon:
    """Immutable word sets. ``solutions`` keeps source order for seeded picks."""
    solutions: Tuple[str, ...]
    allowed: FrozenSet[str]
    version: str
    hash: str

    @property
    def solution_set(self) -> FrozenSet[str]:
        return frozenset(self.solutions)

    @classmethod
    def from_words(cls, words: Iterable[str], solution_count: int = SOLUTION_WORD_COUNT,
                   version: str = 'v1') -> "Lexicon":
        """
        Partition an ordered word list into solutions and allowed guesses.

        Args:
            words: Words ordered from most to least common
            solution_count: Size of the common-word prefix used as solutions
            version: Dictionary version tag

        Returns:
            Lexicon with ``solutions`` a subset of ``allowed``
        """
        ordered = []
        seen = set()
        for word in words:
            word = word.strip().lower()
            if word and word not in seen:
                seen.add(word)
                ordered.append(word)
        if not ordered:
            raise ValueError("Word list cannot be empty")

        solutions = tuple(ordered[:solution_count])
        allowed = frozenset(ordered)
        digest = hashlib.sha256(''.join(sorted(allowed)).encode('utf-8')).hexdigest()
        return cls(solutions=solutions, allowed=allowed, version=version, hash=digest)


class LexiconProvider:
    """
    Once-initialized shared handle to the Lexicon.

    ``load()`` may be awaited by many callers at once; they all wait on the
    same in-flight load and receive the same instance. Queries made before
    a load has completed raise InitializationOrderError.
    """

    def __init__(self, word_file: Optional[str] = None, solution_count: int = SOLUTION_WORD_COUNT,
                 version: str = 'v1', words: Optional[Iterable[str]] = None):
        self.word_file = word_file
        self.solution_count = solution_count
        self.version = version
        self._words = list(words) if words is not None else None
        self._lexicon: Optional[Lexicon] = None
        self._lock = threading.Lock()
        self._pending: Optional[asyncio.Future] = None
        self._rng = random.Random()

    @property
    def is_loaded(self) -> bool:
        return self._lexicon is not None

    async def load(self) -> Lexicon:
        """Load the lexicon, or await the load already in progress."""
        if self._lexicon is not None:
            return self._lexicon

        loop = asyncio.get_running_loop()
        pending = self._pending
        if pending is None or pending.done() or pending.get_loop() is not loop:
            pending = loop.create_task(asyncio.to_thread(self.load_sync))
            self._pending = pending
        return await asyncio.shield(pending)

    def load_sync(self) -> Lexicon:
        """Blocking load. Safe to call from several threads."""
        if self._lexicon is not None:
            return self._lexicon
        with self._lock:
            if self._lexicon is None:
                words = self._words if self._words is not None else load_word_list(self.word_file)
                self._lexicon = Lexicon.from_words(words, self.solution_count, self.version)
        return self._lexicon

    @property
    def lexicon(self) -> Lexicon:
        if self._lexicon is None:
            raise InitializationOrderError("Dictionary not loaded. Call load() first.")
        return self._lexicon

    def is_allowed_guess(self, word: str) -> bool:
        return word.lower() in self.lexicon.allowed

    def is_eligible_solution(self, word: str) -> bool:
        return word.lower() in self.lexicon.solution_set

    def random_solution(self, rng: Optional[random.Random] = None) -> str:
        """Uniformly random solution word, uppercase."""
        return (rng or self._rng).choice(self.lexicon.solutions).upper()

    def deterministic_solution(self, seed: str) -> str:
        """
        Map a seed string to a solution word, uppercase.

        Same seed gives the same word for as long as the word file and
        solution count are unchanged.

        Raises:
            InputError: If the seed is not a non-empty string
        """
        solutions = self.lexicon.solutions
        if not isinstance(seed, str) or not seed:
            raise InputError("Seed must be a non-empty string")
        index = abs(string_hash(seed)) % len(solutions)
        return solutions[index].upper()


# Global provider instance
_lexicon_provider = None


def get_lexicon_provider() -> Optional[LexiconProvider]:
    """Get the global lexicon provider."""
    return _lexicon_provider


def initialize_lexicon_provider(version: str = 'v1') -> LexiconProvider:
    """Initialize the global lexicon provider and load it."""
    global _lexicon_provider
    _lexicon_provider = LexiconProvider(version=version)
    _lexicon_provider.load_sync()
    return _lexicon_provider
