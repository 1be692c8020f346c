"""
Guess Evaluator

Scores guesses against the hourly word, aggregates keyboard colours and
suggests hint words consistent with everything the player has learned.
All functions are pure apart from the random pick among hint candidates.
"""

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from ..config.game_settings import WORD_LENGTH
from ..errors import InputError
from ..models.game import LetterFeedback, LetterStatus
from .lexicon import LexiconProvider


def evaluate(guess: str, secret: str) -> List[LetterFeedback]:
    """
    Implements the Wordle letter evaluation algorithm.

    Exact matches are marked first and consume their letter from the
    secret's letter pool; remaining positions are then scanned left to
    right and marked PRESENT only while the pool still holds that letter.
    Letters keep the case they were typed in.

    Raises:
        InputError: If either word is not exactly five letters
    """
    if len(guess) != WORD_LENGTH or len(secret) != WORD_LENGTH:
        raise InputError(f"Both guess and secret must be exactly {WORD_LENGTH} letters")

    guess_lower = guess.lower()
    secret_lower = secret.lower()
    remaining = Counter(secret_lower)
    statuses: List[Optional[LetterStatus]] = [None] * WORD_LENGTH

    # First pass: exact position matches
    for i in range(WORD_LENGTH):
        if guess_lower[i] == secret_lower[i]:
            statuses[i] = LetterStatus.CORRECT
            remaining[guess_lower[i]] -= 1

    # Second pass: present letters and misses
    for i in range(WORD_LENGTH):
        if statuses[i] is not None:
            continue
        letter = guess_lower[i]
        if remaining[letter] > 0:
            statuses[i] = LetterStatus.PRESENT
            remaining[letter] -= 1
        else:
            statuses[i] = LetterStatus.ABSENT

    return [LetterFeedback(guess[i], statuses[i]) for i in range(WORD_LENGTH)]


def is_exact_match(guess: str, secret: str) -> bool:
    return guess.lower() == secret.lower()


def validate_feedback_rows(feedback_rows: Iterable[Sequence[LetterFeedback]]) -> List[Sequence[LetterFeedback]]:
    """
    Check that every row scores exactly one word.

    Raises:
        InputError: If a row is not WORD_LENGTH entries of single letters
            with a LetterStatus
    """
    rows = list(feedback_rows)
    for row in rows:
        if not isinstance(row, (list, tuple)) or len(row) != WORD_LENGTH:
            raise InputError(f"Each feedback row must have exactly {WORD_LENGTH} entries")
        for feedback in row:
            letter = getattr(feedback, "letter", None)
            if not isinstance(letter, str) or len(letter) != 1 or not letter.isalpha():
                raise InputError(f"Feedback letters must be single letters, got: {letter!r}")
            if not isinstance(getattr(feedback, "status", None), LetterStatus):
                raise InputError(f"Unknown feedback status for letter {letter!r}")
    return rows


def aggregate_letter_status(feedback_rows: Iterable[Sequence[LetterFeedback]]) -> Dict[str, LetterStatus]:
    """
    Best known status per letter for keyboard display.

    Status can only move up in priority: absent < present < correct.
    """
    letter_status: Dict[str, LetterStatus] = {}
    for row in validate_feedback_rows(feedback_rows):
        for feedback in row:
            letter = feedback.letter.lower()
            current = letter_status.get(letter)
            if current is None or feedback.status.priority > current.priority:
                letter_status[letter] = feedback.status
    return letter_status


@dataclass
class HintConstraints:
    """Everything the guess history says about the secret word."""
    fixed: List[Optional[str]] = field(default_factory=lambda: [None] * WORD_LENGTH)
    must_include: Set[str] = field(default_factory=set)
    must_exclude: Set[str] = field(default_factory=set)
    excluded_at: List[Set[str]] = field(default_factory=lambda: [set() for _ in range(WORD_LENGTH)])

    def allows(self, word: str) -> bool:
        for i, letter in enumerate(word):
            if self.fixed[i] is not None and letter != self.fixed[i]:
                return False
            if letter in self.excluded_at[i]:
                return False
        if any(letter not in word for letter in self.must_include):
            return False
        return not any(letter in word for letter in self.must_exclude)


def build_constraints(feedback_rows: Iterable[Sequence[LetterFeedback]]) -> HintConstraints:
    """
    Collect positional, inclusion and exclusion constraints from feedback.

    An ABSENT letter only joins the global exclusion set when every
    occurrence of it in that row is ABSENT. If the same row also marks it
    CORRECT or PRESENT somewhere, the secret holds exactly that many copies,
    so the letter is only ruled out at the ABSENT position.

    Raises:
        InputError: If a feedback row is malformed
    """
    constraints = HintConstraints()

    for row in validate_feedback_rows(feedback_rows):
        letters = [feedback.letter.lower() for feedback in row]
        scored = {letter for letter, feedback in zip(letters, row) if feedback.status != LetterStatus.ABSENT}

        for i, (letter, feedback) in enumerate(zip(letters, row)):
            if feedback.status == LetterStatus.CORRECT:
                constraints.fixed[i] = letter
                constraints.must_include.add(letter)
            elif feedback.status == LetterStatus.PRESENT:
                constraints.must_include.add(letter)
                constraints.excluded_at[i].add(letter)
            elif letter in scored:
                constraints.excluded_at[i].add(letter)
            else:
                constraints.must_exclude.add(letter)

    # A letter proven present by one row outranks a blanket exclusion from another
    constraints.must_exclude -= constraints.must_include
    return constraints


def suggest_hint(guesses: Sequence[str],
                 feedback_rows: Sequence[Sequence[LetterFeedback]],
                 lexicon: LexiconProvider,
                 rng: Optional[random.Random] = None) -> Optional[str]:
    """
    Suggest a solution word consistent with all feedback so far.

    Args:
        guesses: Words guessed this hour, any case
        feedback_rows: Feedback rows for those guesses
        lexicon: Loaded lexicon provider
        rng: Random source for choosing among several candidates

    Returns:
        A lowercase candidate word, or None if nothing fits
    """
    constraints = build_constraints(feedback_rows)
    already_guessed = {guess.lower() for guess in guesses}

    candidates = [
        word for word in lexicon.lexicon.solutions
        if word not in already_guessed and constraints.allows(word)
    ]

    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    return (rng or random).choice(candidates)
