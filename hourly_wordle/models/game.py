"""
Game Data Models

Contains all guess-related data structures and enums.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class LetterStatus(Enum):
    """Per-letter evaluation status."""
    CORRECT = "correct"
    PRESENT = "present"
    ABSENT = "absent"

    @property
    def priority(self) -> int:
        """Ordering used for keyboard aggregation: correct > present > absent."""
        return _PRIORITY[self]


_PRIORITY = {
    LetterStatus.ABSENT: 0,
    LetterStatus.PRESENT: 1,
    LetterStatus.CORRECT: 2,
}


@dataclass(frozen=True)
class LetterFeedback:
    """One scored position: the letter as typed and its status."""
    letter: str
    status: LetterStatus

    def to_dict(self) -> dict:
        return {'letter': self.letter, 'status': self.status.value}

    @classmethod
    def from_dict(cls, data: dict) -> "LetterFeedback":
        return cls(letter=data['letter'], status=LetterStatus(data['status']))


@dataclass
class GameProgress:
    """Optional analytics record of one player's hourly game."""
    hour_id: str
    guesses: List[str] = field(default_factory=list)
    game_status: str = "playing"  # "playing", "won", "lost"
    last_played: str = ""

    def to_document(self) -> dict:
        return {
            'hourId': self.hour_id,
            'guesses': list(self.guesses),
            'gameStatus': self.game_status,
            'lastPlayed': self.last_played,
        }
