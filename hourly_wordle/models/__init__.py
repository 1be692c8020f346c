"""
Data Models Package

Contains all data models and schemas used throughout the application.
"""

from .game import GameProgress, LetterFeedback, LetterStatus
from .word_record import WordRecord

__all__ = ['GameProgress', 'LetterFeedback', 'LetterStatus', 'WordRecord']
