"""
Utilities Package

Contains utility functions and helper modules.
"""

from .helpers import get_user_identity, string_hash, to_base36
from .game_logger import game_logger

__all__ = ['get_user_identity', 'string_hash', 'to_base36', 'game_logger']
