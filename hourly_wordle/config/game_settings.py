"""
Game Configuration Constants Module

Game rules and the bundled word list. Unlike app_config these are not
read from the environment: every process must agree on them for the
hourly word to come out the same.
"""

import json
import os
from typing import List, Final, Optional

# Core Game Configuration Constants
WORD_LENGTH: Final[int] = 5
MAX_ROUNDS: Final[int] = 6
"""
Maximum number of guess attempts allowed per hourly game.
Type: Final[int] - Immutable to prevent accidental modification
"""

SOLUTION_WORD_COUNT: Final[int] = 300
"""
Number of leading (most common) words in words.json eligible as secret words.
Changing this reshuffles every future hour, so treat it as part of the
dictionary version.
"""

WORDS_FILE: Final[str] = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'words.json')


def load_word_list(json_file_path: Optional[str] = None) -> List[str]:
    """
    Load the word list from a words.json file, preserving file order.

    The file holds ``{"words": [...]}`` ordered from most to least common.
    Order matters: the solution set is a prefix of this list and the
    hourly word is picked by index into it.

    Returns:
        List[str]: Lowercase 5-letter words, duplicates dropped

    Raises:
        FileNotFoundError: If the word file is not found
        ValueError: If the file is malformed, empty or contains invalid words
    """
    json_file_path = json_file_path or WORDS_FILE

    try:
        with open(json_file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"Word list file not found: {json_file_path}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {json_file_path}: {e}") from e

    word_list = data.get('words') if isinstance(data, dict) else data
    if not isinstance(word_list, list):
        raise ValueError("JSON file must contain an array of words")

    if not word_list:
        raise ValueError("Word list cannot be empty")

    words: List[str] = []
    seen = set()
    for index, word in enumerate(word_list):
        if not isinstance(word, str):
            raise ValueError(f"Word at index {index} is not a string")
        word = word.strip().lower()
        if len(word) != WORD_LENGTH:
            raise ValueError(f"Word '{word}' is not {WORD_LENGTH} characters long")
        if not word.isalpha() or not word.isascii():
            raise ValueError(f"Word '{word}' contains non-alphabetic characters")
        if word not in seen:
            seen.add(word)
            words.append(word)

    return words
