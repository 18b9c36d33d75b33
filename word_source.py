"""
Word list loading and candidate word selection.
"""
import logging
import os
import random
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

WORD_LENGTH = 5

DEFAULT_WORDS_FILE = os.path.join(os.path.dirname(__file__), "data", "valid_words.txt")


class EmptyWordList(Exception):
    """Raised when a word list yields no playable words."""


def is_candidate(word: str) -> bool:
    """Five alphabetic letters, none repeated."""
    return (
        len(word) == WORD_LENGTH
        and word.isascii()
        and word.isalpha()
        and len(set(word.upper())) == WORD_LENGTH
    )


class WordSource:
    """
    The words that can be drawn as a secret or accepted as a guess.

    Args:
        words: Raw words in any case. Words that are not candidates are dropped.
        rng: Random generator used by random_word() when none is passed in.
    """

    def __init__(self, words: Iterable[str], rng: Optional[random.Random] = None):
        candidates = {w.strip().upper() for w in words if is_candidate(w.strip())}
        self._candidates = frozenset(candidates)
        # sorted so a seeded rng always draws the same word
        self._ordered = sorted(candidates)
        self.rng = rng or random.Random()

    @classmethod
    def from_file(cls, path: str = DEFAULT_WORDS_FILE, limit: Optional[int] = None,
                  rng: Optional[random.Random] = None) -> "WordSource":
        """
        Load a word list with one word per line, most popular first.

        Only the first ``limit`` words are read before filtering.
        """
        words = []
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                word = line.strip()
                if not word:
                    continue
                words.append(word)
                if limit is not None and len(words) >= limit:
                    break

        source = cls(words, rng=rng)
        logger.info("Loaded %s words from %s, %s playable", len(words), path, len(source))
        return source

    def __len__(self) -> int:
        return len(self._candidates)

    def candidate_words(self) -> frozenset:
        return self._candidates

    def random_word(self, rng: Optional[random.Random] = None) -> str:
        if not self._ordered:
            raise EmptyWordList("No playable words available")
        return (rng or self.rng).choice(self._ordered)

    def is_valid_guess(self, word: str) -> bool:
        return word.upper() in self._candidates
