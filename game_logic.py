"""
Core rules of the word guess game: scoring, guess validation and game state.
"""
import logging
import random
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple, Union

from word_source import WORD_LENGTH, WordSource

logger = logging.getLogger(__name__)

MAX_GUESSES = 10

GUESS_PATTERN = re.compile(r"[A-Z]{%d}" % WORD_LENGTH)


class InvalidLength(ValueError):
    """Raised when scoring words that are not WORD_LENGTH letters long."""


class GuessError(Exception):
    """Base class for rejected guesses. Carries a message safe to show the player."""
    code = "guess_error"
    message = "Invalid guess"

    def __init__(self, guess: str = ""):
        super().__init__(self.message)
        self.guess = guess


class InvalidFormat(GuessError):
    code = "invalid_format"
    message = f"Guess must be {WORD_LENGTH} letters"


class DuplicateLetters(GuessError):
    code = "duplicate_letters"
    message = "Duplicate letters not allowed"


class UnknownWord(GuessError):
    code = "unknown_word"
    message = "Word does not exist"


class GameOver(GuessError):
    code = "game_over"
    message = "Game is over. Start a new game to play again."


class Status(str, Enum):
    IN_PROGRESS = "in_progress"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class Score:
    exact: int
    misplaced: int


@dataclass(frozen=True)
class Guess:
    word: str
    exact: int
    misplaced: int

    def to_dict(self) -> dict:
        return {"word": self.word, "exact": self.exact, "misplaced": self.misplaced}


# Evaluate a guess against the secret word.
def score(secret: str, guess: str) -> Score:
    if len(secret) != WORD_LENGTH or len(guess) != WORD_LENGTH:
        raise InvalidLength(f"Expected {WORD_LENGTH} letters, got {secret!r} and {guess!r}")

    secret_letters = list(secret.upper())
    guess_letters = list(guess.upper())
    exact = 0
    misplaced = 0

# First pass: count exact matches and consume them on both sides
    for i, letter in enumerate(guess_letters):
        if letter == secret_letters[i]:
            exact += 1
            secret_letters[i] = None
            guess_letters[i] = None

# Second pass: each remaining secret letter can be credited once
    for letter in guess_letters:
        if letter is not None and letter in secret_letters:
            misplaced += 1
            secret_letters[secret_letters.index(letter)] = None

    return Score(exact=exact, misplaced=misplaced)


def normalize_guess(raw: str) -> str:
    """
    Validate the shape of a raw guess and return it uppercased.

    Surrounding whitespace is stripped before the length check, so " crane "
    is accepted as CRANE. Anything that is not a string is InvalidFormat.
    """
    if raw is None:
        raw = ""
    if not isinstance(raw, str):
        raise InvalidFormat("")
    word = raw.strip().upper()
    if not GUESS_PATTERN.fullmatch(word):
        raise InvalidFormat(word)
    if len(set(word)) != WORD_LENGTH:
        raise DuplicateLetters(word)
    return word


@dataclass(frozen=True)
class GameState:
    secret: str
    history: Tuple[Guess, ...] = ()
    status: Status = Status.IN_PROGRESS

    @property
    def is_over(self) -> bool:
        return self.status is not Status.IN_PROGRESS

    @property
    def attempts_left(self) -> int:
        return MAX_GUESSES - len(self.history)

    @property
    def last_guess(self) -> Optional[Guess]:
        return self.history[-1] if self.history else None

    def guess(self, raw: str, words: WordSource) -> Tuple["GameState", Guess]:
        """
        Play one guess.

        Returns the next state and the scored guess. Raises a GuessError
        subclass when the guess is rejected; this state is left as it was.
        """
        if self.is_over:
            raise GameOver(raw)

        word = normalize_guess(raw)
        if not words.is_valid_guess(word):
            raise UnknownWord(word)

        result = score(self.secret, word)
        played = Guess(word=word, exact=result.exact, misplaced=result.misplaced)
        history = self.history + (played,)

        if played.exact == WORD_LENGTH:
            status = Status.WON
        elif len(history) == MAX_GUESSES:
            status = Status.LOST
        else:
            status = Status.IN_PROGRESS

        if status is not Status.IN_PROGRESS:
            logger.info("Game %s after %s guesses", status.value, len(history))

        return replace(self, history=history, status=status), played

    def message(self) -> Optional[str]:
        if self.status is Status.WON:
            return "Congratulations! You are a genius!"
        if self.status is Status.LOST:
            return f"Try again! The correct word was: {self.secret}"
        return None

    def to_dict(self) -> dict:
        return {
            "secret": self.secret,
            "guesses": [g.to_dict() for g in self.history],
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GameState":
        return cls(
            secret=data["secret"],
            history=tuple(Guess(**g) for g in data.get("guesses", [])),
            status=Status(data.get("status", Status.IN_PROGRESS.value)),
        )


def new_game(words: WordSource, rng: Optional[random.Random] = None) -> GameState:
    secret = words.random_word(rng)
    logger.debug("New game, secret word %s", secret)
    return GameState(secret=secret)


def reset_game(state: GameState, words: WordSource,
               rng: Optional[random.Random] = None) -> GameState:
    """Discard ``state`` and start over with a fresh secret."""
    return new_game(words, rng)


def submit_guess(state: GameState, raw: str,
                 words: WordSource) -> Tuple[GameState, Union[Guess, GuessError]]:
    """
    Play a guess, returning the error instead of raising it.

    On a rejected guess the original state is returned unchanged.
    """
    try:
        return state.guess(raw, words)
    except GuessError as e:
        logger.info("Rejected guess %r: %s", raw, e.code)
        return state, e
