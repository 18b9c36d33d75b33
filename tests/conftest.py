import pytest
from cachelib import SimpleCache

from app import create_app
from word_source import WordSource

WORDS = [
    "crane", "trace", "ghost", "touch", "stone", "brick", "plane", "chair",
    "table", "smile", "watch", "plant", "dream", "truck",
    # filtered out: repeated letters, wrong length, not alphabetic
    "apple", "houses", "cr4ne",
]


class FixedWordSource(WordSource):
    """Always draws the same secret."""

    def __init__(self, words, secret):
        super().__init__(words)
        self.secret = secret

    def random_word(self, rng=None):
        return self.secret


@pytest.fixture
def words():
    return FixedWordSource(WORDS, secret="CRANE")


@pytest.fixture
def app(words):
    app = create_app(
        {
            "TESTING": True,
            "SESSION_TYPE": "cachelib",
            "SESSION_CACHELIB": SimpleCache(),
        },
        word_source=words,
    )
    return app


@pytest.fixture
def client(app):
    return app.test_client()
