"""Tests for review tokenization."""

import types

from repinsight.core.text import tokenize


def test_tokenize_is_lazy():
    """Tokenizer returns a generator."""
    assert isinstance(tokenize("great builder"), types.GeneratorType)


def test_tokenize_lowercases_and_splits_on_punctuation():
    tokens = list(tokenize("Great BUILDER, trusted-dev!!"))
    assert tokens == ["great", "builder", "trusted", "dev"]


def test_tokenize_strips_urls():
    tokens = list(tokenize("Check https://example.com/path?x=1 and http://foo.bar now"))
    assert "https" not in tokens
    assert "example" not in tokens
    assert "foo" not in tokens
    assert tokens == ["check"]


def test_tokenize_drops_short_tokens_and_stop_words():
    tokens = list(tokenize("He is an ok guy and the best at DeFi"))
    # "ok", "is", "an", "at" are too short; "the", "and" are stop words
    assert tokens == ["guy", "best", "defi"]


def test_tokenize_keeps_digits():
    assert list(tokenize("Paid back 500 USDC in 2024")) == ["paid", "500", "usdc", "2024"]


def test_tokenize_empty_input():
    assert list(tokenize("")) == []
    assert list(tokenize(None)) == []
    assert list(tokenize("the and of !!! ??")) == []


def test_tokenize_custom_stop_words_and_length():
    tokens = list(tokenize("scam scam legit", stop_words={"scam"}, min_length=2))
    assert tokens == ["legit"]
