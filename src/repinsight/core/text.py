"""Review text tokenization."""

import re
from typing import Iterator, Optional, AbstractSet

from .constants import TokenizerConstants

_URL_RE = re.compile(r"https?://\S+")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


def tokenize(
    text: str,
    stop_words: Optional[AbstractSet[str]] = None,
    min_length: int = TokenizerConstants.MIN_TOKEN_LENGTH,
) -> Iterator[str]:
    """
    Yield lowercase word tokens from raw review text.

    URLs are removed, anything outside [a-z0-9] and whitespace becomes a
    space, and tokens shorter than ``min_length`` or in the stop-word set are
    dropped. Empty input yields nothing.
    """
    stop_words = TokenizerConstants.STOP_WORDS if stop_words is None else stop_words
    text = _URL_RE.sub("", (text or "").lower())
    text = _NON_ALNUM_RE.sub(" ", text)
    for word in text.split():
        if len(word) >= min_length and word not in stop_words:
            yield word
