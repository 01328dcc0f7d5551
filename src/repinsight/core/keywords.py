"""Keyword extraction and representative snippet sampling."""

import logging
import math
from collections import defaultdict
from typing import Dict, List, Sequence

from .constants import KeywordConstants, SnippetConstants
from .models import Keyword, Review, Snippet
from .text import tokenize

logger = logging.getLogger(__name__)


def extract_keywords(reviews: Sequence[Review], top_n: int = KeywordConstants.TOP_N) -> List[Keyword]:
    """
    Extract the most salient terms of a sentiment group with a TF-IDF-like score.

    score(term) = tf * ln(total_docs / df), where tf counts every occurrence
    across the group and df counts the reviews containing the term. Reviews
    without a comment still count toward ``total_docs``. Weights are
    normalized by the highest score and rounded to 3 decimals; ties keep the
    order in which terms were first seen.
    """
    term_freq: Dict[str, int] = defaultdict(int)
    doc_freq: Dict[str, int] = defaultdict(int)

    for review in reviews:
        if not review.comment:
            continue
        tokens = list(tokenize(review.comment))
        for token in tokens:
            term_freq[token] += 1
        for token in set(tokens):
            doc_freq[token] += 1

    if not term_freq:
        return []

    total_docs = max(1, len(reviews))
    scores = [
        (term, tf * math.log(total_docs / doc_freq[term]))
        for term, tf in term_freq.items()
    ]
    scores.sort(key=lambda item: item[1], reverse=True)
    top = scores[:top_n]
    if not top:
        return []

    # all-zero scores (e.g. a single review) normalize against 1
    max_score = top[0][1] or 1
    return [
        Keyword(term=term, weight=round(score / max_score, KeywordConstants.WEIGHT_PRECISION))
        for term, score in top
    ]


def sample_snippets(reviews: Sequence[Review], count: int = SnippetConstants.SAMPLE_COUNT) -> List[Snippet]:
    """Pick up to ``count`` excerpts spread evenly across the group (stride sampling)."""
    with_comments = [
        r for r in reviews
        if r.comment and len(r.comment.strip()) > SnippetConstants.MIN_COMMENT_LENGTH
    ]
    if not with_comments or count <= 0:
        return []

    step = max(1, len(with_comments) // count)
    sampled = []
    for review in with_comments[::step]:
        if len(sampled) >= count:
            break
        sampled.append(Snippet(
            id=review.id,
            snippet=review.comment[:SnippetConstants.MAX_SNIPPET_LENGTH].strip(),
        ))
    return sampled
