"""Keyword classification for scanned Reddit posts.

Posts are sorted into pain points and feature requests by plain substring
membership against two small lexicons. A post may land in both, one, or
neither category. There is no stemming, negation handling or scoring, so
false positives are expected.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable


PAIN_POINT_KEYWORDS = (
    "problem",
    "issue",
    "frustrating",
    "difficult",
    "annoying",
    "hate",
    "sucks",
    "broken",
)

FEATURE_REQUEST_KEYWORDS = (
    "want",
    "need",
    "wish",
    "should",
    "could",
    "feature",
    "improvement",
)

# Tokens must be longer than this to count as a topic
MIN_TOPIC_LENGTH = 4


@dataclass(frozen=True)
class Classification:
    """Category membership for one post."""
    is_pain_point: bool
    is_feature_request: bool


def post_text(title: str, content: str | None) -> str:
    """Build the lowercased text a post is classified on."""
    return f"{title} {content or ''}".lower()


def classify(text: str) -> Classification:
    """Classify already-lowercased post text.

    Args:
        text: Lowercased title and body.

    Returns:
        Classification flags for both categories.
    """
    return Classification(
        is_pain_point=any(keyword in text for keyword in PAIN_POINT_KEYWORDS),
        is_feature_request=any(keyword in text for keyword in FEATURE_REQUEST_KEYWORDS),
    )


def count_topics(texts: Iterable[str]) -> Counter:
    """Count whitespace-separated tokens longer than four characters."""
    counts: Counter = Counter()
    for text in texts:
        counts.update(word for word in text.split() if len(word) > MIN_TOPIC_LENGTH)
    return counts


def extract_topics(texts: Iterable[str], limit: int = 10) -> list[str]:
    """Return the most frequent topic tokens across a batch of texts.

    Punctuation is kept as-is, so "slow!" and "slow" are separate tokens.
    Ties keep first-seen order but callers should not rely on it.
    """
    return [word for word, _ in count_topics(texts).most_common(limit)]
