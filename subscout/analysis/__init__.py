"""Insight extraction for SubScout.

Provides keyword classification, subreddit scanning and the read-side
aggregations over stored insights. Persistence of scan results lives in
subscout.analysis.persistence and is imported from there directly, since
it depends on the database layer.
"""

from subscout.analysis.classifier import (
    FEATURE_REQUEST_KEYWORDS,
    PAIN_POINT_KEYWORDS,
    Classification,
    classify,
    extract_topics,
    post_text,
)

from subscout.analysis.aggregation import (
    CaseFoldTitleNormalizer,
    ExactTitleNormalizer,
    TitleNormalizer,
    count_tags,
    count_titles,
    get_title_normalizer,
)

from subscout.analysis.scanner import (
    ScanResult,
    scan_subreddit,
)

__all__ = [
    # Classifier
    "FEATURE_REQUEST_KEYWORDS",
    "PAIN_POINT_KEYWORDS",
    "Classification",
    "classify",
    "extract_topics",
    "post_text",
    # Aggregation
    "CaseFoldTitleNormalizer",
    "ExactTitleNormalizer",
    "TitleNormalizer",
    "count_tags",
    "count_titles",
    "get_title_normalizer",
    # Scanner
    "ScanResult",
    "scan_subreddit",
]
