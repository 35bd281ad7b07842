"""Subreddit scanning for pain points and feature requests.

A scan fetches a community's hot posts, classifies each one, and collects
post titles per category. Nothing is persisted here; see persistence.py.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable

from subscout.analysis.classifier import classify, extract_topics, post_text
from subscout.config import ScanConfig, get_config
from subscout.reddit_client import RedditPost, get_reddit_client

logger = logging.getLogger(__name__)

FetchPosts = Callable[[str, int], list[RedditPost]]


@dataclass
class ScanResult:
    """Outcome of a single scan. Lives only for the request that made it."""
    pain_points: list[str] = field(default_factory=list)
    feature_requests: list[str] = field(default_factory=list)
    common_topics: list[str] = field(default_factory=list)
    posts: list[RedditPost] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "ScanResult":
        return cls()

    def to_dict(self) -> dict:
        return {
            "painPoints": list(self.pain_points),
            "featureRequests": list(self.feature_requests),
            "commonTopics": list(self.common_topics),
            "posts": [post.to_dict() for post in self.posts],
        }


def _fetch_hot_posts(name: str, limit: int) -> list[RedditPost]:
    return get_reddit_client().get_hot_posts(name, limit=limit)


def dedupe(items: list[str], limit: int) -> list[str]:
    """Drop repeated strings, keep first-seen order, then truncate."""
    return list(dict.fromkeys(items))[:limit]


def scan_subreddit(
    name: str,
    fetch_posts: FetchPosts | None = None,
    settings: ScanConfig | None = None,
) -> ScanResult:
    """Scan a subreddit's hot posts for pain points and feature requests.

    Any failure while fetching (missing credentials, network, API errors)
    yields an empty result instead of raising.

    Args:
        name: Subreddit name (without r/).
        fetch_posts: Callable (name, limit) -> posts. Defaults to the
            Reddit hot listing.
        settings: Scan limits. Defaults to the global config.

    Returns:
        ScanResult with up to N titles per category.
    """
    settings = settings or get_config().scan
    fetch_posts = fetch_posts or _fetch_hot_posts

    try:
        posts = fetch_posts(name, settings.hot_posts_limit)
    except Exception as e:
        logger.error(f"[Scan] Failed to fetch posts from r/{name}: {e}")
        return ScanResult.empty()

    pain_points: list[str] = []
    feature_requests: list[str] = []
    texts: list[str] = []

    for post in posts:
        text = post_text(post.title, post.content)
        texts.append(text)

        result = classify(text)
        if result.is_pain_point:
            pain_points.append(post.title)
        if result.is_feature_request:
            feature_requests.append(post.title)

    scan = ScanResult(
        pain_points=dedupe(pain_points, settings.max_insights_per_category),
        feature_requests=dedupe(feature_requests, settings.max_insights_per_category),
        common_topics=extract_topics(texts, limit=settings.max_topics),
        posts=list(posts[:settings.max_display_posts]),
    )

    logger.info(
        f"[Scan] r/{name}: {len(posts)} posts, "
        f"{len(scan.pain_points)} pain points, "
        f"{len(scan.feature_requests)} feature requests"
    )
    return scan
