"""Turning scan results into stored insights."""

import logging
from dataclasses import dataclass

from subscout.analysis.scanner import FetchPosts, ScanResult, scan_subreddit
from subscout.config import ScanConfig
from subscout.database import Database, Insight, Subreddit

logger = logging.getLogger(__name__)

SCAN_SOURCE_TAG = {"source": "reddit_scan"}


@dataclass
class ScanSummary:
    """Counts reported back to the caller of a scan."""
    insights: int
    pain_points: int
    feature_requests: int
    posts: int

    def to_dict(self) -> dict:
        return {
            "insights": self.insights,
            "painPoints": self.pain_points,
            "featureRequests": self.feature_requests,
            "posts": self.posts,
        }


def build_insights(
    db: Database,
    user_id: str,
    subreddit: Subreddit,
    result: ScanResult,
) -> list[Insight]:
    """One insight per retained title, pain points first."""
    insights = []
    for insight_type, titles in (
        ("pain_point", result.pain_points),
        ("feature_request", result.feature_requests),
    ):
        for title in titles:
            insights.append(db.new_insight(
                user_id=user_id,
                app_id=subreddit.app_id,
                subreddit_id=subreddit.id,
                insight_type=insight_type,
                title=title,
                content=title,
                tags=SCAN_SOURCE_TAG,
            ))
    return insights


def persist_scan_results(
    db: Database,
    user_id: str,
    subreddit: Subreddit,
    result: ScanResult,
) -> list[Insight]:
    """Store a scan's insights and its activity entry atomically.

    Raises whatever the database raises; in that case nothing is stored.
    """
    insights = build_insights(db, user_id, subreddit, result)
    activity = db.new_activity(
        user_id=user_id,
        activity_type="subreddit_scanned",
        description=f"Scanned r/{subreddit.name} for insights",
        metadata={"subredditId": subreddit.id, "insightsFound": len(insights)},
    )
    return db.record_scan(subreddit.id, insights, activity)


def run_subreddit_scan(
    db: Database,
    user_id: str,
    subreddit: Subreddit,
    fetch_posts: FetchPosts | None = None,
    settings: ScanConfig | None = None,
) -> ScanSummary:
    """Scan a stored subreddit and persist what it finds."""
    result = scan_subreddit(subreddit.name, fetch_posts=fetch_posts, settings=settings)
    saved = persist_scan_results(db, user_id, subreddit, result)

    logger.info(f"[Scan] Stored {len(saved)} insights for r/{subreddit.name} (user {user_id})")

    return ScanSummary(
        insights=len(saved),
        pain_points=len(result.pain_points),
        feature_requests=len(result.feature_requests),
        posts=len(result.posts),
    )
