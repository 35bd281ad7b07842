"""Subreddit discovery service for SubScout.

This module finds communities for an app by combining:
- Perplexity recommendations based on the app profile
- Live Reddit data (subscriber counts, descriptions) where available
"""

import logging
import math
import re
from dataclasses import asdict, dataclass, field

from subscout.llm_client import LLMClient, LLMClientError, get_discovery_client, parse_json_response
from subscout.prompts import build_subreddit_discovery_prompt, build_trend_search_prompt
from subscout.reddit_client import RedditClient

logger = logging.getLogger(__name__)

ACTIVITY_LEVELS = ("high", "medium", "low")

_VALID_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_]{1,20}$")


class DiscoveryError(Exception):
    """Raised when subreddit discovery cannot reach the search LLM."""
    pass


@dataclass
class SubredditRecommendation:
    """A recommended subreddit with stats and match info."""
    name: str
    display_name: str
    description: str
    subscribers: int
    activity: str  # high / medium / low
    match_score: float  # 0-100


@dataclass
class RedditTrends:
    """Trending topics and discussions found by web search."""
    trends: list[str] = field(default_factory=list)
    discussions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


# Used when the search LLM answers but its output cannot be parsed
FALLBACK_RECOMMENDATIONS = (
    SubredditRecommendation(
        name="startups",
        display_name="r/startups",
        description="A community for discussing startup ideas and entrepreneurship",
        subscribers=500000,
        activity="high",
        match_score=85,
    ),
    SubredditRecommendation(
        name="Entrepreneur",
        display_name="r/Entrepreneur",
        description="A community for entrepreneurs and business minded individuals",
        subscribers=800000,
        activity="high",
        match_score=80,
    ),
    SubredditRecommendation(
        name="SaaS",
        display_name="r/SaaS",
        description="Software as a Service community",
        subscribers=150000,
        activity="medium",
        match_score=90,
    ),
)


def normalize_subreddit_name(raw: str) -> str | None:
    """Strip r/ prefixes and list markers; None if not a valid name."""
    name = re.sub(r"^[-*\d.)\s]+", "", raw.strip())
    name = re.sub(r"^/?r/", "", name, flags=re.IGNORECASE).strip()
    return name if _VALID_NAME.match(name) else None


def activity_from_subscribers(subscribers: int) -> str:
    """Rough activity level from subscriber count (log scale)."""
    if subscribers <= 0:
        return "low"
    magnitude = math.log10(subscribers)
    if magnitude >= 5:
        return "high"
    if magnitude >= 4:
        return "medium"
    return "low"


def _to_int(value, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_score(value) -> float:
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0.0
    return round(max(0.0, min(100.0, score)), 2)


def parse_recommendations(data) -> list[SubredditRecommendation]:
    """Turn the LLM's {"subreddits": [...]} payload into recommendations.

    Entries with invalid names are dropped, and duplicates keep the first
    occurrence.
    """
    items = data.get("subreddits") if isinstance(data, dict) else None
    if not isinstance(items, list):
        return []

    seen = set()
    recommendations = []
    for item in items:
        if not isinstance(item, dict):
            continue
        name = normalize_subreddit_name(str(item.get("name", "")))
        if not name or name.lower() in seen:
            continue
        seen.add(name.lower())

        subscribers = _to_int(item.get("subscribers"))
        activity = str(item.get("activity", "")).lower()
        if activity not in ACTIVITY_LEVELS:
            activity = activity_from_subscribers(subscribers)

        recommendations.append(SubredditRecommendation(
            name=name,
            display_name=item.get("displayName") or f"r/{name}",
            description=str(item.get("description") or ""),
            subscribers=subscribers,
            activity=activity,
            match_score=_to_score(item.get("matchScore")),
        ))

    return recommendations


def discover_subreddits(
    app_description: str,
    target_audience: str,
    client: LLMClient | None = None,
) -> list[SubredditRecommendation]:
    """Ask the search LLM for subreddits where the target audience gathers.

    Args:
        app_description: What the app does.
        target_audience: Who it is for.
        client: LLM client. Defaults to the configured discovery client.

    Returns:
        Recommendations sorted by match score. Falls back to a small starter
        list when the reply cannot be parsed.

    Raises:
        DiscoveryError: If the search LLM cannot be reached.
    """
    try:
        client = client or get_discovery_client()
        system_prompt, user_prompt = build_subreddit_discovery_prompt(
            app_description, target_audience
        )
        response = client.generate(user_prompt, system_prompt, temperature=0.2)
    except LLMClientError as e:
        logger.error(f"[Discovery] Search LLM failed: {e}")
        raise DiscoveryError(f"Failed to discover subreddits: {e}") from e

    try:
        recommendations = parse_recommendations(parse_json_response(response.content))
    except ValueError:
        logger.warning("[Discovery] Could not parse recommendations, using fallback list")
        return list(FALLBACK_RECOMMENDATIONS)

    recommendations.sort(key=lambda r: r.match_score, reverse=True)
    logger.info(f"[Discovery] {len(recommendations)} subreddits recommended")
    return recommendations


def enrich_recommendations(
    recommendations: list[SubredditRecommendation],
    reddit: RedditClient | None,
) -> list[SubredditRecommendation]:
    """Overlay live Reddit data onto recommendations where it is available."""
    if reddit is None:
        return recommendations

    enriched = []
    for rec in recommendations:
        info = reddit.get_subreddit_info(rec.name)
        if info is None:
            enriched.append(rec)
            continue

        enriched.append(SubredditRecommendation(
            name=rec.name,
            display_name=info.display_name or rec.display_name,
            description=info.description or rec.description,
            subscribers=info.subscribers or rec.subscribers,
            activity=rec.activity,
            match_score=rec.match_score,
        ))
    return enriched


def search_reddit_trends(query: str, client: LLMClient | None = None) -> RedditTrends:
    """Web-search Reddit for trends around a query.

    Returns empty lists on any failure.
    """
    try:
        client = client or get_discovery_client()
        system_prompt, user_prompt = build_trend_search_prompt(query)
        response = client.generate(
            user_prompt,
            system_prompt,
            temperature=0.3,
            max_tokens=800,
            extra_body={"search_domain_filter": ["reddit.com"], "return_related_questions": False},
        )
        data = parse_json_response(response.content)
    except (LLMClientError, ValueError) as e:
        logger.warning(f"[Discovery] Trend search failed for '{query}': {e}")
        return RedditTrends()

    if not isinstance(data, dict):
        return RedditTrends()

    return RedditTrends(
        trends=[str(t) for t in data.get("trends") or []],
        discussions=[str(d) for d in data.get("discussions") or []],
    )

