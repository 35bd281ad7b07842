"""Gemini-backed app analysis for SubScout.

Covers the three generative steps of the workflow:
- Analyzing a submitted app URL into a product profile
- Drafting a non-promotional first-contact post for a subreddit
- Grouping stored pain points into trends
"""

import logging
from dataclasses import dataclass, field

from subscout.llm_client import LLMClient, LLMClientError, get_analysis_client
from subscout.prompts import (
    build_app_analysis_prompt,
    build_first_contact_prompt,
    build_trend_analysis_prompt,
)

logger = logging.getLogger(__name__)

TREND_GROWTH_VALUES = ("rising", "stable", "declining")


class AnalysisError(Exception):
    """Raised when an LLM analysis step fails."""
    pass


@dataclass
class AppAnalysis:
    """Product profile inferred from an app URL."""
    name: str
    description: str
    target_audience: str
    pain_points: list[str] = field(default_factory=list)
    features: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


@dataclass
class PostDraft:
    """Generated first-contact post."""
    title: str
    content: str


@dataclass
class TrendItem:
    """One recurring theme across insights."""
    topic: str
    frequency: int
    growth: str  # rising / stable / declining


@dataclass
class TrendReport:
    """Trend analysis over a batch of insights."""
    trends: list[TrendItem]
    summary: str


def _string_list(value) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item]


def analyze_app_url(url: str, client: LLMClient | None = None) -> AppAnalysis:
    """Analyze an application URL.

    Args:
        url: Public URL of the app.
        client: LLM client. Defaults to the configured analysis client.

    Raises:
        AnalysisError: If the LLM call fails or returns unusable data.
    """
    try:
        client = client or get_analysis_client()
        system_prompt, user_prompt = build_app_analysis_prompt(url)
        data = client.generate_json(user_prompt, system_prompt, json_mode=True)
    except LLMClientError as e:
        logger.error(f"[Gemini] App analysis failed for {url}: {e}")
        raise AnalysisError(f"Failed to analyze app URL: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError("Failed to analyze app URL: unexpected response shape")

    return AppAnalysis(
        name=str(data.get("name") or url),
        description=str(data.get("description") or ""),
        target_audience=str(data.get("targetAudience") or ""),
        pain_points=_string_list(data.get("painPoints")),
        features=_string_list(data.get("features")),
        tags=_string_list(data.get("tags")),
    )


def generate_first_contact_post(
    subreddit_name: str,
    app_description: str,
    pain_points: list[str],
    client: LLMClient | None = None,
) -> PostDraft:
    """Draft an authentic, non-promotional post for a subreddit.

    Raises:
        AnalysisError: If the LLM call fails or omits title/content.
    """
    try:
        client = client or get_analysis_client()
        system_prompt, user_prompt = build_first_contact_prompt(
            subreddit_name, app_description, pain_points
        )
        data = client.generate_json(user_prompt, system_prompt, json_mode=True)
    except LLMClientError as e:
        logger.error(f"[Gemini] Post generation failed for r/{subreddit_name}: {e}")
        raise AnalysisError(f"Failed to generate post: {e}") from e

    if not isinstance(data, dict) or not data.get("title") or not data.get("content"):
        raise AnalysisError("Failed to generate post: response missing title or content")

    return PostDraft(title=str(data["title"]), content=str(data["content"]))


def analyze_pain_point_trends(
    insights: list[str],
    client: LLMClient | None = None,
) -> TrendReport:
    """Group insight texts into trends.

    Trends with an unrecognized growth label are reported as "stable".

    Raises:
        AnalysisError: If the LLM call fails.
    """
    if not insights:
        return TrendReport(trends=[], summary="")

    try:
        client = client or get_analysis_client()
        system_prompt, user_prompt = build_trend_analysis_prompt(insights)
        data = client.generate_json(user_prompt, system_prompt, json_mode=True)
    except LLMClientError as e:
        logger.error(f"[Gemini] Trend analysis failed: {e}")
        raise AnalysisError(f"Failed to analyze trends: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError("Failed to analyze trends: unexpected response shape")

    trends = []
    for item in data.get("trends") or []:
        if not isinstance(item, dict) or not item.get("topic"):
            continue
        growth = str(item.get("growth", "stable")).lower()
        try:
            frequency = int(item.get("frequency") or 0)
        except (TypeError, ValueError):
            frequency = 0
        trends.append(TrendItem(
            topic=str(item["topic"]),
            frequency=frequency,
            growth=growth if growth in TREND_GROWTH_VALUES else "stable",
        ))

    return TrendReport(trends=trends, summary=str(data.get("summary") or ""))
