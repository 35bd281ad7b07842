"""Prompt templates for SubScout.

Each builder returns a (system_prompt, user_prompt) tuple. All prompts ask
for a single JSON object so replies can be parsed with
llm_client.parse_json_response.
"""


# ============================================================================
# App Analysis (Gemini)
# ============================================================================

APP_ANALYSIS_SYSTEM = """You are a product analyst helping solo developers understand
who their application is for. You will be given the URL of an application.

Identify:
- The primary user persona
- The key pain points the app solves
- The main features
- Short tags useful for categorizing the app

Respond with JSON only."""

APP_ANALYSIS_TEMPLATE = """Please analyze this application URL and provide insights: {url}

Respond with JSON in this exact format:
{{
  "name": string,
  "description": string,
  "targetAudience": string,
  "painPoints": string[],
  "features": string[],
  "tags": string[]
}}"""


def build_app_analysis_prompt(url: str) -> tuple[str, str]:
    """Build prompt for analyzing an app URL."""
    return APP_ANALYSIS_SYSTEM, APP_ANALYSIS_TEMPLATE.format(url=url)


# ============================================================================
# First-Contact Post (Gemini)
# ============================================================================

FIRST_CONTACT_SYSTEM = """You write Reddit posts that open honest conversations with a
community. You never advertise. Posts should read like they were written by a
regular member who is curious about other people's experiences."""

FIRST_CONTACT_TEMPLATE = """Create a first-contact post for r/{subreddit}. The post should:
- Address common pain points: {pain_points}
- Sound authentic and conversational
- Ask for community input/experiences
- NOT be promotional or mention the app directly
- Follow typical Reddit etiquette

App context (for understanding, don't mention directly): {app_description}

Respond with JSON in this format: {{"title": string, "content": string}}"""


def build_first_contact_prompt(
    subreddit: str,
    app_description: str,
    pain_points: list[str],
) -> tuple[str, str]:
    """Build prompt for drafting a first-contact post."""
    user_prompt = FIRST_CONTACT_TEMPLATE.format(
        subreddit=subreddit,
        pain_points=", ".join(pain_points) if pain_points else "none identified yet",
        app_description=app_description or "not provided",
    )
    return FIRST_CONTACT_SYSTEM, user_prompt


# ============================================================================
# Pain-Point Trend Analysis (Gemini)
# ============================================================================

TREND_ANALYSIS_SYSTEM = """You are a customer research analyst. You group raw customer
complaints and requests into a small number of recurring themes."""

TREND_ANALYSIS_TEMPLATE = """Analyze these customer insights and pain points to identify key trends:

{insights}

Respond with JSON in this format:
{{"trends": [{{"topic": string, "frequency": number, "growth": string}}], "summary": string}}

Growth should be 'rising', 'stable', or 'declining'."""


def build_trend_analysis_prompt(insights: list[str]) -> tuple[str, str]:
    """Build prompt for grouping insights into trends."""
    return TREND_ANALYSIS_SYSTEM, TREND_ANALYSIS_TEMPLATE.format(insights="\n\n".join(insights))


# ============================================================================
# Subreddit Discovery (Perplexity)
# ============================================================================

SUBREDDIT_DISCOVERY_SYSTEM = """You are a Reddit expert who knows all major subreddits.
Based on an app description and target audience, recommend relevant subreddits
where the target users might gather.

CRITICAL REQUIREMENTS:
1. **DIRECT RELEVANCE ONLY**: Every subreddit MUST be a place the target audience actually discusses their problems
2. **Active communities**: Prefer subreddits with regular discussions
3. **Avoid NSFW or toxic communities**

Respond with a JSON object in this format:
{"subreddits": [{"name": string, "displayName": string, "description": string, "subscribers": number, "activity": string, "matchScore": number}]}

Activity should be "high", "medium", or "low". Match score should be 0-100."""

SUBREDDIT_DISCOVERY_TEMPLATE = """App description: {app_description}
Target audience: {target_audience}

Recommend {min_count}-{max_count} relevant subreddits where this target audience is likely to be active."""


def build_subreddit_discovery_prompt(
    app_description: str,
    target_audience: str,
    min_count: int = 5,
    max_count: int = 8,
) -> tuple[str, str]:
    """Build prompt for subreddit discovery.

    Args:
        app_description: What the app does.
        target_audience: Who it is for.
        min_count: Lower bound on suggestions.
        max_count: Upper bound on suggestions.

    Returns:
        Tuple of (system_prompt, user_prompt).
    """
    user_prompt = SUBREDDIT_DISCOVERY_TEMPLATE.format(
        app_description=app_description or "not provided",
        target_audience=target_audience or "not provided",
        min_count=min_count,
        max_count=max_count,
    )
    return SUBREDDIT_DISCOVERY_SYSTEM, user_prompt


# ============================================================================
# Reddit Trend Search (Perplexity)
# ============================================================================

TREND_SEARCH_SYSTEM = """Search Reddit for current trends and discussions related to the
given query. Focus on identifying trending topics, common pain points, and
recent discussions. Return JSON format: {"trends": string[], "discussions": string[]}"""

TREND_SEARCH_TEMPLATE = "Search Reddit for trends and discussions about: {query}"


def build_trend_search_prompt(query: str) -> tuple[str, str]:
    return TREND_SEARCH_SYSTEM, TREND_SEARCH_TEMPLATE.format(query=query)
