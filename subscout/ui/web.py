"""FastAPI application for SubScout.

Exposes the dashboard's JSON API: app analysis, subreddit discovery,
insight scanning and aggregation, and drafting of outreach posts. Every
route requires a Supabase access token and only ever touches records owned
by the resolved user.
"""

import functools
import logging
from collections import Counter
from typing import Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from subscout.analysis.aggregation import get_title_normalizer
from subscout.analysis.persistence import run_subreddit_scan
from subscout.app_analysis import (
    analyze_app_url,
    analyze_pain_point_trends,
    generate_first_contact_post,
)
from subscout.auth import AuthenticatedUser, get_current_user
from subscout.config import configure_logging, get_config
from subscout.database import App, Database, DraftPost, Subreddit, get_database
from subscout.discovery import discover_subreddits, enrich_recommendations, search_reddit_trends
from subscout.errors import NotFoundError, SubScoutError
from subscout.reddit_client import RedditClient, RedditClientError, get_reddit_client
from subscout.schemas import (
    CreateAppRequest,
    GeneratePostRequest,
    PostUpdate,
    SearchRequest,
    SubredditUpdate,
    sanitize_string,
)

logger = logging.getLogger(__name__)

TREND_PRIORITY = {"rising": "high", "stable": "medium", "declining": "low"}


# Create FastAPI app
app = FastAPI(
    title="SubScout",
    description="Find your users' pain points on Reddit",
    version="0.1.0",
)


# ============================================================================
# Dependencies
# ============================================================================

def get_db() -> Database:
    """Database for the current request."""
    db = get_database()
    db.initialize()
    return db


def current_user_id(
    user: AuthenticatedUser = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> str:
    """Resolve the caller and mirror their profile into the users table."""
    try:
        db.upsert_user(
            user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            profile_image_url=user.profile_image_url,
        )
    except Exception as e:
        log_api_error("resolve_user", e, user.id)
        raise SubScoutError(f"Failed to resolve user: {e}", status=500, user_message="Failed to fetch user") from e
    return user.id


# ============================================================================
# Logging and error handling
# ============================================================================

def log_api_error(operation: str, error: Exception, user_id: str | None = None) -> None:
    logger.error(
        f"API Error in {operation} | user={user_id} | {type(error).__name__}: {error}",
        exc_info=error,
    )


def log_api_success(operation: str, user_id: str | None = None, **metadata) -> None:
    details = ", ".join(f"{key}={value}" for key, value in metadata.items())
    logger.info(f"API Success: {operation} | user={user_id}" + (f" | {details}" if details else ""))


def api_operation(operation: str, failure_message: str):
    """Turn unexpected exceptions into a logged, generic 500 response.

    SubScoutError and HTTPException pass through to their own handlers.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except (SubScoutError, HTTPException):
                raise
            except Exception as e:
                log_api_error(operation, e, kwargs.get("user_id"))
                return JSONResponse(status_code=500, content={"message": failure_message})
        return wrapper
    return decorator


@app.exception_handler(SubScoutError)
async def subscout_error_handler(request: Request, exc: SubScoutError) -> JSONResponse:
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


def _owned_app(db: Database, app_id: str, user_id: str) -> App:
    record = db.get_app(app_id)
    if record is None or record.user_id != user_id:
        raise NotFoundError("App not found")
    return record


def _owned_subreddit(db: Database, subreddit_id: str, user_id: str) -> Subreddit:
    record = db.get_subreddit(subreddit_id)
    if record is None or record.user_id != user_id:
        raise NotFoundError("Subreddit not found")
    return record


def _owned_post(db: Database, post_id: str, user_id: str) -> DraftPost:
    record = db.get_post(post_id)
    if record is None or record.user_id != user_id:
        raise NotFoundError("Post not found")
    return record


def _optional_reddit_client() -> RedditClient | None:
    """Reddit client, or None when credentials are missing."""
    try:
        return get_reddit_client()
    except RedditClientError as e:
        logger.warning(f"Reddit enrichment unavailable: {e}")
        return None


# ============================================================================
# Auth
# ============================================================================

@app.get("/api/auth/user")
@api_operation("get_user", "Failed to fetch user")
def get_auth_user(
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    user = db.get_user(user_id)
    return user.to_dict() if user else None


# ============================================================================
# Apps
# ============================================================================

@app.post("/api/apps")
@api_operation("create_app", "Failed to analyze app")
def create_app(
    body: CreateAppRequest,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    """Analyze an app URL with the LLM and store the profile."""
    analysis = analyze_app_url(sanitize_string(body.url))

    record = db.create_app(
        user_id=user_id,
        url=body.url,
        name=analysis.name,
        description=analysis.description,
        target_audience=analysis.target_audience,
        pain_points=analysis.pain_points,
        features=analysis.features,
        tags=analysis.tags,
    )

    db.create_activity(
        user_id,
        "app_analyzed",
        f"Analyzed app: {analysis.name}",
        {"appId": record.id, "url": body.url},
    )
    log_api_success("create_app", user_id, app_id=record.id)
    return record.to_dict()


@app.get("/api/apps")
@api_operation("list_apps", "Failed to fetch apps")
def list_apps(
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    return [record.to_dict() for record in db.get_apps_by_user(user_id)]


@app.get("/api/apps/{app_id}")
@api_operation("get_app", "Failed to fetch app")
def get_app(
    app_id: str,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    return _owned_app(db, app_id, user_id).to_dict()


# ============================================================================
# Subreddits
# ============================================================================

@app.post("/api/apps/{app_id}/subreddits/discover")
@api_operation("discover_subreddits", "Failed to discover subreddits")
def discover_app_subreddits(
    app_id: str,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    """Find communities for an app and store them as candidates."""
    record = _owned_app(db, app_id, user_id)

    recommendations = discover_subreddits(
        record.description or "",
        record.target_audience or "",
    )
    recommendations = enrich_recommendations(recommendations, _optional_reddit_client())

    subreddits = [
        db.create_subreddit(
            user_id=user_id,
            app_id=app_id,
            name=rec.name,
            display_name=rec.display_name,
            description=rec.description,
            subscribers=rec.subscribers,
            activity=rec.activity,
            match_score=rec.match_score,
            is_monitored=False,
        )
        for rec in recommendations
    ]

    db.create_activity(
        user_id,
        "subreddits_discovered",
        f"Discovered {len(subreddits)} subreddits for {record.name}",
        {"appId": app_id, "count": len(subreddits)},
    )
    log_api_success("discover_subreddits", user_id, app_id=app_id, count=len(subreddits))
    return [sub.to_dict() for sub in subreddits]


@app.get("/api/apps/{app_id}/subreddits")
@api_operation("list_subreddits", "Failed to fetch subreddits")
def list_app_subreddits(
    app_id: str,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    _owned_app(db, app_id, user_id)
    return [sub.to_dict() for sub in db.get_subreddits_by_app(app_id)]


@app.patch("/api/subreddits/{subreddit_id}")
@api_operation("update_subreddit", "Failed to update subreddit")
def update_subreddit(
    subreddit_id: str,
    body: SubredditUpdate,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    _owned_subreddit(db, subreddit_id, user_id)

    changes = body.model_dump(exclude_unset=True)
    subreddit = db.update_subreddit(subreddit_id, **changes)

    if changes.get("is_monitored"):
        db.create_activity(
            user_id,
            "subreddit_monitored",
            f"Started monitoring r/{subreddit.name}",
            {"subredditId": subreddit_id},
        )
    return subreddit.to_dict()


@app.post("/api/subreddits/{subreddit_id}/scan")
@api_operation("scan_subreddit", "Failed to scan subreddit")
def scan_subreddit(
    subreddit_id: str,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    """Scan a subreddit's hot posts and store the insights found."""
    subreddit = _owned_subreddit(db, subreddit_id, user_id)
    summary = run_subreddit_scan(db, user_id, subreddit, settings=get_config().scan)
    log_api_success("scan_subreddit", user_id, subreddit=subreddit.name, insights=summary.insights)
    return summary.to_dict()


@app.get("/api/subreddits/{subreddit_id}/posts")
@api_operation("subreddit_posts", "Failed to fetch subreddit posts")
def subreddit_posts(
    subreddit_id: str,
    limit: int = Query(25, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    subreddit = _owned_subreddit(db, subreddit_id, user_id)
    posts = get_reddit_client().get_hot_posts(subreddit.name, limit=limit)
    return [post.to_dict() for post in posts]


@app.post("/api/subreddits/{subreddit_id}/search")
@api_operation("search_subreddit", "Failed to search subreddit")
def search_subreddit(
    subreddit_id: str,
    body: SearchRequest,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    subreddit = _owned_subreddit(db, subreddit_id, user_id)
    posts = get_reddit_client().search_subreddit(subreddit.name, body.query, limit=body.limit)
    return [post.to_dict() for post in posts]


# ============================================================================
# Draft posts
# ============================================================================

@app.post("/api/posts/generate")
@api_operation("generate_post", "Failed to generate post")
def generate_post(
    body: GeneratePostRequest,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    """Draft a first-contact post for one of the user's subreddits."""
    subreddit = db.get_subreddit(body.subreddit_id)
    record = db.get_app(body.app_id)
    if (
        subreddit is None
        or record is None
        or record.user_id != user_id
        or subreddit.user_id != user_id
    ):
        raise NotFoundError("Subreddit or app not found")

    draft = generate_first_contact_post(
        subreddit.name,
        record.description or "",
        record.pain_points,
    )

    post = db.create_post(
        user_id=user_id,
        app_id=record.id,
        subreddit_id=subreddit.id,
        title=draft.title,
        content=draft.content,
        status="draft",
    )

    db.create_activity(
        user_id,
        "post_generated",
        f"Generated post for r/{subreddit.name}",
        {"postId": post.id, "subredditId": subreddit.id, "appId": record.id},
    )
    return post.to_dict()


@app.get("/api/posts")
@api_operation("list_posts", "Failed to fetch posts")
def list_posts(
    status: Optional[Literal["draft", "approved", "published"]] = None,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    posts = db.get_posts_by_status(user_id, status) if status else db.get_posts_by_user(user_id)
    return [post.to_dict() for post in posts]


@app.patch("/api/posts/{post_id}")
@api_operation("update_post", "Failed to update post")
def update_post(
    post_id: str,
    body: PostUpdate,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    _owned_post(db, post_id, user_id)

    changes = body.model_dump(exclude_unset=True)
    post = db.update_post(post_id, **changes)

    if changes.get("status") == "approved":
        db.create_activity(
            user_id,
            "post_approved",
            f"Approved post: {post.title}",
            {"postId": post_id},
        )
    return post.to_dict()


# ============================================================================
# Insights
# ============================================================================

@app.get("/api/apps/{app_id}/insights")
@api_operation("list_insights", "Failed to fetch insights")
def list_app_insights(
    app_id: str,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    _owned_app(db, app_id, user_id)
    return [insight.to_dict() for insight in db.get_insights_by_app(app_id)]


@app.post("/api/apps/{app_id}/insights/trends")
@api_operation("analyze_trends", "Failed to analyze trends")
def analyze_app_trends(
    app_id: str,
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    """Group an app's pain points into trends and store them as trend insights."""
    _owned_app(db, app_id, user_id)

    pain_points = db.get_insights_by_type(user_id, "pain_point", app_id=app_id)
    if not pain_points:
        return {"trends": [], "summary": "", "insights": 0}

    report = analyze_pain_point_trends([insight.title for insight in pain_points])

    # Trends span the app; attribute them to its most productive subreddit
    subreddit_id = Counter(i.subreddit_id for i in pain_points).most_common(1)[0][0]

    insights = db.create_insights([
        db.new_insight(
            user_id=user_id,
            app_id=app_id,
            subreddit_id=subreddit_id,
            insight_type="trend",
            title=trend.topic,
            content=report.summary or trend.topic,
            tags=[trend.topic, trend.growth],
            priority=TREND_PRIORITY[trend.growth],
        )
        for trend in report.trends
    ])

    db.create_activity(
        user_id,
        "trends_analyzed",
        f"Identified {len(insights)} trends",
        {"appId": app_id, "trendsFound": len(insights)},
    )

    return {
        "trends": [
            {"topic": t.topic, "frequency": t.frequency, "growth": t.growth}
            for t in report.trends
        ],
        "summary": report.summary,
        "insights": len(insights),
    }


@app.get("/api/insights/pain-points")
@api_operation("top_pain_points", "Failed to fetch pain points")
def top_pain_points(
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    normalizer = get_title_normalizer(get_config().scan.title_normalizer)
    return db.get_top_pain_points(user_id, limit=limit, normalizer=normalizer)


@app.get("/api/insights/trending")
@api_operation("trending_topics", "Failed to fetch trends")
def trending_topics(
    limit: int = Query(10, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    window = get_config().scan.trending_window
    return db.get_trending_topics(user_id, limit=limit, window=window)


@app.get("/api/insights/reddit-trends")
@api_operation("reddit_trends", "Failed to search Reddit trends")
def reddit_trends(
    query: str = Query(..., min_length=1, max_length=500),
    user_id: str = Depends(current_user_id),
):
    return search_reddit_trends(sanitize_string(query, max_length=500)).to_dict()


# ============================================================================
# Activity and stats
# ============================================================================

@app.get("/api/activities")
@api_operation("list_activities", "Failed to fetch activities")
def list_activities(
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    return [activity.to_dict() for activity in db.get_recent_activities(user_id, limit)]


@app.get("/api/stats")
@api_operation("user_stats", "Failed to fetch stats")
def user_stats(
    user_id: str = Depends(current_user_id),
    db: Database = Depends(get_db),
):
    return db.get_user_stats(user_id)


# ============================================================================
# Run the app
# ============================================================================

def run_server(host: str | None = None, port: int | None = None, reload: bool = False):
    """Run the web server."""
    import uvicorn

    config = get_config()
    configure_logging(config)

    uvicorn.run(
        "subscout.ui.web:app",
        host=host or config.server.host,
        port=port or config.server.port,
        reload=reload,
    )


if __name__ == "__main__":
    run_server()
