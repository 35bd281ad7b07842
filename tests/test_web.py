"""Tests for the HTTP API."""

import os
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from subscout.analysis import scanner
from subscout.app_analysis import AppAnalysis, PostDraft, TrendItem, TrendReport
from subscout.auth import AuthenticatedUser, get_current_user
from subscout.database import Database
from subscout.discovery import RedditTrends, SubredditRecommendation
from subscout.reddit_client import AuthenticationError, RedditPost
from subscout.ui import web
from subscout.ui.web import app, get_db


USER_ID = "user-1"


@pytest.fixture
def temp_db():
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    db = Database(db_path)
    db.initialize()

    yield db

    os.unlink(db_path)


@pytest.fixture
def client(temp_db):
    app.dependency_overrides[get_current_user] = lambda: AuthenticatedUser(
        id=USER_ID, email="ada@example.com", first_name="Ada"
    )
    app.dependency_overrides[get_db] = lambda: temp_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def stored_app(temp_db):
    return temp_db.create_app(
        user_id=USER_ID,
        url="https://example.com",
        name="Example",
        description="Shared notes for remote teams",
        target_audience="Remote teams",
        pain_points=["sync conflicts"],
    )


@pytest.fixture
def stored_subreddit(temp_db, stored_app):
    return temp_db.create_subreddit(
        user_id=USER_ID,
        app_id=stored_app.id,
        name="productivity",
        display_name="r/productivity",
        match_score=90,
    )


def make_post(title: str, content: str = "") -> RedditPost:
    return RedditPost(
        title=title,
        content=content,
        url="https://example.com",
        score=5,
        comments=1,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        author="someone",
        permalink="https://reddit.com/r/productivity/comments/x",
    )


class FakeReddit:
    def __init__(self, posts):
        self.posts = posts

    def get_hot_posts(self, subreddit, limit=25):
        return self.posts[:limit]

    def search_subreddit(self, subreddit, query, limit=10):
        return [p for p in self.posts if query in p.title.lower()][:limit]

    def get_subreddit_info(self, name):
        return None


def no_reddit():
    raise AuthenticationError("Reddit API credentials not configured")


# ============================================================================
# Auth
# ============================================================================

def test_requires_token(temp_db):
    app.dependency_overrides[get_db] = lambda: temp_db
    try:
        response = TestClient(app).get("/api/apps")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 401


def test_auth_user_is_mirrored(client, temp_db):
    response = client.get("/api/auth/user")

    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"
    assert temp_db.get_user(USER_ID).first_name == "Ada"


def test_new_id_for_known_email_is_resolved(client, temp_db):
    temp_db.upsert_user("old-id", email="ada@example.com")

    response = client.get("/api/apps")

    assert response.status_code == 200
    assert temp_db.get_user(USER_ID).email == "ada@example.com"
    assert temp_db.get_user("old-id").email is None


def test_user_resolution_failure_is_json(client, temp_db, monkeypatch):
    def broken_upsert(*args, **kwargs):
        raise RuntimeError("disk I/O error")

    monkeypatch.setattr(temp_db, "upsert_user", broken_upsert)

    response = client.get("/api/apps")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch user", "code": "INTERNAL_ERROR"}


# ============================================================================
# Apps
# ============================================================================

def test_create_app(client, temp_db, monkeypatch):
    monkeypatch.setattr(web, "analyze_app_url", lambda url: AppAnalysis(
        name="Example",
        description="Shared notes",
        target_audience="Teams",
        pain_points=["sync"],
        features=["offline"],
        tags=["notes"],
    ))

    response = client.post("/api/apps", json={"url": "https://example.com"})

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Example"
    assert data["pain_points"] == ["sync"]
    assert temp_db.get_recent_activities(USER_ID)[0].type == "app_analyzed"


def test_create_app_rejects_bad_url(client):
    response = client.post("/api/apps", json={"url": "ftp://example.com"})

    assert response.status_code == 422


def test_create_app_failure_is_generic(client, monkeypatch):
    def explode(url):
        raise RuntimeError("model overloaded")

    monkeypatch.setattr(web, "analyze_app_url", explode)

    response = client.post("/api/apps", json={"url": "https://example.com"})

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to analyze app"}


def test_list_and_get_apps(client, stored_app):
    assert [a["id"] for a in client.get("/api/apps").json()] == [stored_app.id]
    assert client.get(f"/api/apps/{stored_app.id}").json()["name"] == "Example"


def test_other_users_app_is_not_found(client, temp_db):
    foreign = temp_db.create_app(user_id="user-2", url="https://other.example.com")

    response = client.get(f"/api/apps/{foreign.id}")

    assert response.status_code == 404
    assert response.json() == {"message": "App not found", "code": "NOT_FOUND"}


# ============================================================================
# Subreddits
# ============================================================================

def test_discover_subreddits(client, temp_db, stored_app, monkeypatch):
    monkeypatch.setattr(web, "discover_subreddits", lambda description, audience: [
        SubredditRecommendation("remotework", "r/remotework", "Remote work", 200000, "high", 95),
        SubredditRecommendation("Notion", "r/Notion", "Notion users", 300000, "high", 80),
    ])
    monkeypatch.setattr(web, "get_reddit_client", no_reddit)

    response = client.post(f"/api/apps/{stored_app.id}/subreddits/discover")

    assert response.status_code == 200
    assert [s["name"] for s in response.json()] == ["remotework", "Notion"]
    assert all(s["is_monitored"] is False for s in response.json())

    listed = client.get(f"/api/apps/{stored_app.id}/subreddits").json()
    assert [s["name"] for s in listed] == ["remotework", "Notion"]

    activity = temp_db.get_recent_activities(USER_ID)[0]
    assert activity.type == "subreddits_discovered"
    assert activity.metadata["count"] == 2


def test_monitor_subreddit(client, temp_db, stored_subreddit):
    response = client.patch(
        f"/api/subreddits/{stored_subreddit.id}",
        json={"isMonitored": True},
    )

    assert response.status_code == 200
    assert response.json()["is_monitored"] is True
    assert temp_db.get_recent_activities(USER_ID)[0].type == "subreddit_monitored"
    assert client.get("/api/stats").json()["active_subreddits"] == 1


def test_null_monitor_flag_is_rejected(client, temp_db, stored_subreddit):
    temp_db.update_subreddit(stored_subreddit.id, is_monitored=True)

    response = client.patch(
        f"/api/subreddits/{stored_subreddit.id}",
        json={"isMonitored": None, "description": "x"},
    )

    assert response.status_code == 422
    assert temp_db.get_subreddit(stored_subreddit.id).is_monitored


def test_scan_subreddit(client, temp_db, stored_subreddit, monkeypatch):
    posts = [
        make_post("this is broken and annoying"),
        make_post("I wish there was a dark mode"),
        make_post("nothing notable here"),
    ]
    monkeypatch.setattr(scanner, "get_reddit_client", lambda: FakeReddit(posts))

    response = client.post(f"/api/subreddits/{stored_subreddit.id}/scan")

    assert response.status_code == 200
    assert response.json() == {
        "insights": 2,
        "painPoints": 1,
        "featureRequests": 1,
        "posts": 3,
    }

    activity = temp_db.get_recent_activities(USER_ID)[0]
    assert activity.type == "subreddit_scanned"
    assert activity.metadata == {"subredditId": stored_subreddit.id, "insightsFound": 2}


def test_scan_without_reddit_credentials(client, temp_db, stored_subreddit, monkeypatch):
    monkeypatch.setattr(scanner, "get_reddit_client", no_reddit)

    response = client.post(f"/api/subreddits/{stored_subreddit.id}/scan")

    assert response.status_code == 200
    assert response.json()["insights"] == 0


def test_scan_unknown_subreddit(client):
    response = client.post("/api/subreddits/missing/scan")

    assert response.status_code == 404
    assert response.json()["message"] == "Subreddit not found"


def test_scan_other_users_subreddit(client, temp_db):
    foreign_app = temp_db.create_app(user_id="user-2", url="https://other.example.com")
    foreign = temp_db.create_subreddit("user-2", foreign_app.id, "python", "r/python")

    response = client.post(f"/api/subreddits/{foreign.id}/scan")

    assert response.status_code == 404
    assert temp_db.get_stats()["insights"] == 0


def test_scan_failure_is_generic(client, stored_subreddit, monkeypatch):
    def explode(*args, **kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(web, "run_subreddit_scan", explode)

    response = client.post(f"/api/subreddits/{stored_subreddit.id}/scan")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to scan subreddit"}


def test_live_posts_and_search(client, stored_subreddit, monkeypatch):
    posts = [make_post("Sync keeps failing"), make_post("Weekly thread")]
    monkeypatch.setattr(web, "get_reddit_client", lambda: FakeReddit(posts))

    hot = client.get(f"/api/subreddits/{stored_subreddit.id}/posts?limit=1")
    assert [p["title"] for p in hot.json()] == ["Sync keeps failing"]

    found = client.post(
        f"/api/subreddits/{stored_subreddit.id}/search",
        json={"query": "weekly", "limit": 5},
    )
    assert [p["title"] for p in found.json()] == ["Weekly thread"]


def test_live_posts_without_credentials(client, stored_subreddit, monkeypatch):
    monkeypatch.setattr(web, "get_reddit_client", no_reddit)

    response = client.get(f"/api/subreddits/{stored_subreddit.id}/posts")

    assert response.status_code == 500
    assert response.json() == {"message": "Failed to fetch subreddit posts"}


# ============================================================================
# Draft posts
# ============================================================================

def test_generate_and_approve_post(client, temp_db, stored_app, stored_subreddit, monkeypatch):
    monkeypatch.setattr(
        web,
        "generate_first_contact_post",
        lambda name, description, pain_points: PostDraft(
            title=f"How do you handle {pain_points[0]}?",
            content="Curious how others deal with this.",
        ),
    )

    response = client.post(
        "/api/posts/generate",
        json={"subredditId": stored_subreddit.id, "appId": stored_app.id},
    )

    assert response.status_code == 200
    post = response.json()
    assert post["title"] == "How do you handle sync conflicts?"
    assert post["status"] == "draft"

    response = client.patch(f"/api/posts/{post['id']}", json={"status": "approved"})

    assert response.json()["status"] == "approved"
    assert temp_db.get_recent_activities(USER_ID)[0].type == "post_approved"
    assert [p["id"] for p in client.get("/api/posts?status=approved").json()] == [post["id"]]
    assert client.get("/api/posts?status=draft").json() == []


def test_update_post_validates_status(client, temp_db, stored_subreddit):
    post = temp_db.create_post(USER_ID, stored_subreddit.app_id, stored_subreddit.id, "t", "c")

    response = client.patch(f"/api/posts/{post.id}", json={"status": "queued"})

    assert response.status_code == 422


def test_update_post_rejects_null_title(client, temp_db, stored_subreddit):
    post = temp_db.create_post(USER_ID, stored_subreddit.app_id, stored_subreddit.id, "t", "c")

    response = client.patch(f"/api/posts/{post.id}", json={"title": None})

    assert response.status_code == 422
    assert temp_db.get_post(post.id).title == "t"


# ============================================================================
# Insights
# ============================================================================

def test_pain_points_and_trending(client, temp_db, stored_subreddit, monkeypatch):
    posts = [make_post("Sync is broken"), make_post("Export is annoying")]
    monkeypatch.setattr(scanner, "get_reddit_client", lambda: FakeReddit(posts))

    client.post(f"/api/subreddits/{stored_subreddit.id}/scan")
    client.post(f"/api/subreddits/{stored_subreddit.id}/scan")

    pain_points = client.get("/api/insights/pain-points").json()
    assert {"title": "Sync is broken", "count": 2} in pain_points

    # Scan insights carry a source marker, not topic tags
    assert client.get("/api/insights/trending").json() == []

    insights = client.get(f"/api/apps/{stored_subreddit.app_id}/insights").json()
    assert len(insights) == 4
    assert insights[0]["tags"] == {"source": "reddit_scan"}


def test_analyze_trends(client, temp_db, stored_subreddit, monkeypatch):
    for title in ("Sync is broken", "Billing is confusing"):
        temp_db.create_insight(temp_db.new_insight(
            USER_ID, stored_subreddit.app_id, stored_subreddit.id, "pain_point", title, title,
        ))
    monkeypatch.setattr(web, "analyze_pain_point_trends", lambda titles: TrendReport(
        trends=[TrendItem(topic="billing", frequency=3, growth="rising")],
        summary="Billing complaints are growing",
    ))

    response = client.post(f"/api/apps/{stored_subreddit.app_id}/insights/trends")

    assert response.status_code == 200
    assert response.json() == {
        "trends": [{"topic": "billing", "frequency": 3, "growth": "rising"}],
        "summary": "Billing complaints are growing",
        "insights": 1,
    }

    trend = temp_db.get_insights_by_type(USER_ID, "trend")[0]
    assert trend.priority == "high"
    assert client.get("/api/insights/trending").json() == [
        {"tag": "billing", "count": 1},
        {"tag": "rising", "count": 1},
    ]


def test_analyze_trends_without_pain_points(client, stored_app):
    response = client.post(f"/api/apps/{stored_app.id}/insights/trends")

    assert response.json() == {"trends": [], "summary": "", "insights": 0}


def test_reddit_trends(client, monkeypatch):
    monkeypatch.setattr(
        web,
        "search_reddit_trends",
        lambda query: RedditTrends(trends=["AI notes"], discussions=["r/productivity thread"]),
    )

    response = client.get("/api/insights/reddit-trends", params={"query": "note taking"})

    assert response.json() == {"trends": ["AI notes"], "discussions": ["r/productivity thread"]}


# ============================================================================
# Activity and stats
# ============================================================================

def test_activities_and_stats(client, temp_db, stored_subreddit):
    temp_db.create_activity(USER_ID, "app_analyzed", "Analyzed app: Example")
    temp_db.create_activity("user-2", "app_analyzed", "Someone else")

    activities = client.get("/api/activities?limit=5").json()

    assert [a["description"] for a in activities] == ["Analyzed app: Example"]
    assert client.get("/api/stats").json() == {
        "active_subreddits": 0,
        "pain_points": 0,
        "posts_drafted": 0,
    }
