"""SQLite database layer for SubScout.

This module handles all database operations including:
- Schema creation
- CRUD operations for users, apps, subreddits, insights, draft posts and activities
- Transactional persistence of scan results
- Pain-point and trending-tag aggregation
"""

import json
import sqlite3
import time
import uuid
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Generator

from subscout.analysis.aggregation import (
    TitleNormalizer,
    count_tags,
    count_titles,
    decode_tags,
    get_title_normalizer,
)


INSIGHT_TYPES = ("pain_point", "feature_request", "trend")
POST_STATUSES = ("draft", "approved", "published")


def _new_id() -> str:
    return str(uuid.uuid4())


def _dumps(value: Any) -> str | None:
    return json.dumps(value) if value is not None else None


def _loads(text: str | None, default: Any = None) -> Any:
    if not text:
        return default
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError):
        return default


@dataclass
class User:
    """Authenticated user, mirrored from the identity provider."""
    id: str
    email: str | None
    first_name: str | None
    last_name: str | None
    profile_image_url: str | None
    created_at: float
    updated_at: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class App:
    """An analyzed application."""
    id: str
    user_id: str
    url: str
    name: str | None
    description: str | None
    target_audience: str | None
    pain_points_json: str | None
    features_json: str | None
    tags_json: str | None
    created_at: float
    updated_at: float

    @property
    def pain_points(self) -> list[str]:
        return _loads(self.pain_points_json, [])

    @property
    def features(self) -> list[str]:
        return _loads(self.features_json, [])

    @property
    def tags(self) -> list[str]:
        return _loads(self.tags_json, [])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "url": self.url,
            "name": self.name,
            "description": self.description,
            "target_audience": self.target_audience,
            "pain_points": self.pain_points,
            "features": self.features,
            "tags": self.tags,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass
class Subreddit:
    """A discovered (and possibly monitored) subreddit for an app."""
    id: str
    user_id: str
    app_id: str
    name: str
    display_name: str
    description: str | None
    subscribers: int | None
    activity: str | None  # high / medium / low
    match_score: float | None
    is_monitored: bool
    last_scanned: float | None
    created_at: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Insight:
    """A pain point, feature request or trend derived from Reddit."""
    id: str
    user_id: str
    app_id: str
    subreddit_id: str
    type: str  # pain_point / feature_request / trend
    title: str
    content: str
    url: str | None = None
    upvotes: int | None = None
    comments: int | None = None
    sentiment: str | None = None  # positive / negative / neutral
    priority: str | None = None  # high / medium / low
    tags_json: str | None = None
    created_at: float = 0.0

    @property
    def tags(self) -> list | dict | None:
        return decode_tags(self.tags_json)

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("tags_json")
        data["tags"] = self.tags
        return data


@dataclass
class DraftPost:
    """An outreach post drafted for human review."""
    id: str
    user_id: str
    app_id: str
    subreddit_id: str
    title: str
    content: str
    status: str  # draft / approved / published
    reddit_post_id: str | None
    published_at: float | None
    created_at: float
    updated_at: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Activity:
    """User activity log entry."""
    id: str
    user_id: str
    type: str
    description: str
    metadata_json: str | None
    created_at: float

    @property
    def metadata(self) -> dict:
        return _loads(self.metadata_json, {})

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type,
            "description": self.description,
            "metadata": self.metadata,
            "created_at": self.created_at,
        }


# SQL Schema
SCHEMA = """
-- Users mirrored from Supabase Auth
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT UNIQUE,
    first_name TEXT,
    last_name TEXT,
    profile_image_url TEXT,
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL
);

-- Analyzed applications
CREATE TABLE IF NOT EXISTS apps (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    url TEXT NOT NULL,
    name TEXT,
    description TEXT,
    target_audience TEXT,
    pain_points_json TEXT,
    features_json TEXT,
    tags_json TEXT,
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL
);

-- Discovered and monitored subreddits
CREATE TABLE IF NOT EXISTS subreddits (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    app_id TEXT NOT NULL,
    name TEXT NOT NULL,
    display_name TEXT NOT NULL,
    description TEXT,
    subscribers INTEGER,
    activity TEXT,
    match_score REAL,
    is_monitored INTEGER DEFAULT 0,
    last_scanned REAL,
    created_at REAL NOT NULL,
    FOREIGN KEY (app_id) REFERENCES apps(id)
);

-- Pain points, feature requests and trends
CREATE TABLE IF NOT EXISTS insights (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    app_id TEXT NOT NULL,
    subreddit_id TEXT NOT NULL,
    type TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    url TEXT,
    upvotes INTEGER,
    comments INTEGER,
    sentiment TEXT,
    priority TEXT,
    tags_json TEXT,
    created_at REAL NOT NULL
);

-- Drafted outreach posts
CREATE TABLE IF NOT EXISTS posts (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    app_id TEXT NOT NULL,
    subreddit_id TEXT NOT NULL,
    title TEXT NOT NULL,
    content TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'draft',
    reddit_post_id TEXT,
    published_at REAL,
    created_at REAL NOT NULL,
    updated_at REAL NOT NULL
);

-- User activity log
CREATE TABLE IF NOT EXISTS activities (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    description TEXT NOT NULL,
    metadata_json TEXT,
    created_at REAL NOT NULL
);

-- Indexes for performance
CREATE INDEX IF NOT EXISTS idx_apps_user_id ON apps(user_id);
CREATE INDEX IF NOT EXISTS idx_subreddits_app_id ON subreddits(app_id);
CREATE INDEX IF NOT EXISTS idx_subreddits_user_id ON subreddits(user_id);
CREATE INDEX IF NOT EXISTS idx_insights_user_type ON insights(user_id, type);
CREATE INDEX IF NOT EXISTS idx_insights_user_created ON insights(user_id, created_at);
CREATE INDEX IF NOT EXISTS idx_insights_app_id ON insights(app_id);
CREATE INDEX IF NOT EXISTS idx_posts_user_status ON posts(user_id, status);
CREATE INDEX IF NOT EXISTS idx_activities_user_created ON activities(user_id, created_at);
"""

# Columns callers may change through the update_* methods
APP_UPDATABLE = {
    "url", "name", "description", "target_audience",
    "pain_points_json", "features_json", "tags_json",
}
SUBREDDIT_UPDATABLE = {
    "display_name", "description", "subscribers", "activity",
    "match_score", "is_monitored", "last_scanned",
}
POST_UPDATABLE = {"title", "content", "status", "reddit_post_id", "published_at"}


class Database:
    """SQLite database manager for SubScout."""

    def __init__(self, db_path: str | Path = "./subscout.db"):
        """Initialize database connection.

        Args:
            db_path: Path to SQLite database file.
        """
        self.db_path = Path(db_path)
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        """Ensure the database directory exists."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Context manager for database connections.

        Commits when the block exits cleanly and rolls back otherwise.

        Yields:
            SQLite connection with row factory set.
        """
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Initialize database schema."""
        with self.connection() as conn:
            conn.executescript(SCHEMA)

    @staticmethod
    def _update(
        conn: sqlite3.Connection,
        table: str,
        record_id: str,
        fields: dict[str, Any],
        allowed: set[str],
    ) -> None:
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Cannot update {table} fields: {', '.join(sorted(unknown))}")
        if not fields:
            return

        assignments = ", ".join(f"{name} = ?" for name in fields)
        conn.execute(
            f"UPDATE {table} SET {assignments} WHERE id = ?",
            (*fields.values(), record_id),
        )

    # -------------------------------------------------------------------------
    # User operations
    # -------------------------------------------------------------------------

    def get_user(self, user_id: str) -> User | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return User(**dict(row)) if row else None

    def upsert_user(
        self,
        user_id: str,
        email: str | None = None,
        first_name: str | None = None,
        last_name: str | None = None,
        profile_image_url: str | None = None,
    ) -> User:
        """Insert a user or refresh their profile fields.

        An email is unique across users. When the identity provider issues a
        new ID for an address already on file, the older row gives the
        address up so the new ID can claim it.

        Args:
            user_id: Identity provider user ID.

        Returns:
            The stored user.
        """
        now = time.time()
        with self.connection() as conn:
            if email is not None:
                conn.execute(
                    "UPDATE users SET email = NULL, updated_at = ? WHERE email = ? AND id != ?",
                    (now, email, user_id),
                )
            conn.execute(
                """
                INSERT INTO users
                (id, email, first_name, last_name, profile_image_url, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email = excluded.email,
                    first_name = COALESCE(excluded.first_name, users.first_name),
                    last_name = COALESCE(excluded.last_name, users.last_name),
                    profile_image_url = COALESCE(excluded.profile_image_url, users.profile_image_url),
                    updated_at = excluded.updated_at
                """,
                (user_id, email, first_name, last_name, profile_image_url, now, now),
            )
            row = conn.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
            return User(**dict(row))

    # -------------------------------------------------------------------------
    # App operations
    # -------------------------------------------------------------------------

    def create_app(
        self,
        user_id: str,
        url: str,
        name: str | None = None,
        description: str | None = None,
        target_audience: str | None = None,
        pain_points: list[str] | None = None,
        features: list[str] | None = None,
        tags: list[str] | None = None,
    ) -> App:
        now = time.time()
        app = App(
            id=_new_id(),
            user_id=user_id,
            url=url,
            name=name,
            description=description,
            target_audience=target_audience,
            pain_points_json=_dumps(pain_points),
            features_json=_dumps(features),
            tags_json=_dumps(tags),
            created_at=now,
            updated_at=now,
        )
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO apps
                (id, user_id, url, name, description, target_audience,
                 pain_points_json, features_json, tags_json, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    app.id, app.user_id, app.url, app.name, app.description,
                    app.target_audience, app.pain_points_json, app.features_json,
                    app.tags_json, app.created_at, app.updated_at,
                ),
            )
        return app

    def get_app(self, app_id: str) -> App | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM apps WHERE id = ?", (app_id,)).fetchone()
            return App(**dict(row)) if row else None

    def get_apps_by_user(self, user_id: str) -> list[App]:
        """Get a user's apps, newest first."""
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM apps WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
            return [App(**dict(row)) for row in rows]

    def update_app(self, app_id: str, **fields: Any) -> App | None:
        for key in ("pain_points", "features", "tags"):
            if key in fields:
                fields[f"{key}_json"] = _dumps(fields.pop(key))
        fields["updated_at"] = time.time()

        with self.connection() as conn:
            self._update(conn, "apps", app_id, fields, APP_UPDATABLE | {"updated_at"})
        return self.get_app(app_id)

    # -------------------------------------------------------------------------
    # Subreddit operations
    # -------------------------------------------------------------------------

    def create_subreddit(
        self,
        user_id: str,
        app_id: str,
        name: str,
        display_name: str,
        description: str | None = None,
        subscribers: int | None = None,
        activity: str | None = None,
        match_score: float | None = None,
        is_monitored: bool = False,
    ) -> Subreddit:
        subreddit = Subreddit(
            id=_new_id(),
            user_id=user_id,
            app_id=app_id,
            name=name,
            display_name=display_name,
            description=description,
            subscribers=subscribers,
            activity=activity,
            match_score=match_score,
            is_monitored=is_monitored,
            last_scanned=None,
            created_at=time.time(),
        )
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO subreddits
                (id, user_id, app_id, name, display_name, description, subscribers,
                 activity, match_score, is_monitored, last_scanned, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    subreddit.id, subreddit.user_id, subreddit.app_id, subreddit.name,
                    subreddit.display_name, subreddit.description, subreddit.subscribers,
                    subreddit.activity, subreddit.match_score, int(subreddit.is_monitored),
                    subreddit.last_scanned, subreddit.created_at,
                ),
            )
        return subreddit

    @staticmethod
    def _row_to_subreddit(row: sqlite3.Row) -> Subreddit:
        data = dict(row)
        data["is_monitored"] = bool(data["is_monitored"])
        return Subreddit(**data)

    def get_subreddit(self, subreddit_id: str) -> Subreddit | None:
        with self.connection() as conn:
            row = conn.execute(
                "SELECT * FROM subreddits WHERE id = ?", (subreddit_id,)
            ).fetchone()
            return self._row_to_subreddit(row) if row else None

    def get_subreddits_by_app(self, app_id: str) -> list[Subreddit]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM subreddits WHERE app_id = ? ORDER BY match_score DESC, rowid",
                (app_id,),
            ).fetchall()
            return [self._row_to_subreddit(row) for row in rows]

    def get_monitored_subreddits_by_user(self, user_id: str) -> list[Subreddit]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM subreddits WHERE user_id = ? AND is_monitored = 1",
                (user_id,),
            ).fetchall()
            return [self._row_to_subreddit(row) for row in rows]

    def update_subreddit(self, subreddit_id: str, **fields: Any) -> Subreddit | None:
        if "is_monitored" in fields:
            fields["is_monitored"] = int(bool(fields["is_monitored"]))

        with self.connection() as conn:
            self._update(conn, "subreddits", subreddit_id, fields, SUBREDDIT_UPDATABLE)
        return self.get_subreddit(subreddit_id)

    # -------------------------------------------------------------------------
    # Insight operations
    # -------------------------------------------------------------------------

    def new_insight(
        self,
        user_id: str,
        app_id: str,
        subreddit_id: str,
        insight_type: str,
        title: str,
        content: str,
        tags: list | dict | None = None,
        **extra: Any,
    ) -> Insight:
        """Build an unsaved Insight with a fresh ID and timestamp."""
        if insight_type not in INSIGHT_TYPES:
            raise ValueError(f"Unknown insight type: {insight_type}")

        return Insight(
            id=_new_id(),
            user_id=user_id,
            app_id=app_id,
            subreddit_id=subreddit_id,
            type=insight_type,
            title=title,
            content=content,
            tags_json=_dumps(tags),
            created_at=time.time(),
            **extra,
        )

    @staticmethod
    def _insert_insight(conn: sqlite3.Connection, insight: Insight) -> None:
        conn.execute(
            """
            INSERT INTO insights
            (id, user_id, app_id, subreddit_id, type, title, content, url,
             upvotes, comments, sentiment, priority, tags_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                insight.id, insight.user_id, insight.app_id, insight.subreddit_id,
                insight.type, insight.title, insight.content, insight.url,
                insight.upvotes, insight.comments, insight.sentiment,
                insight.priority, insight.tags_json, insight.created_at,
            ),
        )

    def create_insight(self, insight: Insight) -> Insight:
        with self.connection() as conn:
            self._insert_insight(conn, insight)
        return insight

    def create_insights(self, insights: list[Insight]) -> list[Insight]:
        """Insert a batch of insights in a single transaction."""
        with self.connection() as conn:
            for insight in insights:
                self._insert_insight(conn, insight)
        return list(insights)

    def record_scan(
        self,
        subreddit_id: str,
        insights: list[Insight],
        activity: "Activity",
    ) -> list[Insight]:
        """Persist one scan's insights, its activity entry and last_scanned.

        All writes share one transaction: either every row is committed or
        none is. The caller builds the activity from the insights it passes
        in, so its count always matches what was written.

        Returns:
            The committed insights.
        """
        with self.connection() as conn:
            for insight in insights:
                self._insert_insight(conn, insight)
            self._insert_activity(conn, activity)
            conn.execute(
                "UPDATE subreddits SET last_scanned = ? WHERE id = ?",
                (activity.created_at, subreddit_id),
            )
        return list(insights)

    def get_insights_by_app(self, app_id: str) -> list[Insight]:
        """Get an app's insights, newest first."""
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM insights WHERE app_id = ? ORDER BY created_at DESC, rowid DESC",
                (app_id,),
            ).fetchall()
            return [Insight(**dict(row)) for row in rows]

    def get_insights_by_type(
        self,
        user_id: str,
        insight_type: str,
        app_id: str | None = None,
    ) -> list[Insight]:
        query = "SELECT * FROM insights WHERE user_id = ? AND type = ?"
        params: list = [user_id, insight_type]

        if app_id is not None:
            query += " AND app_id = ?"
            params.append(app_id)

        query += " ORDER BY created_at DESC, rowid DESC"

        with self.connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [Insight(**dict(row)) for row in rows]

    def get_top_pain_points(
        self,
        user_id: str,
        limit: int = 10,
        normalizer: TitleNormalizer | None = None,
    ) -> list[dict]:
        """Most frequent pain-point titles for a user.

        Args:
            user_id: Owner of the insights.
            limit: Maximum number of groups to return.
            normalizer: Title grouping strategy. Defaults to exact match.

        Returns:
            List of {"title", "count"} sorted by count descending.
        """
        normalizer = normalizer or get_title_normalizer("exact")

        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT title FROM insights
                WHERE user_id = ? AND type = 'pain_point'
                ORDER BY created_at, rowid
                """,
                (user_id,),
            ).fetchall()

        return count_titles((row["title"] for row in rows), normalizer, limit)

    def get_trending_topics(
        self,
        user_id: str,
        limit: int = 10,
        window: int = 100,
    ) -> list[dict]:
        """Most frequent tags across a user's most recent insights.

        Only the newest `window` insights (of any type) are considered, so
        older tags age out as new insights accumulate.

        Returns:
            List of {"tag", "count"} sorted by count descending.
        """
        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT tags_json FROM insights
                WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (user_id, window),
            ).fetchall()

        return count_tags((decode_tags(row["tags_json"]) for row in rows), limit)

    # -------------------------------------------------------------------------
    # Draft post operations
    # -------------------------------------------------------------------------

    def create_post(
        self,
        user_id: str,
        app_id: str,
        subreddit_id: str,
        title: str,
        content: str,
        status: str = "draft",
    ) -> DraftPost:
        if status not in POST_STATUSES:
            raise ValueError(f"Unknown post status: {status}")

        now = time.time()
        post = DraftPost(
            id=_new_id(),
            user_id=user_id,
            app_id=app_id,
            subreddit_id=subreddit_id,
            title=title,
            content=content,
            status=status,
            reddit_post_id=None,
            published_at=None,
            created_at=now,
            updated_at=now,
        )
        with self.connection() as conn:
            conn.execute(
                """
                INSERT INTO posts
                (id, user_id, app_id, subreddit_id, title, content, status,
                 reddit_post_id, published_at, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    post.id, post.user_id, post.app_id, post.subreddit_id, post.title,
                    post.content, post.status, post.reddit_post_id, post.published_at,
                    post.created_at, post.updated_at,
                ),
            )
        return post

    def get_post(self, post_id: str) -> DraftPost | None:
        with self.connection() as conn:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (post_id,)).fetchone()
            return DraftPost(**dict(row)) if row else None

    def get_posts_by_user(self, user_id: str) -> list[DraftPost]:
        with self.connection() as conn:
            rows = conn.execute(
                "SELECT * FROM posts WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
                (user_id,),
            ).fetchall()
            return [DraftPost(**dict(row)) for row in rows]

    def get_posts_by_status(self, user_id: str, status: str) -> list[DraftPost]:
        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM posts WHERE user_id = ? AND status = ?
                ORDER BY created_at DESC, rowid DESC
                """,
                (user_id, status),
            ).fetchall()
            return [DraftPost(**dict(row)) for row in rows]

    def update_post(self, post_id: str, **fields: Any) -> DraftPost | None:
        status = fields.get("status")
        if status is not None and status not in POST_STATUSES:
            raise ValueError(f"Unknown post status: {status}")
        if status == "published" and "published_at" not in fields:
            fields["published_at"] = time.time()
        fields["updated_at"] = time.time()

        with self.connection() as conn:
            self._update(conn, "posts", post_id, fields, POST_UPDATABLE | {"updated_at"})
        return self.get_post(post_id)

    # -------------------------------------------------------------------------
    # Activity operations
    # -------------------------------------------------------------------------

    def new_activity(
        self,
        user_id: str,
        activity_type: str,
        description: str,
        metadata: dict | None = None,
    ) -> Activity:
        """Build an unsaved Activity with a fresh ID and timestamp."""
        return Activity(
            id=_new_id(),
            user_id=user_id,
            type=activity_type,
            description=description,
            metadata_json=_dumps(metadata),
            created_at=time.time(),
        )

    @staticmethod
    def _insert_activity(conn: sqlite3.Connection, activity: Activity) -> None:
        conn.execute(
            """
            INSERT INTO activities
            (id, user_id, type, description, metadata_json, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                activity.id, activity.user_id, activity.type, activity.description,
                activity.metadata_json, activity.created_at,
            ),
        )

    def create_activity(
        self,
        user_id: str,
        activity_type: str,
        description: str,
        metadata: dict | None = None,
    ) -> Activity:
        activity = self.new_activity(user_id, activity_type, description, metadata)
        with self.connection() as conn:
            self._insert_activity(conn, activity)
        return activity

    def get_recent_activities(self, user_id: str, limit: int = 20) -> list[Activity]:
        with self.connection() as conn:
            rows = conn.execute(
                """
                SELECT * FROM activities WHERE user_id = ?
                ORDER BY created_at DESC, rowid DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()
            return [Activity(**dict(row)) for row in rows]

    # -------------------------------------------------------------------------
    # Stats
    # -------------------------------------------------------------------------

    def get_user_stats(self, user_id: str) -> dict:
        """Dashboard counters for a user."""
        with self.connection() as conn:
            active = conn.execute(
                "SELECT COUNT(*) AS count FROM subreddits WHERE user_id = ? AND is_monitored = 1",
                (user_id,),
            ).fetchone()["count"]
            pain_points = conn.execute(
                "SELECT COUNT(*) AS count FROM insights WHERE user_id = ? AND type = 'pain_point'",
                (user_id,),
            ).fetchone()["count"]
            drafted = conn.execute(
                "SELECT COUNT(*) AS count FROM posts WHERE user_id = ? AND status = 'draft'",
                (user_id,),
            ).fetchone()["count"]

        return {
            "active_subreddits": active,
            "pain_points": pain_points,
            "posts_drafted": drafted,
        }

    def get_stats(self) -> dict:
        """Get database statistics.

        Returns:
            Dictionary with counts for each table.
        """
        stats = {}
        tables = ["users", "apps", "subreddits", "insights", "posts", "activities"]

        with self.connection() as conn:
            for table in tables:
                try:
                    row = conn.execute(f"SELECT COUNT(*) as count FROM {table}").fetchone()
                    stats[table] = row["count"]
                except sqlite3.OperationalError:
                    stats[table] = 0  # Table may not exist yet

        return stats


def get_database(db_path: str | Path | None = None) -> Database:
    """Get a database instance.

    Args:
        db_path: Optional path to database file.

    Returns:
        Database instance.
    """
    if db_path is None:
        from subscout.config import get_config
        db_path = get_config().database.path

    return Database(db_path)
