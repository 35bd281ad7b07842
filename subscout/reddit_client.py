"""Reddit API client for SubScout.

This module handles all Reddit API interactions using PRAW.
Uses application-only (read-only) OAuth authentication.
"""

import logging
import warnings
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

import praw

from subscout.config import RedditCredentials, get_config

logger = logging.getLogger(__name__)

# Suppress PRAW async environment warning (sync PRAW runs in FastAPI's thread pool)
warnings.filterwarnings("ignore", message=".*asynchronous environment.*")


@dataclass
class SubredditInfo:
    """Basic subreddit information."""
    name: str
    display_name: str
    description: str
    subscribers: int
    active_users: int
    is_nsfw: bool
    public: bool


@dataclass
class RedditPost:
    """A post as returned by the hot and search listings."""
    title: str
    content: str
    url: str
    score: int
    comments: int
    created_at: datetime
    author: str
    permalink: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["created_at"] = self.created_at.isoformat()
        return data


class RedditClientError(Exception):
    """Base exception for Reddit client errors."""
    pass


class AuthenticationError(RedditClientError):
    """Raised when authentication fails."""
    pass


class RedditClient:
    """Reddit API client using PRAW for application-only OAuth.

    This client only requires client_id and client_secret (no username/password)
    and provides read-only access to public Reddit data.
    """

    def __init__(self, credentials: RedditCredentials | None = None):
        """Initialize Reddit client.

        Args:
            credentials: Reddit API credentials. If None, loads from config.

        Raises:
            AuthenticationError: If credentials are missing.
        """
        if credentials is None:
            credentials = get_config().reddit

        if not credentials.is_valid():
            raise AuthenticationError(
                "Reddit API credentials not configured. "
                "Set REDDIT_CLIENT_ID and REDDIT_CLIENT_SECRET environment variables."
            )

        self._credentials = credentials
        self._reddit = self._create_reddit_instance()

    def _create_reddit_instance(self) -> praw.Reddit:
        return praw.Reddit(
            client_id=self._credentials.client_id,
            client_secret=self._credentials.client_secret,
            user_agent=self._credentials.user_agent,
        )

    def verify_connection(self) -> bool:
        """Verify that the Reddit connection works.

        Raises:
            AuthenticationError: If authentication fails.
        """
        try:
            self._reddit.subreddit("python").id
            return True
        except Exception as e:
            raise AuthenticationError(f"Failed to connect to Reddit: {e}")

    def get_subreddit_info(self, name: str) -> SubredditInfo | None:
        """Get information about a subreddit.

        Args:
            name: Subreddit name (without r/).

        Returns:
            SubredditInfo if found, None otherwise.
        """
        try:
            sub = self._reddit.subreddit(name)
            # Access an attribute to trigger the API call
            _ = sub.subscribers
            return SubredditInfo(
                name=sub.display_name,
                display_name=sub.display_name_prefixed,
                description=sub.public_description or sub.title or "",
                subscribers=sub.subscribers or 0,
                active_users=getattr(sub, "active_user_count", None) or 0,
                is_nsfw=bool(sub.over18),
                public=sub.subreddit_type == "public",
            )
        except Exception as e:
            logger.warning(f"Failed to get subreddit info for r/{name}: {e}")
            return None

    def get_hot_posts(self, subreddit: str, limit: int = 25) -> list[RedditPost]:
        """Get hot posts from a subreddit.

        Args:
            subreddit: Subreddit name (without r/).
            limit: Maximum number of posts.

        Returns:
            List of posts; empty if the listing could not be fetched.
        """
        posts = []
        try:
            sub = self._reddit.subreddit(subreddit)
            for submission in sub.hot(limit=limit):
                posts.append(self._submission_to_post(submission))
        except Exception as e:
            logger.warning(f"Failed to fetch hot posts from r/{subreddit}: {e}")
            return []

        return posts

    def search_subreddit(
        self,
        subreddit: str,
        query: str,
        limit: int = 10,
    ) -> list[RedditPost]:
        """Search posts within a single subreddit by relevance.

        Args:
            subreddit: Subreddit name (without r/).
            query: Search query.
            limit: Maximum number of posts.

        Returns:
            List of matching posts; empty on failure.
        """
        posts = []
        try:
            sub = self._reddit.subreddit(subreddit)
            for submission in sub.search(query, sort="relevance", limit=limit):
                posts.append(self._submission_to_post(submission))
        except Exception as e:
            logger.warning(f"Failed to search r/{subreddit} for '{query}': {e}")
            return []

        return posts

    def _submission_to_post(self, submission) -> RedditPost:
        """Convert a PRAW Submission to a RedditPost."""
        author = submission.author.name if submission.author else "[deleted]"
        return RedditPost(
            title=submission.title,
            content=submission.selftext or "",
            url=submission.url,
            score=submission.score,
            comments=submission.num_comments,
            created_at=datetime.fromtimestamp(submission.created_utc, tz=timezone.utc),
            author=author,
            permalink=f"https://reddit.com{submission.permalink}",
        )


def get_reddit_client(credentials: RedditCredentials | None = None) -> RedditClient:
    """Get a Reddit client instance.

    Args:
        credentials: Optional credentials. If None, loads from config.
    """
    return RedditClient(credentials)
