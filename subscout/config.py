"""Configuration management for SubScout."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class ScanConfig:
    """Subreddit scan and insight aggregation settings."""
    hot_posts_limit: int = 50
    max_insights_per_category: int = 10
    max_display_posts: int = 10
    max_topics: int = 10
    trending_window: int = 100
    title_normalizer: str = "exact"  # exact / casefold


@dataclass
class LLMConfig:
    """LLM configuration."""
    analysis_provider: str = "google"
    analysis_model: str = "gemini-2.0-flash"
    discovery_provider: str = "perplexity"
    discovery_model: str = "sonar"
    temperature: float = 0.7
    max_tokens: int = 2000


@dataclass
class DatabaseConfig:
    """Database configuration."""
    path: str = "./subscout.db"


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt: str = "%H:%M:%S"


@dataclass
class RedditCredentials:
    """Reddit API credentials from environment."""
    client_id: str = ""
    client_secret: str = ""
    user_agent: str = "SubScout/1.0.0"

    @classmethod
    def from_env(cls) -> "RedditCredentials":
        """Load credentials from environment variables."""
        return cls(
            client_id=os.getenv("REDDIT_CLIENT_ID", ""),
            client_secret=os.getenv("REDDIT_CLIENT_SECRET", ""),
            user_agent=os.getenv("REDDIT_USER_AGENT", "SubScout/1.0.0"),
        )

    def is_valid(self) -> bool:
        """Check if credentials are configured."""
        return bool(self.client_id and self.client_secret)


@dataclass
class LLMCredentials:
    """LLM API credentials from environment."""
    google_api_key: str = ""
    perplexity_api_key: str = ""
    openai_api_key: str = ""

    @classmethod
    def from_env(cls) -> "LLMCredentials":
        """Load credentials from environment variables."""
        return cls(
            google_api_key=os.getenv("GEMINI_API_KEY", ""),
            perplexity_api_key=os.getenv("PERPLEXITY_API_KEY", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
        )

    def get_key_for_provider(self, provider: str) -> str:
        """Get API key for a specific provider."""
        mapping = {
            "google": self.google_api_key,
            "perplexity": self.perplexity_api_key,
            "openai": self.openai_api_key,
        }
        return mapping.get(provider, "")

    def has_key_for_provider(self, provider: str) -> bool:
        """Check if API key is configured for provider."""
        return bool(self.get_key_for_provider(provider))


@dataclass
class AuthCredentials:
    """Supabase Auth settings used to verify access tokens."""
    jwt_secret: str = ""
    algorithm: str = "HS256"
    audience: str = "authenticated"

    @classmethod
    def from_env(cls) -> "AuthCredentials":
        return cls(
            jwt_secret=os.getenv("SUPABASE_JWT_SECRET", ""),
            algorithm=os.getenv("SUPABASE_JWT_ALGORITHM", "HS256"),
            audience=os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated"),
        )

    def is_valid(self) -> bool:
        return bool(self.jwt_secret)


@dataclass
class Config:
    """Main configuration container."""
    scan: ScanConfig = field(default_factory=ScanConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Credentials (loaded from environment)
    reddit: RedditCredentials = field(default_factory=RedditCredentials.from_env)
    llm_credentials: LLMCredentials = field(default_factory=LLMCredentials.from_env)
    auth: AuthCredentials = field(default_factory=AuthCredentials.from_env)


def _dict_to_dataclass(data: dict[str, Any], cls: type) -> Any:
    """Convert a dictionary to a dataclass instance, ignoring unknown keys."""
    if not data:
        return cls()

    field_names = set(cls.__dataclass_fields__)
    kwargs = {key: value for key, value in data.items() if key in field_names}
    return cls(**kwargs)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, loads default config.

    Returns:
        Config object with all settings.
    """
    if config_path is None:
        # Check for local config first, then default
        local_config = Path("config/local.yaml")
        default_config = Path("config/default.yaml")

        if local_config.exists():
            config_path = local_config
        elif default_config.exists():
            config_path = default_config
        else:
            return Config()

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    return Config(
        scan=_dict_to_dataclass(data.get("scan", {}), ScanConfig),
        llm=_dict_to_dataclass(data.get("llm", {}), LLMConfig),
        database=_dict_to_dataclass(data.get("database", {}), DatabaseConfig),
        server=_dict_to_dataclass(data.get("server", {}), ServerConfig),
        logging=_dict_to_dataclass(data.get("logging", {}), LoggingConfig),
        reddit=RedditCredentials.from_env(),
        llm_credentials=LLMCredentials.from_env(),
        auth=AuthCredentials.from_env(),
    )


def configure_logging(config: Config | None = None) -> None:
    """Configure root logging from the logging section."""
    settings = (config or get_config()).logging
    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=settings.format,
        datefmt=settings.datefmt,
    )


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: str | Path | None = None) -> Config:
    """Reload configuration from file."""
    global _config
    _config = load_config(config_path)
    return _config
