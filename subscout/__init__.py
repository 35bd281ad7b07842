"""SubScout - find your users' pain points on Reddit."""

__version__ = "0.1.0"
