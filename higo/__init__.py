"""Building blocks for web applications: SQL fragments and statements, an event bus, rate limiting, error codes, background tasks and code-generation helpers."""

__version__ = "0.1.0"

__all__ = ["sqlexpr", "statement", "event", "ratelimit", "errcode", "tasks", "generators"]