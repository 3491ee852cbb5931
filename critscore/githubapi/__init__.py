"""GitHub REST and GraphQL helpers: retry strategies, errors, batching and pagination."""

__all__ = ["client", "errors", "pagination", "roundtripper"]