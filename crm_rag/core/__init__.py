"""Core retrieval logic: scoring, loading, caching, ranking and formatting."""
