"""HTTP API for the retrieval engine."""
