"""HTTP API for the slate recommender."""
