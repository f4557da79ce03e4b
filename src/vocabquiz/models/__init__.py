"""Data models for the quiz engine and its durable store."""
