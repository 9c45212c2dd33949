"""Data models for TVEncode."""
