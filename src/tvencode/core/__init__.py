"""Core encoding components."""
