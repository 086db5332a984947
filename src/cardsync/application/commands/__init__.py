"""Application commands."""
