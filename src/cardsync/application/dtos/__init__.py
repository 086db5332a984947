"""Application layer data transfer objects."""
