"""Request schemas (pydantic)."""
