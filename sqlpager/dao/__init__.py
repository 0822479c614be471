"""Query construction and pagination over SQLAlchemy ORM models."""
