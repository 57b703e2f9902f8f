"""Database declarations: the shared declarative Base and column types for all ORM models."""
