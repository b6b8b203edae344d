"""SQLite schema, connection pool and data models."""
