"""Database engine helpers and ORM tables."""
