"""Persistence: engine/session, ORM models, query compiler, repositories."""
