"""Persistence: engine/session plumbing, ORM models and repositories."""
