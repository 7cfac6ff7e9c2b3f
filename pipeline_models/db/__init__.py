"""Database connection management for pipeline-models."""

from pipeline_models.db.connection import close_pool, get_connection, get_pool

__all__ = ["close_pool", "get_connection", "get_pool"]
